#!/usr/bin/env python3
"""
Ideation Workshop - Workshop/Idea Store

Single owner of all Workshop and Idea entities, the current-selection
pointers and the active phase. Every mutation is written through to
storage right away.

Persisted keys:
    workshops -> JSON list of Workshop.to_dict()
    ideas     -> JSON list of Idea.to_dict()

Unknown ids on update/delete are ignored. Storage failures are logged
and swallowed; the in-memory collections stay authoritative.
"""

import copy
import json
from typing import List, Optional, TYPE_CHECKING

from .models import (
    CardCombination,
    Idea,
    Workshop,
    WorkshopPhase,
    new_id,
    now_iso,
)
from .storage import IDEAS_KEY, WORKSHOPS_KEY

if TYPE_CHECKING:
    from .logger import WorkshopLogger


class NoCurrentWorkshopError(RuntimeError):
    """Raised when an idea is created without a current workshop."""


# Fields callers may not overwrite through update_*
_PROTECTED_FIELDS = {"id", "created_at", "updated_at"}
_SNAPSHOT_FIELDS = {"mission", "persona", "scenario"}


class WorkshopStore:
    """
    Workshop and idea collections with write-through persistence.

    Current workshop/idea are held as ids and resolved against the
    collections on every read, so updates are visible through them.
    """

    def __init__(self, storage, logger: Optional["WorkshopLogger"] = None):
        """
        Initialize store and load persisted collections.

        Args:
            storage: Key-value storage (JsonFileStorage or MemoryStorage)
            logger: Optional logger for mutations and persistence errors
        """
        self._storage = storage
        self._logger = logger
        self._workshops: List[Workshop] = self._load(WORKSHOPS_KEY, Workshop.from_dict)
        self._ideas: List[Idea] = self._load(IDEAS_KEY, Idea.from_dict)

        self._current_workshop_id: Optional[str] = None
        self._current_workshop_fallback: Optional[Workshop] = None
        self._current_idea_id: Optional[str] = None
        self._current_idea_fallback: Optional[Idea] = None
        self.current_phase = WorkshopPhase.IDEATION

    # --- Persistence ---

    def _load(self, key: str, factory) -> list:
        """Load a collection, returning empty on absence or corruption."""
        try:
            raw = self._storage.get(key)
            if raw is None:
                return []
            data = json.loads(raw)
            if not isinstance(data, list):
                raise TypeError(f"expected a list, got {type(data).__name__}")
            return [factory(entry) for entry in data]
        except (OSError, json.JSONDecodeError, AttributeError, TypeError, KeyError, ValueError) as e:
            self._log_error(f"Could not load {key}, starting empty", e)
            return []

    def _persist(self, key: str, items: list) -> None:
        try:
            self._storage.set(key, json.dumps([item.to_dict() for item in items]))
        except (OSError, TypeError, ValueError) as e:
            self._log_error(f"Failed to persist {key}", e)

    def _save_workshops(self) -> None:
        self._persist(WORKSHOPS_KEY, self._workshops)

    def _save_ideas(self) -> None:
        self._persist(IDEAS_KEY, self._ideas)

    def _log(self, message: str) -> None:
        if self._logger:
            self._logger.log_store(message)

    def _log_error(self, message: str, error: Exception) -> None:
        if self._logger:
            self._logger.log_error(message, error)

    # --- Workshops ---

    @property
    def workshops(self) -> List[Workshop]:
        return list(self._workshops)

    def get_workshop(self, workshop_id: str) -> Optional[Workshop]:
        for workshop in self._workshops:
            if workshop.id == workshop_id:
                return workshop
        return None

    def create_workshop(
        self,
        name: str,
        date: str = "",
        facilitator_name: str = "",
        description: str = "",
        mission=None,
        persona=None,
        scenario=None,
    ) -> Workshop:
        """Create and persist a workshop. Context cards are copied."""
        now = now_iso()
        workshop = Workshop(
            id=new_id(),
            name=name,
            date=date,
            facilitator_name=facilitator_name,
            description=description,
            mission=mission,
            persona=persona,
            scenario=scenario,
            created_at=now,
            updated_at=now,
        )
        self._workshops.append(workshop)
        self._save_workshops()
        self._log(f"Workshop created: {workshop.id} ({name})")
        return workshop

    def update_workshop(self, workshop_id: str, **changes) -> Optional[Workshop]:
        """Merge changes into a workshop. Returns None if the id is unknown."""
        workshop = self.get_workshop(workshop_id)
        if workshop is None:
            return None
        for key, value in changes.items():
            if key in _PROTECTED_FIELDS or not hasattr(workshop, key):
                continue
            if key in _SNAPSHOT_FIELDS:
                value = copy.deepcopy(value)
            setattr(workshop, key, value)
        workshop.updated_at = now_iso()
        self._save_workshops()
        self._log(f"Workshop updated: {workshop_id}")
        return workshop

    def delete_workshop(self, workshop_id: str) -> List[str]:
        """
        Delete a workshop and every idea that belongs to it.

        Returns:
            Ids of the ideas removed by the cascade
        """
        if self.get_workshop(workshop_id) is None:
            return []

        removed = [idea.id for idea in self._ideas if idea.workshop_id == workshop_id]
        self._workshops = [w for w in self._workshops if w.id != workshop_id]
        self._ideas = [idea for idea in self._ideas if idea.workshop_id != workshop_id]

        if self._current_workshop_id == workshop_id:
            self.set_current_workshop(None)
        if self._current_idea_id in removed:
            self.set_current_idea(None)

        self._save_workshops()
        self._save_ideas()
        self._log(f"Workshop deleted: {workshop_id} (cascade: {len(removed)} ideas)")
        return removed

    @property
    def current_workshop(self) -> Optional[Workshop]:
        if self._current_workshop_id is None:
            return None
        return self.get_workshop(self._current_workshop_id) or self._current_workshop_fallback

    def set_current_workshop(self, workshop: Optional[Workshop]) -> None:
        """Point at a workshop. No check that it is in the collection."""
        self._current_workshop_id = workshop.id if workshop else None
        self._current_workshop_fallback = workshop

    # --- Ideas ---

    @property
    def ideas(self) -> List[Idea]:
        return list(self._ideas)

    def ideas_for_workshop(self, workshop_id: str) -> List[Idea]:
        return [idea for idea in self._ideas if idea.workshop_id == workshop_id]

    def get_idea(self, idea_id: str) -> Optional[Idea]:
        for idea in self._ideas:
            if idea.id == idea_id:
                return idea
        return None

    def create_idea(self, **fields) -> Idea:
        """
        Create an idea in the current workshop.

        Raises:
            NoCurrentWorkshopError: if no current workshop is set
        """
        workshop = self.current_workshop
        if workshop is None:
            raise NoCurrentWorkshopError("Cannot create an idea without a current workshop")

        now = now_iso()
        idea = Idea(
            id=new_id(),
            workshop_id=workshop.id,
            title=fields.pop("title", None) or "New Idea",
            card_combination=fields.pop("card_combination", None) or CardCombination(),
            created_at=now,
            updated_at=now,
        )
        for key, value in fields.items():
            if key not in _PROTECTED_FIELDS and key != "workshop_id" and hasattr(idea, key):
                setattr(idea, key, value)

        self._ideas.append(idea)
        self._save_ideas()
        self._log(f"Idea created: {idea.id} in workshop {workshop.id} ({idea.title})")
        return idea

    def update_idea(self, idea_id: str, **changes) -> Optional[Idea]:
        """Merge changes into an idea. Returns None if the id is unknown."""
        idea = self.get_idea(idea_id)
        if idea is None:
            return None
        for key, value in changes.items():
            if key in _PROTECTED_FIELDS or key == "workshop_id" or not hasattr(idea, key):
                continue
            setattr(idea, key, value)
        idea.updated_at = now_iso()
        self._save_ideas()
        self._log(f"Idea updated: {idea_id} ({', '.join(sorted(changes)) or 'touch'})")
        return idea

    def delete_idea(self, idea_id: str) -> bool:
        if self.get_idea(idea_id) is None:
            return False
        self._ideas = [idea for idea in self._ideas if idea.id != idea_id]
        if self._current_idea_id == idea_id:
            self.set_current_idea(None)
        self._save_ideas()
        self._log(f"Idea deleted: {idea_id}")
        return True

    @property
    def current_idea(self) -> Optional[Idea]:
        if self._current_idea_id is None:
            return None
        return self.get_idea(self._current_idea_id) or self._current_idea_fallback

    @property
    def current_idea_id(self) -> Optional[str]:
        return self._current_idea_id

    def set_current_idea(self, idea: Optional[Idea]) -> None:
        self._current_idea_id = idea.id if idea else None
        self._current_idea_fallback = idea

    # --- Phase ---

    def set_current_phase(self, phase: WorkshopPhase) -> None:
        """Set the active phase. Gating is left to the views."""
        self.current_phase = phase
