#!/usr/bin/env python3
"""
Ideation Workshop - Evaluation Store

Per-idea evaluation data, kept apart from the Idea entities:
    selected_criteria -> {ideaId: [criteriaId, ...]}      (at most 3 via toggle)
    evaluations       -> {ideaId: Evaluation.to_dict()}
    custom_criteria   -> {ideaId: [CriteriaCard.to_dict(), ...]}
"""

import json
import time
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from .catalog import card_type_tag
from .models import (
    CardCategory,
    CriteriaCard,
    Evaluation,
    EvaluationCriteria,
    card_from_dict,
    new_id,
    now_iso,
)
from .storage import CUSTOM_CRITERIA_KEY, EVALUATIONS_KEY, SELECTED_CRITERIA_KEY

if TYPE_CHECKING:
    from .catalog import CardCatalog
    from .logger import WorkshopLogger


MAX_SELECTED_CRITERIA = 3


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class EvaluationStore:
    """Selected criteria, criteria responses and custom criteria per idea."""

    def __init__(
        self,
        storage,
        logger: Optional["WorkshopLogger"] = None,
        clock: Callable[[], int] = _epoch_ms,
    ):
        self._storage = storage
        self._logger = logger
        self._clock = clock
        self._selected: Dict[str, List[str]] = {
            idea_id: ids for idea_id, ids in self._load(SELECTED_CRITERIA_KEY).items()
            if isinstance(ids, list) and all(isinstance(i, str) for i in ids)
        }
        self._evaluations: Dict[str, Evaluation] = self._load_entries(
            EVALUATIONS_KEY, Evaluation.from_dict,
        )
        self._custom: Dict[str, List[CriteriaCard]] = self._load_entries(
            CUSTOM_CRITERIA_KEY, lambda cards: [card_from_dict(card) for card in cards],
        )

    # --- Persistence ---

    def _load(self, key: str) -> dict:
        try:
            raw = self._storage.get(key)
            if raw is None:
                return {}
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError) as e:
            self._log_error(f"Could not load {key}, starting empty", e)
            return {}
        return data if isinstance(data, dict) else {}

    def _load_entries(self, key: str, factory) -> dict:
        try:
            return {idea_id: factory(value) for idea_id, value in self._load(key).items()}
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            self._log_error(f"Could not load {key}, starting empty", e)
            return {}

    def _persist(self, key: str, data: dict) -> None:
        try:
            self._storage.set(key, json.dumps(data))
        except (OSError, TypeError, ValueError) as e:
            self._log_error(f"Failed to persist {key}", e)

    def _save_selected(self) -> None:
        self._persist(SELECTED_CRITERIA_KEY, self._selected)

    def _save_evaluations(self) -> None:
        self._persist(
            EVALUATIONS_KEY,
            {idea_id: evaluation.to_dict() for idea_id, evaluation in self._evaluations.items()},
        )

    def _save_custom(self) -> None:
        self._persist(
            CUSTOM_CRITERIA_KEY,
            {idea_id: [card.to_dict() for card in cards] for idea_id, cards in self._custom.items()},
        )

    def _log_error(self, message: str, error: Exception) -> None:
        if self._logger:
            self._logger.log_error(message, error)

    # --- Selected criteria ---

    def selected_criteria(self, idea_id: str) -> List[str]:
        return list(self._selected.get(idea_id, []))

    def update_selected_criteria(self, idea_id: str, criteria_ids: List[str]) -> None:
        """Replace the selection for an idea. The cap is the caller's job."""
        self._selected[idea_id] = list(criteria_ids)
        self._save_selected()
        if self._logger:
            self._logger.log_evaluation(f"Selected criteria for {idea_id}: {', '.join(criteria_ids) or 'none'}")

    def toggle_criteria(self, idea_id: str, criteria_id: str) -> bool:
        """
        Select or deselect a criteria id.

        Deselects when already selected, selects when fewer than
        MAX_SELECTED_CRITERIA are selected, otherwise rejects.

        Returns:
            False if the toggle was rejected
        """
        current = self.selected_criteria(idea_id)
        if criteria_id in current:
            current.remove(criteria_id)
        elif len(current) < MAX_SELECTED_CRITERIA:
            current.append(criteria_id)
        else:
            return False
        self.update_selected_criteria(idea_id, current)
        return True

    # --- Responses ---

    def get_evaluation(self, idea_id: str) -> Optional[Evaluation]:
        return self._evaluations.get(idea_id)

    def update_criteria_responses(
        self,
        idea_id: str,
        criteria_responses: List[EvaluationCriteria],
    ) -> Evaluation:
        """Replace an idea's responses, keeping the evaluation id and createdAt."""
        now = now_iso()
        existing = self._evaluations.get(idea_id)
        evaluation = Evaluation(
            id=existing.id if existing else new_id(),
            idea_id=idea_id,
            criteria=list(criteria_responses),
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        self._evaluations[idea_id] = evaluation
        self._save_evaluations()
        if self._logger:
            self._logger.log_evaluation(
                f"Responses saved for {idea_id}: {len(evaluation.answered())}/{len(evaluation.criteria)} answered"
            )
        return evaluation

    def response_for(self, idea_id: str, criteria_id: str) -> str:
        evaluation = self._evaluations.get(idea_id)
        if evaluation is None:
            return ""
        for entry in evaluation.criteria:
            if entry.criteria.id == criteria_id:
                return entry.response
        return ""

    def default_responses(self, idea_id: str, criteria: List[CriteriaCard]) -> List[EvaluationCriteria]:
        """One entry per criteria card, pre-filled with any saved response."""
        return [
            EvaluationCriteria(criteria=card, response=self.response_for(idea_id, card.id))
            for card in criteria
        ]

    # --- Custom criteria ---

    def create_custom_criteria(
        self,
        idea_id: str,
        name: str,
        description: str = "",
        question: str = "",
    ) -> CriteriaCard:
        """Create a criteria card scoped to one idea (id custom-<ideaId>-<ms>)."""
        taken = {card.id for card in self._custom.get(idea_id, [])}
        stamp = self._clock()
        criteria_id = f"custom-{idea_id}-{stamp}"
        while criteria_id in taken:
            stamp += 1
            criteria_id = f"custom-{idea_id}-{stamp}"

        card = CriteriaCard(
            id=criteria_id,
            type=card_type_tag(CardCategory.CRITERIA),
            name=name.strip(),
            description=description.strip(),
            question=question.strip(),
        )
        self._custom.setdefault(idea_id, []).append(card)
        self._save_custom()
        if self._logger:
            self._logger.log_evaluation(f"Custom criteria created: {criteria_id} ({card.name})")
        return card

    def custom_criteria(self, idea_id: str) -> List[CriteriaCard]:
        prefix = f"custom-{idea_id}-"
        return [
            card
            for cards in self._custom.values()
            for card in cards
            if card.id.startswith(prefix)
        ]

    def criteria_for_idea(self, idea_id: str, catalog: "CardCatalog") -> List[CriteriaCard]:
        """Catalog criteria (placeholder excluded) followed by the idea's custom criteria."""
        return catalog.selectable(CardCategory.CRITERIA) + self.custom_criteria(idea_id)

    def selected_cards(self, idea_id: str, catalog: "CardCatalog") -> List[CriteriaCard]:
        by_id = {card.id: card for card in self.criteria_for_idea(idea_id, catalog)}
        return [by_id[cid] for cid in self.selected_criteria(idea_id) if cid in by_id]

    def forget_idea(self, idea_id: str) -> None:
        """Drop everything stored for an idea."""
        changed = False
        if self._selected.pop(idea_id, None) is not None:
            self._save_selected()
            changed = True
        if self._evaluations.pop(idea_id, None) is not None:
            self._save_evaluations()
            changed = True
        if self._custom.pop(idea_id, None) is not None:
            self._save_custom()
            changed = True
        if changed and self._logger:
            self._logger.log_evaluation(f"Evaluation data removed for {idea_id}")
