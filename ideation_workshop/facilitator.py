#!/usr/bin/env python3
"""
Ideation Workshop - Facilitator

Service layer used by the phase views. Connects the stores, the prompt
builder/parsers and the generative client.

Every generation captures the target idea id before awaiting and
re-checks it afterwards: if that idea is no longer the current idea (or
was deleted) the response is discarded instead of being attached to
whatever is current now.
"""

import copy
from contextlib import contextmanager
from typing import List, Optional, TYPE_CHECKING

from .client import GenerationError
from .models import (
    COMBINATION_CATEGORIES,
    Card,
    CardCategory,
    CardCombination,
    ChatMessage,
    EvaluationCriteria,
    Idea,
    MessageAction,
    MessageType,
    Refinement,
    Storyboard,
    WorkshopPhase,
    new_id,
)
from .parsing import match_catalog_suggestions, normalize_creative_response, parse_storyboard_steps
from .prompts import Command, PromptBuilder, describe_card_changes, parse_command
from .selection import SelectionError
from .templates import (
    CARD_CHANGE_NOTICE,
    FALLBACK_WELCOME,
    HELP_TEXT,
    SUGGESTION_APPLIED,
    format_default_pitch,
)

if TYPE_CHECKING:
    from .catalog import CardCatalog
    from .client import GenerativeClient
    from .evaluations import EvaluationStore
    from .logger import WorkshopLogger
    from .selection import CardSelection
    from .store import WorkshopStore


class NoCurrentIdeaError(RuntimeError):
    """Raised when a phase operation runs without a current idea."""


class WorkshopFacilitator:
    """Runs refinement chat, storyboard, evaluation and pitch flows for the current idea."""

    def __init__(
        self,
        store: "WorkshopStore",
        evaluations: "EvaluationStore",
        catalog: "CardCatalog",
        client: "GenerativeClient",
        logger: Optional["WorkshopLogger"] = None,
    ) -> None:
        self._store = store
        self._evaluations = evaluations
        self._catalog = catalog
        self._client = client
        self._logger = logger
        self._busy: set = set()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _log(self, message: str) -> None:
        if self._logger:
            self._logger.log_facilitator(message)

    def _require_idea(self) -> Idea:
        idea = self._store.current_idea
        if idea is None or self._store.get_idea(idea.id) is None:
            raise NoCurrentIdeaError("No stored idea is selected")
        return idea

    def _still_current(self, idea_id: str, command: str) -> Optional[Idea]:
        """Resolve the idea again after an await; None means discard."""
        idea = self._store.get_idea(idea_id)
        if idea is None or self._store.current_idea_id != idea_id:
            if self._logger:
                self._logger.log_discarded_response(command, idea_id)
            return None
        return idea

    def _workshop_for(self, idea: Idea):
        return self._store.get_workshop(idea.workshop_id) or self._store.current_workshop

    def _append_messages(self, idea: Idea, *messages: ChatMessage, **changes) -> None:
        self._store.update_idea(idea.id, chat_history=idea.chat_history + list(messages), **changes)

    @contextmanager
    def _generating(self, idea_id: str):
        self._busy.add(idea_id)
        try:
            yield
        finally:
            self._busy.discard(idea_id)

    def is_busy(self, idea_id: str) -> bool:
        """Whether a generation for this idea is in flight."""
        return idea_id in self._busy

    # =========================================================================
    # Navigation
    # =========================================================================

    def enter_phase(self, phase: WorkshopPhase) -> None:
        """
        Move the session to phase.

        Raises:
            NoCurrentIdeaError: if phase works on an idea and none is selected
        """
        if phase.requires_idea:
            self._require_idea()
        self._store.set_current_phase(phase)
        self._log(f"Entered {phase.value} phase")

    # =========================================================================
    # Ideation
    # =========================================================================

    async def save_selection(self, selection: "CardSelection", idea: Optional[Idea] = None) -> Idea:
        """
        Persist a card selection as a new idea, or as an edit of idea.

        Moves the session to the refinement phase. Edits of ideas that
        already have chat history also post a card-change notification.

        Raises:
            SelectionError: if the selection cannot be saved
        """
        if not selection.can_save():
            raise SelectionError("Select at least one card, describe the idea and change something before saving")

        combination = selection.build()
        if idea is None:
            workshop = self._store.current_workshop
            existing = len(self._store.ideas_for_workshop(workshop.id)) if workshop else 0
            saved = self._store.create_idea(
                title=selection.suggested_title(existing),
                description=selection.description.strip(),
                card_combination=combination,
            )
            self._store.set_current_idea(saved)
            self._store.set_current_phase(WorkshopPhase.REFINEMENT)
            return saved

        before = idea.card_combination
        has_named_cards = bool(combination.cards(CardCategory.THING) or combination.cards(CardCategory.SENSOR))
        saved = self._store.update_idea(
            idea.id,
            title=selection.suggested_title() if has_named_cards else idea.title,
            description=selection.description.strip(),
            card_combination=combination,
        )
        if saved is None:
            return idea
        self._store.set_current_idea(saved)
        self._store.set_current_phase(WorkshopPhase.REFINEMENT)
        await self.notify_card_change(saved.id, before, combination)
        return saved

    # =========================================================================
    # Refinement chat
    # =========================================================================

    async def send_message(self, text: str) -> Optional[ChatMessage]:
        """
        Handle a chat message for the current idea.

        The user message is stored right away. The reply is an AI
        message, or a system message carrying the advisory when
        generation fails.

        Returns:
            The reply, or None if it was discarded because the current
            idea changed while waiting
        """
        idea = self._require_idea()
        command, message = parse_command(text)

        user_message = ChatMessage(id=new_id(), type=MessageType.USER, content=text.strip())
        self._append_messages(idea, user_message)
        idea = self._store.get_idea(idea.id)

        if command.is_local:
            reply = ChatMessage(id=new_id(), type=MessageType.AI, content=HELP_TEXT, action=command.action)
            self._append_messages(idea, reply)
            return reply

        workshop = self._workshop_for(idea)
        prompt = PromptBuilder.build_command_prompt(command, idea, workshop, message=message)
        idea_id = idea.id

        with self._generating(idea_id):
            try:
                response = await self._client.generate(prompt, command.value)
            except GenerationError as e:
                idea = self._still_current(idea_id, command.value)
                if idea is None:
                    return None
                reply = ChatMessage(id=new_id(), type=MessageType.SYSTEM, content=str(e))
                self._append_messages(idea, reply)
                return reply

        idea = self._still_current(idea_id, command.value)
        if idea is None:
            return None

        reply = ChatMessage(id=new_id(), type=MessageType.AI, content=response, action=command.action)
        if command is Command.CREATIVE:
            reply.content = normalize_creative_response(response).content
            reply.card_suggestions = match_catalog_suggestions(
                response,
                self._catalog,
                exclude_ids={card.id for _, card in idea.card_combination.all_cards()},
            )

        changes = {}
        if command.refinement_type is not None:
            refinement = Refinement(
                id=new_id(),
                idea_id=idea_id,
                type=command.refinement_type,
                question=text.strip(),
                response=response,
            )
            changes["refinements"] = idea.refinements + [refinement]

        self._append_messages(idea, reply, **changes)
        return reply

    async def ensure_welcome_message(self) -> Optional[ChatMessage]:
        """
        Post the one-time welcome message for the current idea.

        Does nothing when the idea already has chat history. Falls back
        to a fixed welcome text when generation fails.
        """
        idea = self._require_idea()
        if idea.chat_history:
            return None

        idea_id = idea.id
        with self._generating(idea_id):
            try:
                content = await self._client.generate(
                    PromptBuilder.build_welcome_prompt(idea, self._workshop_for(idea)),
                    "welcome",
                )
            except GenerationError:
                content = FALLBACK_WELCOME.format(title=idea.title)

        idea = self._still_current(idea_id, "welcome")
        if idea is None or idea.chat_history:
            return None

        welcome = ChatMessage(id=new_id(), type=MessageType.AI, content=content.strip(), action=MessageAction.INFO)
        self._append_messages(idea, welcome)
        return welcome

    async def notify_card_change(
        self,
        idea_id: str,
        before: CardCombination,
        after: CardCombination,
    ) -> Optional[ChatMessage]:
        """
        Tell the assistant about a changed card combination.

        Only ideas with chat history are notified. Posts a system notice,
        then the assistant's reply (or the advisory on failure).
        """
        idea = self._store.get_idea(idea_id)
        if idea is None or not idea.chat_history:
            return None
        change_summary = describe_card_changes(before, after)
        if not change_summary:
            return None

        notice = ChatMessage(id=new_id(), type=MessageType.SYSTEM, content=CARD_CHANGE_NOTICE, action=MessageAction.INFO)
        self._append_messages(idea, notice)
        idea = self._store.get_idea(idea_id)
        self._log(f"Card change for {idea_id}: {change_summary}")

        prompt = PromptBuilder.build_command_prompt(
            Command.CARDS_CHANGED, idea, self._workshop_for(idea), change_summary=change_summary,
        )
        with self._generating(idea_id):
            try:
                response = await self._client.generate(prompt, Command.CARDS_CHANGED.value)
                reply = ChatMessage(
                    id=new_id(), type=MessageType.AI, content=response, action=Command.CARDS_CHANGED.action,
                )
            except GenerationError as e:
                reply = ChatMessage(id=new_id(), type=MessageType.SYSTEM, content=str(e))

        idea = self._still_current(idea_id, Command.CARDS_CHANGED.value)
        if idea is None:
            return None
        self._append_messages(idea, reply)
        return reply

    def apply_card_suggestion(self, idea_id: str, category: CardCategory, card: Card) -> Optional[ChatMessage]:
        """
        Make a suggested card the idea's card for its category.

        Returns:
            The confirmation message, or None if the idea does not exist
        """
        idea = self._store.get_idea(idea_id)
        if idea is None or category not in COMBINATION_CATEGORIES:
            return None

        combination = copy.deepcopy(idea.card_combination)
        combination.set_primary(category, card)
        confirmation = ChatMessage(
            id=new_id(),
            type=MessageType.SYSTEM,
            content=SUGGESTION_APPLIED.format(name=card.name, category=category.value),
            action=MessageAction.INFO,
        )
        self._append_messages(idea, confirmation, card_combination=combination)
        self._log(f"Suggestion applied to {idea_id}: {category.value} {card.name}")
        return confirmation

    # =========================================================================
    # Storyboard
    # =========================================================================

    async def generate_storyboard(self) -> Optional[Storyboard]:
        """
        Generate an 8-step storyboard for the current idea.

        An existing storyboard keeps its id and createdAt; its steps are
        replaced.

        Raises:
            GenerationError: if the service call fails
        """
        idea = self._require_idea()
        idea_id = idea.id
        prompt = PromptBuilder.build_storyboard_prompt(idea, self._workshop_for(idea))

        with self._generating(idea_id):
            response = await self._client.generate(prompt, "storyboard")

        idea = self._still_current(idea_id, "storyboard")
        if idea is None:
            return None

        storyboard = Storyboard.from_descriptions(idea_id, parse_storyboard_steps(response))
        if idea.storyboard is not None:
            storyboard.id = idea.storyboard.id
            storyboard.created_at = idea.storyboard.created_at
        self._store.update_idea(idea_id, storyboard=storyboard)
        return storyboard

    # =========================================================================
    # Evaluation
    # =========================================================================

    def toggle_criteria(self, idea_id: str, criteria_id: str) -> bool:
        return self._evaluations.toggle_criteria(idea_id, criteria_id)

    def save_evaluation(self, idea_id: str, responses: List[EvaluationCriteria]):
        """Store criteria responses and mirror the evaluation onto the idea."""
        evaluation = self._evaluations.update_criteria_responses(idea_id, responses)
        self._store.update_idea(idea_id, evaluation=evaluation)
        return evaluation

    # =========================================================================
    # Elevator pitch
    # =========================================================================

    def can_pitch(self, idea_id: str) -> bool:
        """The pitch view opens once at least one criterion is selected."""
        return bool(self._evaluations.selected_criteria(idea_id))

    async def generate_elevator_pitch(self) -> Optional[str]:
        """
        Generate and store an elevator pitch for the current idea.

        Falls back to a template pitch when generation fails.
        """
        idea = self._require_idea()
        idea_id = idea.id
        evaluation = self._evaluations.get_evaluation(idea_id) or idea.evaluation
        prompt = PromptBuilder.build_elevator_pitch_prompt(idea, self._workshop_for(idea), evaluation)

        with self._generating(idea_id):
            try:
                pitch = (await self._client.generate(prompt, "elevator_pitch")).strip()
            except GenerationError:
                pitch = ""

        idea = self._still_current(idea_id, "elevator_pitch")
        if idea is None:
            return None

        if not pitch:
            thing = idea.card_combination.primary(CardCategory.THING)
            sensor = idea.card_combination.primary(CardCategory.SENSOR)
            pitch = format_default_pitch(
                title=idea.title,
                thing=thing.name if thing else "",
                sensor=sensor.name if sensor else "",
            )
        self._store.update_idea(idea_id, elevator_pitch=pitch)
        return pitch

    # =========================================================================
    # Deletion
    # =========================================================================

    def delete_idea(self, idea_id: str) -> None:
        if self._store.delete_idea(idea_id):
            self._evaluations.forget_idea(idea_id)

    def delete_workshop(self, workshop_id: str) -> None:
        for idea_id in self._store.delete_workshop(workshop_id):
            self._evaluations.forget_idea(idea_id)
