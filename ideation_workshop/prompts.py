#!/usr/bin/env python3
"""
Ideation Workshop - Prompt Builder

Builds generation prompts from an idea, its optional workshop and a
command. Every function here is deterministic: same inputs, same prompt.
"""

from enum import Enum
from typing import List, Optional, Tuple

from .models import (
    COMBINATION_CATEGORIES,
    CardCombination,
    Evaluation,
    Idea,
    MessageAction,
    RefinementType,
    Workshop,
)
from .templates import (
    ASSISTANT_INTRO,
    CARDS_CHANGED_INSTRUCTIONS,
    CHAT_INSTRUCTIONS,
    CREATIVE_INSTRUCTIONS,
    ELEVATOR_PITCH_INSTRUCTIONS,
    EVALUATION_SECTION,
    IDEA_CONTEXT,
    NOT_SPECIFIED,
    PROVOKE_INSTRUCTIONS,
    REFLECT_INSTRUCTIONS,
    STORYBOARD_INSTRUCTIONS,
    STORYBOARD_SECTION,
    STORYBOARD_STEP_COUNT,
    WELCOME_INSTRUCTIONS,
    WORKSHOP_CONTEXT,
    format_bullets,
    format_storyboard_flow,
)


class Command(Enum):
    """Refinement chat commands."""
    REFLECT = "reflect"
    CREATIVE = "creative"
    PROVOKE = "provoke"
    HELP = "help"
    CHAT = "chat"
    CARDS_CHANGED = "cards_changed"

    @property
    def is_local(self) -> bool:
        """Served without a generation call."""
        return self is Command.HELP

    @property
    def action(self) -> MessageAction:
        return _COMMAND_ACTIONS[self]

    @property
    def refinement_type(self) -> Optional[RefinementType]:
        """Refinement record type, for commands that produce one."""
        return _COMMAND_REFINEMENTS.get(self)


_COMMAND_ACTIONS = {
    Command.REFLECT: MessageAction.REFLECT,
    Command.CREATIVE: MessageAction.CREATIVE,
    Command.PROVOKE: MessageAction.PROVOKE,
    Command.HELP: MessageAction.INFO,
    Command.CHAT: MessageAction.SUGGESTION,
    Command.CARDS_CHANGED: MessageAction.INFO,
}

_COMMAND_REFINEMENTS = {
    Command.REFLECT: RefinementType.REFLECT,
    Command.CREATIVE: RefinementType.CREATIVE,
    Command.PROVOKE: RefinementType.PROVOKE,
}

# Typed slash commands; CARDS_CHANGED is internal only.
_SLASH_COMMANDS = {
    "/reflect": Command.REFLECT,
    "/creative": Command.CREATIVE,
    "/provoke": Command.PROVOKE,
    "/help": Command.HELP,
}


def parse_command(text: str) -> Tuple[Command, str]:
    """
    Detect a slash command at the start of a chat message.

    Returns:
        (command, remaining text). Unrecognized input is CHAT with the
        whole stripped message.
    """
    stripped = text.strip()
    head, _, rest = stripped.partition(" ")
    command = _SLASH_COMMANDS.get(head.lower())
    if command is None:
        return Command.CHAT, stripped
    return command, rest.strip()


def describe_card_changes(before: CardCombination, after: CardCombination) -> str:
    """
    Summarize what changed between two combinations.

    Single-card categories that swapped read "Changed thing: from A to B";
    other differences are listed as Added/Removed per card.
    """
    changes: List[str] = []
    for category in COMBINATION_CATEGORIES:
        old_cards = before.cards(category)
        new_cards = after.cards(category)
        old_ids = {card.id for card in old_cards}
        new_ids = {card.id for card in new_cards}
        removed = [card for card in old_cards if card.id not in new_ids]
        added = [card for card in new_cards if card.id not in old_ids]

        if len(removed) == 1 and len(added) == 1:
            changes.append(f"Changed {category.value}: from {removed[0].name} to {added[0].name}")
            continue
        changes.extend(f"Added {category.value}: {card.name}" for card in added)
        changes.extend(f"Removed {category.value}: {card.name}" for card in removed)
    return ", ".join(changes)


class PromptBuilder:
    """
    Builds prompts for the refinement chat, storyboard and pitch.

    Each prompt embeds the idea (title, description, every selected
    card) and, when given, the workshop context.
    """

    @staticmethod
    def format_card_lines(combination: CardCombination) -> str:
        lines = []
        for category in COMBINATION_CATEGORIES:
            cards = combination.cards(category)
            if cards:
                names = ", ".join(
                    f"{card.name} ({card.description})" if card.description else card.name
                    for card in cards
                )
            else:
                names = NOT_SPECIFIED
            lines.append(f"{category.label}: {names}")
        return format_bullets(lines)

    @staticmethod
    def build_workshop_context(workshop: Optional[Workshop]) -> str:
        if workshop is None:
            return ""
        return WORKSHOP_CONTEXT.format(
            name=workshop.name or NOT_SPECIFIED,
            description=workshop.description or NOT_SPECIFIED,
            mission_goal=workshop.mission.goal if workshop.mission and workshop.mission.goal else NOT_SPECIFIED,
            persona_description=workshop.persona.description if workshop.persona else NOT_SPECIFIED,
            scenario_description=workshop.scenario.description if workshop.scenario else NOT_SPECIFIED,
        )

    @staticmethod
    def build_idea_context(idea: Idea, workshop: Optional[Workshop] = None) -> str:
        """Assistant intro, idea section and optional workshop section."""
        sections = [
            ASSISTANT_INTRO,
            IDEA_CONTEXT.format(
                card_lines=PromptBuilder.format_card_lines(idea.card_combination),
                title=idea.title,
                description=idea.description,
            ),
        ]
        workshop_context = PromptBuilder.build_workshop_context(workshop)
        if workshop_context:
            sections.append(workshop_context)
        return "\n\n".join(sections)

    @staticmethod
    def build_command_prompt(
        command: Command,
        idea: Idea,
        workshop: Optional[Workshop] = None,
        message: str = "",
        change_summary: str = "",
    ) -> Optional[str]:
        """
        Build the prompt for a chat command.

        Returns:
            Prompt text, or None for commands served locally (help)
        """
        if command.is_local:
            return None

        if command is Command.REFLECT:
            instructions = REFLECT_INSTRUCTIONS
        elif command is Command.CREATIVE:
            instructions = CREATIVE_INSTRUCTIONS
        elif command is Command.PROVOKE:
            instructions = PROVOKE_INSTRUCTIONS
        elif command is Command.CARDS_CHANGED:
            instructions = CARDS_CHANGED_INSTRUCTIONS.format(change_summary=change_summary)
        else:
            instructions = CHAT_INSTRUCTIONS.format(message=message)

        return f"{PromptBuilder.build_idea_context(idea, workshop)}\n\n{instructions}"

    @staticmethod
    def build_welcome_prompt(idea: Idea, workshop: Optional[Workshop] = None) -> str:
        return f"{PromptBuilder.build_idea_context(idea, workshop)}\n\n{WELCOME_INSTRUCTIONS}"

    @staticmethod
    def build_storyboard_prompt(idea: Idea, workshop: Optional[Workshop] = None) -> str:
        instructions = STORYBOARD_INSTRUCTIONS.format(
            count=STORYBOARD_STEP_COUNT,
            flow=format_storyboard_flow(),
        )
        return f"{PromptBuilder.build_idea_context(idea, workshop)}\n\n{instructions}"

    @staticmethod
    def build_elevator_pitch_prompt(
        idea: Idea,
        workshop: Optional[Workshop] = None,
        evaluation: Optional[Evaluation] = None,
    ) -> str:
        """
        Build the elevator pitch prompt.

        Storyboard steps and answered evaluation criteria are included
        when present. evaluation defaults to the one on the idea.
        """
        sections = [PromptBuilder.build_idea_context(idea, workshop)]

        if idea.storyboard and idea.storyboard.steps:
            steps = [
                f"{step.order}. {step.description}"
                for step in sorted(idea.storyboard.steps, key=lambda s: s.order)
            ]
            sections.append(STORYBOARD_SECTION.format(steps="\n".join(steps)))

        evaluation = evaluation or idea.evaluation
        answered = evaluation.answered() if evaluation else []
        if answered:
            entries = format_bullets(
                [f"{entry.criteria.name}: {entry.response.strip()}" for entry in answered]
            )
            sections.append(EVALUATION_SECTION.format(entries=entries))

        sections.append(ELEVATOR_PITCH_INSTRUCTIONS)
        return "\n\n".join(sections)
