#!/usr/bin/env python3
"""Workshop summary: per-idea progress overview and card usage counts."""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple, TYPE_CHECKING

from .models import COMBINATION_CATEGORIES, CardCategory, Idea, Workshop

if TYPE_CHECKING:
    from .evaluations import EvaluationStore
    from .store import WorkshopStore


@dataclass
class IdeaOverview:
    idea_id: str
    title: str
    description: str
    combination: str
    storyboard: str
    evaluation: str
    pitch: str
    refinements: str
    responses: List[Tuple[str, str]] = field(default_factory=list)
    elevator_pitch: str = ""


@dataclass
class CardUsage:
    card_id: str
    name: str
    count: int


@dataclass
class WorkshopSummary:
    workshop: Workshop
    ideas: List[IdeaOverview] = field(default_factory=list)
    card_usage: Dict[CardCategory, List[CardUsage]] = field(default_factory=dict)


def _plural(count: int, word: str, plural: str = "") -> str:
    return f"{count} {word}" if count == 1 else f"{count} {plural or word + 's'}"


def summarize_idea(idea: Idea, evaluations: "EvaluationStore") -> IdeaOverview:
    steps = len(idea.storyboard.steps) if idea.storyboard else 0
    selected = len(evaluations.selected_criteria(idea.id))
    evaluation = evaluations.get_evaluation(idea.id) or idea.evaluation
    responses = [
        (entry.criteria.name, entry.response.strip())
        for entry in (evaluation.answered() if evaluation else [])
    ]

    return IdeaOverview(
        idea_id=idea.id,
        title=idea.title,
        description=idea.description,
        combination=idea.card_combination.summary() or "No cards",
        storyboard=_plural(steps, "step") if idea.storyboard else "Not created",
        evaluation=_plural(selected, "criterion", "criteria") if selected else "Not evaluated",
        pitch="Created" if idea.elevator_pitch else "Not created",
        refinements=str(len(idea.refinements)) if idea.refinements else "None recorded",
        responses=responses,
        elevator_pitch=idea.elevator_pitch or "",
    )


def count_card_usage(ideas: List[Idea]) -> Dict[CardCategory, List[CardUsage]]:
    """
    Count how many ideas use each card, per combination category.

    A card that is both an idea's primary and in its list counts once.
    Sorted by count descending, then name.
    """
    usage: Dict[CardCategory, List[CardUsage]] = {}
    for category in COMBINATION_CATEGORIES:
        counts: Dict[str, CardUsage] = {}
        for idea in ideas:
            for card in idea.card_combination.cards(category):
                entry = counts.setdefault(card.id, CardUsage(card_id=card.id, name=card.name, count=0))
                entry.count += 1
        if counts:
            usage[category] = sorted(counts.values(), key=lambda u: (-u.count, u.name.lower()))
    return usage


def build_workshop_summary(
    workshop: Workshop,
    store: "WorkshopStore",
    evaluations: "EvaluationStore",
) -> WorkshopSummary:
    ideas = store.ideas_for_workshop(workshop.id)
    return WorkshopSummary(
        workshop=workshop,
        ideas=[summarize_idea(idea, evaluations) for idea in ideas],
        card_usage=count_card_usage(ideas),
    )
