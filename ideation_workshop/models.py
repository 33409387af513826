#!/usr/bin/env python3
"""
Ideation Workshop - Data Model

Dataclasses for workshops, ideas and everything attached to an idea
(card combination, refinements, chat history, storyboard, evaluation).

JSON Schema (camelCase keys, ISO timestamps):
{
    "id": "3f2a...",
    "workshopId": "9c1e...",
    "title": "Clothing with Motion",
    "description": "...",
    "cardCombination": {
        "thing": {"id": "t1", "type": "Thing", "name": "Clothing", ...},
        "thingCards": [{"id": "t1", ...}],
        "sensor": null,
        "sensorCards": [],
        ...
    },
    "refinements": [...],
    "chatHistory": [...],
    "storyboard": {"id": "...", "ideaId": "...", "steps": [...]},
    "evaluation": null,
    "elevatorPitch": null,
    "createdAt": "2026-01-09T10:30:00",
    "updatedAt": "2026-01-09T10:30:00"
}
"""

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


def new_id() -> str:
    """Generate a unique entity id."""
    return uuid.uuid4().hex


def now_iso() -> str:
    """Get timestamp for entity fields."""
    return datetime.now().isoformat()


class CardCategory(Enum):
    """Card categories, both combination and workshop-context categories."""
    THING = "thing"
    SENSOR = "sensor"
    ACTION = "action"
    FEEDBACK = "feedback"
    SERVICE = "service"
    MISSION = "mission"
    PERSONA = "persona"
    SCENARIO = "scenario"
    CRITERIA = "criteria"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self][0]

    @property
    def plural(self) -> str:
        return _CATEGORY_LABELS[self][1]

    @property
    def is_combination(self) -> bool:
        return self in COMBINATION_CATEGORIES


_CATEGORY_LABELS = {
    CardCategory.THING: ("Thing", "Things"),
    CardCategory.SENSOR: ("Sensor", "Sensors"),
    CardCategory.ACTION: ("Action", "Actions"),
    CardCategory.FEEDBACK: ("Feedback", "Feedback"),
    CardCategory.SERVICE: ("Service", "Services"),
    CardCategory.MISSION: ("Mission", "Missions"),
    CardCategory.PERSONA: ("Persona", "Personas"),
    CardCategory.SCENARIO: ("Scenario", "Scenarios"),
    CardCategory.CRITERIA: ("Criteria", "Criteria"),
}

# Order matters: prompts, summaries and titles list categories this way.
COMBINATION_CATEGORIES: Tuple[CardCategory, ...] = (
    CardCategory.THING,
    CardCategory.SENSOR,
    CardCategory.ACTION,
    CardCategory.FEEDBACK,
    CardCategory.SERVICE,
)


class WorkshopPhase(Enum):
    """Stage of work on an idea within a workshop session."""
    IDEATION = "ideation"
    REFINEMENT = "refinement"
    STORYBOARD = "storyboard"
    EVALUATION = "evaluation"
    ELEVATOR = "elevator"

    @property
    def requires_idea(self) -> bool:
        """Views for every phase after ideation need a current idea."""
        return self is not WorkshopPhase.IDEATION


class MessageType(Enum):
    USER = "user"
    AI = "ai"
    SYSTEM = "system"


class MessageAction(Enum):
    REFLECT = "reflect"
    CREATIVE = "creative"
    PROVOKE = "provoke"
    INFO = "info"
    SUGGESTION = "suggestion"


class RefinementType(Enum):
    REFLECT = "reflect"
    CREATIVE = "creative"
    PROVOKE = "provoke"


# =============================================================================
# CARDS
# =============================================================================

CUSTOM_ID_PREFIX = "custom-"


@dataclass
class Card:
    """A catalog entry or a runtime-authored custom card."""
    id: str
    type: str
    name: str
    description: str = ""

    @property
    def is_custom(self) -> bool:
        return self.id.startswith(CUSTOM_ID_PREFIX)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "description": self.description,
        }


@dataclass
class MissionCard(Card):
    goal: str = ""
    example: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["goal"] = self.goal
        data["example"] = self.example
        return data


@dataclass
class CriteriaCard(Card):
    question: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["question"] = self.question
        return data


def card_from_dict(data: Dict[str, Any]) -> Card:
    """Rebuild a card, picking the subclass from the fields present."""
    base = dict(
        id=data["id"],
        type=data.get("type", ""),
        name=data.get("name", ""),
        description=data.get("description", ""),
    )
    if "goal" in data or "example" in data:
        return MissionCard(goal=data.get("goal", ""), example=data.get("example", ""), **base)
    if "question" in data:
        return CriteriaCard(question=data.get("question", ""), **base)
    return Card(**base)


def _card_or_none(data: Optional[Dict[str, Any]]) -> Optional[Card]:
    return card_from_dict(data) if data else None


# =============================================================================
# CARD COMBINATION
# =============================================================================

# category -> (primary slot attribute, list attribute, JSON list key)
_COMBINATION_SLOTS = {
    CardCategory.THING: ("thing", "thing_cards", "thingCards"),
    CardCategory.SENSOR: ("sensor", "sensor_cards", "sensorCards"),
    CardCategory.ACTION: ("action", "action_cards", "actionCards"),
    CardCategory.FEEDBACK: ("feedback", "feedback_cards", "feedbackCards"),
    CardCategory.SERVICE: ("service", "service_cards", "serviceCards"),
}


@dataclass
class CardCombination:
    """
    Cards selected for an idea, per combination category.

    Each category has a single "primary" slot (kept for data saved before
    multi-card selection existed) and the full ordered list.
    """
    thing: Optional[Card] = None
    sensor: Optional[Card] = None
    action: Optional[Card] = None
    feedback: Optional[Card] = None
    service: Optional[Card] = None
    thing_cards: List[Card] = field(default_factory=list)
    sensor_cards: List[Card] = field(default_factory=list)
    action_cards: List[Card] = field(default_factory=list)
    feedback_cards: List[Card] = field(default_factory=list)
    service_cards: List[Card] = field(default_factory=list)

    def primary(self, category: CardCategory) -> Optional[Card]:
        return getattr(self, _COMBINATION_SLOTS[category][0])

    def card_list(self, category: CardCategory) -> List[Card]:
        return getattr(self, _COMBINATION_SLOTS[category][1])

    def cards(self, category: CardCategory) -> List[Card]:
        """Resolved cards for a category: primary first, list entries not repeated."""
        primary = self.primary(category)
        listed = self.card_list(category)
        if primary is None:
            return list(listed)
        return [primary] + [card for card in listed if card.id != primary.id]

    def set_cards(self, category: CardCategory, cards: List[Card]) -> None:
        """Replace a category's selection, primary slot included."""
        primary_attr, list_attr, _ = _COMBINATION_SLOTS[category]
        setattr(self, list_attr, list(cards))
        setattr(self, primary_attr, cards[0] if cards else None)

    def set_primary(self, category: CardCategory, card: Card) -> None:
        """Make card the primary for a category, adding it to the list if missing."""
        primary_attr, list_attr, _ = _COMBINATION_SLOTS[category]
        setattr(self, primary_attr, card)
        listed = self.card_list(category)
        if all(existing.id != card.id for existing in listed):
            setattr(self, list_attr, [card] + listed)

    def card_ids(self, category: CardCategory) -> set:
        return {card.id for card in self.cards(category)}

    def all_cards(self) -> List[Tuple[CardCategory, Card]]:
        return [
            (category, card)
            for category in COMBINATION_CATEGORIES
            for card in self.cards(category)
        ]

    def is_empty(self) -> bool:
        return not self.all_cards()

    def summary(self) -> str:
        """Primary card names joined with ' + '."""
        names = [
            self.primary(category).name
            for category in COMBINATION_CATEGORIES
            if self.primary(category) is not None
        ]
        return " + ".join(names)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for category, (primary_attr, list_attr, list_key) in _COMBINATION_SLOTS.items():
            primary = getattr(self, primary_attr)
            data[primary_attr] = primary.to_dict() if primary else None
            data[list_key] = [card.to_dict() for card in getattr(self, list_attr)]
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CardCombination":
        combination = cls()
        if not data:
            return combination
        for category, (primary_attr, list_attr, list_key) in _COMBINATION_SLOTS.items():
            setattr(combination, primary_attr, _card_or_none(data.get(primary_attr)))
            setattr(combination, list_attr, [card_from_dict(c) for c in data.get(list_key) or []])
        return combination


# =============================================================================
# IDEA ATTACHMENTS
# =============================================================================

@dataclass
class Refinement:
    """A recorded reflect/creative/provoke interaction."""
    id: str
    idea_id: str
    type: RefinementType
    question: str
    response: str
    created_at: str = field(default_factory=now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ideaId": self.idea_id,
            "type": self.type.value,
            "question": self.question,
            "response": self.response,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Refinement":
        return cls(
            id=data["id"],
            idea_id=data.get("ideaId", ""),
            type=RefinementType(data["type"]),
            question=data.get("question", ""),
            response=data.get("response", ""),
            created_at=data.get("createdAt", ""),
        )


@dataclass
class ChatMessage:
    id: str
    type: MessageType
    content: str
    timestamp: str = field(default_factory=now_iso)
    action: Optional[MessageAction] = None
    card_suggestions: Dict[CardCategory, List[Card]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "content": self.content,
            "timestamp": self.timestamp,
        }
        if self.action is not None:
            data["action"] = self.action.value
        if self.card_suggestions:
            data["cardSuggestions"] = {
                category.value: [card.to_dict() for card in cards]
                for category, cards in self.card_suggestions.items()
            }
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatMessage":
        action = data.get("action")
        return cls(
            id=data["id"],
            type=MessageType(data["type"]),
            content=data.get("content", ""),
            timestamp=data.get("timestamp", ""),
            action=MessageAction(action) if action else None,
            card_suggestions={
                CardCategory(key): [card_from_dict(c) for c in cards]
                for key, cards in (data.get("cardSuggestions") or {}).items()
            },
        )


@dataclass
class StoryboardStep:
    id: str
    order: int
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "order": self.order, "description": self.description}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoryboardStep":
        return cls(id=data["id"], order=data["order"], description=data.get("description", ""))


@dataclass
class Storyboard:
    """
    Ordered steps telling the user journey of an idea.

    Step orders stay 1-based and contiguous through every edit.
    """
    id: str
    idea_id: str
    steps: List[StoryboardStep] = field(default_factory=list)
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    @classmethod
    def from_descriptions(cls, idea_id: str, descriptions: List[str]) -> "Storyboard":
        storyboard = cls(id=new_id(), idea_id=idea_id)
        for description in descriptions:
            storyboard.steps.append(
                StoryboardStep(id=new_id(), order=len(storyboard.steps) + 1, description=description)
            )
        return storyboard

    def _renumber(self) -> None:
        for order, step in enumerate(self.steps, start=1):
            step.order = order
        self.updated_at = now_iso()

    def add_step(self, description: str = "") -> StoryboardStep:
        step = StoryboardStep(id=new_id(), order=len(self.steps) + 1, description=description)
        self.steps.append(step)
        self.updated_at = now_iso()
        return step

    def update_step(self, step_id: str, description: str) -> None:
        for step in self.steps:
            if step.id == step_id:
                step.description = description
                self.updated_at = now_iso()
                return

    def remove_step(self, step_id: str, confirmed: bool = False) -> bool:
        """
        Remove a step and renumber the rest.

        Removing the only remaining step needs confirmed=True.

        Returns:
            True if the step was removed
        """
        remaining = [step for step in self.steps if step.id != step_id]
        if len(remaining) == len(self.steps):
            return False
        if not remaining and not confirmed:
            return False
        self.steps = remaining
        self._renumber()
        return True

    def move_step(self, step_id: str, new_order: int) -> None:
        for index, step in enumerate(self.steps):
            if step.id == step_id:
                self.steps.pop(index)
                position = min(max(new_order, 1), len(self.steps) + 1) - 1
                self.steps.insert(position, step)
                self._renumber()
                return

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ideaId": self.idea_id,
            "steps": [step.to_dict() for step in self.steps],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Storyboard":
        return cls(
            id=data["id"],
            idea_id=data.get("ideaId", ""),
            steps=[StoryboardStep.from_dict(s) for s in data.get("steps") or []],
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )


@dataclass
class EvaluationCriteria:
    """A criteria card and the free-text answer given for it."""
    criteria: CriteriaCard
    response: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"criteria": self.criteria.to_dict(), "response": self.response}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EvaluationCriteria":
        criteria = card_from_dict(data["criteria"])
        if not isinstance(criteria, CriteriaCard):
            criteria = CriteriaCard(
                id=criteria.id, type=criteria.type, name=criteria.name,
                description=criteria.description,
            )
        return cls(criteria=criteria, response=data.get("response", ""))


@dataclass
class Evaluation:
    id: str
    idea_id: str
    criteria: List[EvaluationCriteria] = field(default_factory=list)
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    def answered(self) -> List[EvaluationCriteria]:
        """Criteria with a non-blank response."""
        return [entry for entry in self.criteria if entry.response.strip()]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ideaId": self.idea_id,
            "criteria": [entry.to_dict() for entry in self.criteria],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Evaluation":
        return cls(
            id=data["id"],
            idea_id=data.get("ideaId", ""),
            criteria=[EvaluationCriteria.from_dict(c) for c in data.get("criteria") or []],
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )


# =============================================================================
# WORKSHOP / IDEA
# =============================================================================

@dataclass
class Workshop:
    """
    A facilitated session grouping ideas under shared context cards.

    Mission, persona and scenario are snapshot copies taken when the
    workshop is built, so later catalog edits do not leak in.
    """
    id: str
    name: str
    date: str = ""
    facilitator_name: str = ""
    description: str = ""
    mission: Optional[MissionCard] = None
    persona: Optional[Card] = None
    scenario: Optional[Card] = None
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    def __post_init__(self):
        self.mission = copy.deepcopy(self.mission)
        self.persona = copy.deepcopy(self.persona)
        self.scenario = copy.deepcopy(self.scenario)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date,
            "facilitatorName": self.facilitator_name,
            "description": self.description,
            "mission": self.mission.to_dict() if self.mission else None,
            "persona": self.persona.to_dict() if self.persona else None,
            "scenario": self.scenario.to_dict() if self.scenario else None,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Workshop":
        mission = _card_or_none(data.get("mission"))
        if mission is not None and not isinstance(mission, MissionCard):
            mission = MissionCard(
                id=mission.id, type=mission.type, name=mission.name,
                description=mission.description,
            )
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            date=data.get("date", ""),
            facilitator_name=data.get("facilitatorName", ""),
            description=data.get("description", ""),
            mission=mission,
            persona=_card_or_none(data.get("persona")),
            scenario=_card_or_none(data.get("scenario")),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )


@dataclass
class Idea:
    id: str
    workshop_id: str
    title: str = "New Idea"
    description: str = ""
    card_combination: CardCombination = field(default_factory=CardCombination)
    refinements: List[Refinement] = field(default_factory=list)
    chat_history: List[ChatMessage] = field(default_factory=list)
    storyboard: Optional[Storyboard] = None
    evaluation: Optional[Evaluation] = None
    elevator_pitch: Optional[str] = None
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "workshopId": self.workshop_id,
            "title": self.title,
            "description": self.description,
            "cardCombination": self.card_combination.to_dict(),
            "refinements": [r.to_dict() for r in self.refinements],
            "chatHistory": [m.to_dict() for m in self.chat_history],
            "storyboard": self.storyboard.to_dict() if self.storyboard else None,
            "evaluation": self.evaluation.to_dict() if self.evaluation else None,
            "elevatorPitch": self.elevator_pitch,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Idea":
        storyboard = data.get("storyboard")
        evaluation = data.get("evaluation")
        return cls(
            id=data["id"],
            workshop_id=data.get("workshopId", ""),
            title=data.get("title", "New Idea"),
            description=data.get("description", ""),
            card_combination=CardCombination.from_dict(data.get("cardCombination")),
            refinements=[Refinement.from_dict(r) for r in data.get("refinements") or []],
            chat_history=[ChatMessage.from_dict(m) for m in data.get("chatHistory") or []],
            storyboard=Storyboard.from_dict(storyboard) if storyboard else None,
            evaluation=Evaluation.from_dict(evaluation) if evaluation else None,
            elevator_pitch=data.get("elevatorPitch"),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )
