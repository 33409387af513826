#!/usr/bin/env python3
"""
Ideation Workshop - Card Catalogs

Read-only reference cards shipped as JSON under ideation_workshop/data/.
A reserved id per category stands for "author a custom card" rather
than a selectable card.
"""

import json
import re
from pathlib import Path
from typing import Dict, List, Optional

from .models import (
    Card,
    CardCategory,
    CriteriaCard,
    MissionCard,
    card_from_dict,
)

DATA_DIR = Path(__file__).parent / "data"

# category -> (data file, card type tag, reserved custom placeholder id)
_CATALOG_FILES = {
    CardCategory.THING: ("things.json", "Thing", "t9"),
    CardCategory.SENSOR: ("sensors.json", "Sensor", "s12"),
    CardCategory.ACTION: ("actions.json", "Human Actions", "a9"),
    CardCategory.FEEDBACK: ("feedback.json", "Feedback", None),
    CardCategory.SERVICE: ("services.json", "Services", None),
    CardCategory.MISSION: ("missions.json", "Mission", "m14"),
    CardCategory.PERSONA: ("personas.json", "Persona", "p9"),
    CardCategory.SCENARIO: ("scenarios.json", "Scenario", "sc18"),
    CardCategory.CRITERIA: ("criteria.json", "Criteria", "c10"),
}

CUSTOM_PLACEHOLDER_IDS = frozenset(
    custom_id for _, _, custom_id in _CATALOG_FILES.values() if custom_id
)


def card_type_tag(category: CardCategory) -> str:
    """Type tag written on cards of a category (e.g. "Human Actions")."""
    return _CATALOG_FILES[category][1]


def make_custom_card(category: CardCategory, card_id: str, name: str, description: str) -> Card:
    """Build a runtime-authored card of the right shape for its category."""
    tag = card_type_tag(category)
    if category is CardCategory.MISSION:
        return MissionCard(id=card_id, type=tag, name=name, description=description, goal=description)
    if category is CardCategory.CRITERIA:
        return CriteriaCard(id=card_id, type=tag, name=name, description=description)
    return Card(id=card_id, type=tag, name=name, description=description)


class CardCatalog:
    """Loads catalog data once per category and serves lookups."""

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir else DATA_DIR
        self._cards: Dict[CardCategory, List[Card]] = {}

    def cards(self, category: CardCategory) -> List[Card]:
        """All catalog cards of a category, placeholders included, in catalog order."""
        if category not in self._cards:
            filename = _CATALOG_FILES[category][0]
            with open(self.data_dir / filename, "r", encoding="utf-8") as f:
                self._cards[category] = [card_from_dict(entry) for entry in json.load(f)]
        return list(self._cards[category])

    def selectable(self, category: CardCategory) -> List[Card]:
        """Catalog cards excluding the custom placeholder."""
        return [card for card in self.cards(category) if not self.is_custom_placeholder(card.id)]

    def missions(self) -> List[MissionCard]:
        return self.cards(CardCategory.MISSION)

    def criteria(self) -> List[CriteriaCard]:
        return self.cards(CardCategory.CRITERIA)

    @staticmethod
    def is_custom_placeholder(card_id: str) -> bool:
        return card_id in CUSTOM_PLACEHOLDER_IDS

    @staticmethod
    def custom_placeholder_id(category: CardCategory) -> Optional[str]:
        return _CATALOG_FILES[category][2]

    def get(self, category: CardCategory, card_id: str) -> Optional[Card]:
        for card in self.cards(category):
            if card.id == card_id:
                return card
        return None

    def find_by_name(self, category: CardCategory, name: str) -> Optional[Card]:
        """Case-insensitive exact name lookup among selectable cards."""
        wanted = name.strip().lower()
        for card in self.selectable(category):
            if card.name.lower() == wanted:
                return card
        return None

    def mentioned_in(self, category: CardCategory, text: str, limit: int = 2) -> List[Card]:
        """
        Selectable cards whose name appears in text as a whole word.

        Catalog order decides which cards win when more than limit match.
        """
        lowered = text.lower()
        found: List[Card] = []
        for card in self.selectable(category):
            pattern = r"(?<![a-z0-9])" + re.escape(card.name.lower()) + r"(?![a-z0-9])"
            if re.search(pattern, lowered):
                found.append(card)
                if len(found) >= limit:
                    break
        return found
