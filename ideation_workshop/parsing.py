#!/usr/bin/env python3
"""
Ideation Workshop - Response Parsing

Turns raw generated text into structured data. Generated text is
treated as untrusted formatting: each parser has a strict grammar and a
deterministic fallback, and never fails.

Creative (alternative cards) grammar:

    ### Alternative 1: <name>
    **Thing**: <value>
    **Sensor**: <value>
    **Action**: <value>
    **Feedback**: <value>
    **Service**: <value>

Fallback chain: strict blocks -> reformatted "Alternative N" mentions
-> two "Variation" blocks built from any "Category: value" pairs.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, TYPE_CHECKING

from .models import COMBINATION_CATEGORIES, Card, CardCategory
from .templates import NOT_SPECIFIED, STORYBOARD_PLACEHOLDER, STORYBOARD_STEP_COUNT

if TYPE_CHECKING:
    from .catalog import CardCatalog


# =============================================================================
# STORYBOARD
# =============================================================================

_STEP_PREFIX = re.compile(
    r"^(?:[-*•]\s+|\*{0,2}(?:step\s*)?\d+\s*\**\s*[.):\-]\s*\*{0,2}\s*)",
    re.IGNORECASE,
)


def clean_step_line(line: str) -> str:
    """Strip surrounding space, a bullet marker or leading numbering."""
    return _STEP_PREFIX.sub("", line.strip(), count=1).strip()


def parse_storyboard_steps(text: str, count: int = STORYBOARD_STEP_COUNT) -> List[str]:
    """
    Split a storyboard response into exactly count non-empty steps.

    Extra lines are dropped; missing steps are filled with
    "Step N: Continue the journey."
    """
    steps = []
    for line in (text or "").splitlines():
        cleaned = clean_step_line(line)
        if cleaned:
            steps.append(cleaned)
    steps = steps[:count]
    while len(steps) < count:
        steps.append(STORYBOARD_PLACEHOLDER.format(number=len(steps) + 1))
    return steps


# =============================================================================
# CREATIVE ALTERNATIVES
# =============================================================================

class AlternativeFormat(Enum):
    """Which stage of the fallback chain produced the blocks."""
    STRUCTURED = "structured"
    REFORMATTED = "reformatted"
    VARIATIONS = "variations"


@dataclass
class AlternativeBlock:
    title: str
    values: Dict[CardCategory, str] = field(default_factory=dict)

    def value(self, category: CardCategory) -> str:
        return self.values.get(category) or NOT_SPECIFIED

    def to_markdown(self) -> str:
        lines = [f"### {self.title}"]
        lines.extend(f"**{category.label}**: {self.value(category)}" for category in COMBINATION_CATEGORIES)
        return "\n".join(lines)


@dataclass
class CreativeResponse:
    """
    Normalized /creative reply.

    content is what the chat shows: the reply itself when it followed
    the grammar, canonical blocks when it had to be reformatted, and the
    reply followed by the variation blocks as a last resort.
    """
    format: AlternativeFormat
    blocks: List[AlternativeBlock]
    content: str


_LABEL_CATEGORIES = {category.label.lower(): category for category in COMBINATION_CATEGORIES}
_LABELS = "|".join(category.label for category in COMBINATION_CATEGORIES)

_STRICT_HEADER = re.compile(r"^#{2,4}\s*Alternative\s+(\d+)\s*:\s*(.+?)\s*$", re.MULTILINE)
_STRICT_FIELD = re.compile(rf"^\s*\*\*({_LABELS})\*\*[ \t]*:[ \t]*(.+?)[ \t]*$", re.MULTILINE)

_LOOSE_HEADER = re.compile(r"alternative\s*#?\s*(\d+)\b[ \t]*[:.)\-]?[ \t]*([^\n]*)", re.IGNORECASE)
_LABEL_KEY = rf"(?<![A-Za-z])(?:{_LABELS})s?[ \t]*\**[ \t]*:"
_LOOSE_PAIR = re.compile(
    # value runs until a separator or the next "Label:"
    rf"(?<![A-Za-z])({_LABELS})s?[ \t]*\**[ \t]*:[ \t]*\**[ \t]*((?:(?!{_LABEL_KEY})[^\n,;*])+)",
    re.IGNORECASE,
)


def _category_for(label: str) -> CardCategory:
    return _LABEL_CATEGORIES[label.lower()]


def _collect_pairs(pattern: re.Pattern, text: str) -> Dict[CardCategory, List[str]]:
    found: Dict[CardCategory, List[str]] = {}
    for match in pattern.finditer(text):
        value = match.group(2).strip().strip("*_ ").strip()
        if value:
            found.setdefault(_category_for(match.group(1)), []).append(value)
    return found


def _segments(matches: List[re.Match], text: str) -> List[str]:
    """Text following each header match, up to the next header."""
    bounds = [m.start() for m in matches[1:]] + [len(text)]
    return [text[m.end():end] for m, end in zip(matches, bounds)]


def parse_alternative_blocks(text: str) -> List[AlternativeBlock]:
    """
    Strict parse of "### Alternative N: name" blocks.

    A block counts only if it has at least one **Category**: value line.
    """
    headers = list(_STRICT_HEADER.finditer(text))
    blocks = []
    for match, body in zip(headers, _segments(headers, text)):
        values = {category: vals[0] for category, vals in _collect_pairs(_STRICT_FIELD, body).items()}
        if values:
            blocks.append(AlternativeBlock(title=f"Alternative {match.group(1)}: {match.group(2)}", values=values))
    return blocks


def reformat_alternatives(text: str) -> List[AlternativeBlock]:
    """
    Loose parse: any "Alternative N" mention starts a block, and inline
    "Category: value" pairs until the next mention fill it.
    """
    headers = list(_LOOSE_HEADER.finditer(text))
    blocks = []
    for k, (match, body) in enumerate(zip(headers, _segments(headers, text)), start=1):
        name = match.group(2).strip().strip("*#:_- ").strip()
        values = {category: vals[0] for category, vals in _collect_pairs(_LOOSE_PAIR, name + "\n" + body).items()}
        if not name or _LOOSE_PAIR.search(name):
            name = f"Option {k}"
        blocks.append(AlternativeBlock(title=f"Alternative {k}: {name}", values=values))
    return blocks


def variation_blocks(text: str) -> List[AlternativeBlock]:
    """
    Last-resort fallback: always two "Variation" blocks.

    The n-th "Category: value" pair found for a category goes to
    Variation n; anything beyond the second is ignored.
    """
    pairs = _collect_pairs(_LOOSE_PAIR, text)
    blocks = []
    for n in (1, 2):
        values = {
            category: found[n - 1]
            for category, found in pairs.items()
            if len(found) >= n
        }
        blocks.append(AlternativeBlock(title=f"Variation {n}", values=values))
    return blocks


def normalize_creative_response(text: str) -> CreativeResponse:
    """Run the fallback chain and build the chat content for a /creative reply."""
    text = text or ""

    blocks = parse_alternative_blocks(text)
    if blocks:
        return CreativeResponse(AlternativeFormat.STRUCTURED, blocks, text)

    blocks = reformat_alternatives(text)
    if blocks:
        content = "\n\n".join(block.to_markdown() for block in blocks)
        return CreativeResponse(AlternativeFormat.REFORMATTED, blocks, content)

    blocks = variation_blocks(text)
    rendered = "\n\n".join(block.to_markdown() for block in blocks)
    content = f"{text.strip()}\n\n{rendered}" if text.strip() else rendered
    return CreativeResponse(AlternativeFormat.VARIATIONS, blocks, content)


# =============================================================================
# CATALOG SUGGESTIONS
# =============================================================================

def match_catalog_suggestions(
    text: str,
    catalog: "CardCatalog",
    limit: int = 2,
    exclude_ids: Optional[set] = None,
) -> Dict[CardCategory, List[Card]]:
    """
    Catalog cards named in text, at most limit per category.

    Categories without a match are omitted; an empty dict means nothing
    matched.
    """
    exclude_ids = exclude_ids or set()
    suggestions: Dict[CardCategory, List[Card]] = {}
    for category in COMBINATION_CATEGORIES:
        cards = [
            card
            for card in catalog.mentioned_in(category, text, limit=limit + len(exclude_ids))
            if card.id not in exclude_ids
        ][:limit]
        if cards:
            suggestions[category] = cards
    return suggestions
