"""
Lithology Classification

Turns the free-text lithology of upstream map units into ranked labels and
a LithologyRecord.

Label sources, in order:
1. Structured groups: "Major:{granite,gneiss};Minor:{schist}" (colon optional)
2. Remaining plain text, split on ";" then ","
3. Rock names found in the unit name, only when the unit has no lith text
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Optional, Sequence

from ..parsers.map_units import MapUnit
from ..records import LithologyRecord
from ..tables import LITHOLOGY_SPECIFICITY, ROCK_NAME_HINTS, SpecificityTable

_MAJOR_RE = re.compile(r"Major:?\{([^}]+)\}", re.IGNORECASE)
_MINOR_RE = re.compile(r"Minor:?\{([^}]+)\}", re.IGNORECASE)
_STRUCTURED_GROUP_RE = re.compile(r"(?:Major|Minor|Incidental):?\{[^}]+\}", re.IGNORECASE)


class StructuredLith(NamedTuple):
    major: List[str]
    minor: List[str]


@dataclass(frozen=True)
class ConfidenceProfile:
    """Confidence = min(cap, base + 0.1 per label)"""
    base: float
    cap: float
    per_label: float = 0.1

    def confidence(self, label_count: int) -> float:
        return round(min(self.cap, self.base + self.per_label * label_count), 4)


BROAD_PROFILE = ConfidenceProfile(base=0.5, cap=0.9)
CITY_PROFILE = ConfidenceProfile(base=0.6, cap=0.95)


def _split_group(group: str) -> List[str]:
    return [part.strip().lower() for part in group.split(",") if part.strip()]


def parse_structured_lith(lith: str) -> StructuredLith:
    """Extract the first Major and Minor groups from a lith string."""
    major_match = _MAJOR_RE.search(lith)
    minor_match = _MINOR_RE.search(lith)
    return StructuredLith(
        major=_split_group(major_match.group(1)) if major_match else [],
        minor=_split_group(minor_match.group(1)) if minor_match else [],
    )


def extract_labels(unit: MapUnit, rock_hints: Sequence[str] = ROCK_NAME_HINTS) -> List[str]:
    """Candidate lithology labels for one map unit, in discovery order."""
    labels = []

    if unit.lith.strip():
        structured = parse_structured_lith(unit.lith)
        labels.extend(structured.major)
        labels.extend(structured.minor)

        plain_text = _STRUCTURED_GROUP_RE.sub("", unit.lith)
        for segment in plain_text.split(";"):
            for part in segment.split(","):
                label = part.strip().lower()
                if len(label) > 1:
                    labels.append(label)

    if unit.name and not unit.lith.strip():
        name_lower = unit.name.lower()
        labels.extend(hint for hint in rock_hints if hint in name_lower)

    return labels


def extract_unit_labels(units: Iterable[MapUnit], rock_hints: Sequence[str] = ROCK_NAME_HINTS) -> List[str]:
    labels = []
    for unit in units:
        labels.extend(extract_labels(unit, rock_hints))
    return labels


def rank_labels(labels: Iterable[str], table: SpecificityTable = LITHOLOGY_SPECIFICITY) -> List[str]:
    """Deduplicate (first occurrence wins) and order most specific first.

    The sort is stable, so labels of equal tier keep their discovery order.
    """
    unique = list(dict.fromkeys(labels))
    return sorted(unique, key=lambda label: table.score(label)[0], reverse=True)


def select_primary(labels: Sequence[str], table: SpecificityTable = LITHOLOGY_SPECIFICITY) -> str:
    """
    Pick the primary lithology from a list of labels.

    The label with the strictly highest tier wins, so the first one seen
    wins ties. When it matched a table entry the entry's name is returned
    ("tuff group" -> "tuff"); otherwise the label itself.
    """
    if not labels:
        return ""

    if len(labels) == 1:
        _, matched = table.score(labels[0])
        return matched or labels[0]

    best_label = labels[0]
    best_score = 0
    best_match: Optional[str] = None

    for label in labels:
        score, matched = table.score(label)
        if score > best_score:
            best_score = score
            best_label = label
            best_match = matched

    return best_match or best_label


def build_lithology_record(
    cell_id: str,
    lat: float,
    lng: float,
    labels: Sequence[str],
    table: SpecificityTable = LITHOLOGY_SPECIFICITY,
    profile: ConfidenceProfile = BROAD_PROFILE,
) -> Optional[LithologyRecord]:
    """Build a record from raw labels, or None when there are no labels."""
    ranked = rank_labels(labels, table)
    if not ranked:
        return None

    primary = select_primary(ranked, table)
    secondary = tuple(label for label in ranked if label != primary)

    return LithologyRecord(
        cell_id=cell_id,
        lat=lat,
        lng=lng,
        primary_lithology=primary,
        secondary_lithologies=secondary,
        confidence=profile.confidence(len(ranked)),
        source="macrostrat",
    )
