"""
Map Unit Parser

Parses Macrostrat geologic map unit responses.

Response structure:
    {"success": {"data": [unit, ...]}}

Each unit carries (among others):
    name  = unit name, sometimes containing a rock type ("Baltimore Gneiss")
    lith  = free text or structured "Major:{granite,gneiss};Minor:{schist}"
    descrip, strat_name, best_int_name = not used for classification
"""

from dataclasses import dataclass
from typing import Any, List


@dataclass(frozen=True)
class MapUnit:
    """The fields of a map unit that feed lithology classification"""
    name: str = ""
    lith: str = ""


def safe_get(obj: Any, *keys, default=None) -> Any:
    """Safely traverse nested dicts/lists"""
    current = obj
    for key in keys:
        if isinstance(current, dict):
            current = current.get(key)
        elif isinstance(current, list) and isinstance(key, int) and -len(current) <= key < len(current):
            current = current[key]
        else:
            return default
        if current is None:
            return default
    return current


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def parse_map_units(payload: Any) -> List[MapUnit]:
    """
    Parse a decoded API response into map units.

    Anything that does not match the expected shape yields an empty list;
    non-string name/lith fields become empty strings.
    """
    data = safe_get(payload, "success", "data")
    if not isinstance(data, list):
        return []

    units = []
    for item in data:
        if not isinstance(item, dict):
            continue
        units.append(MapUnit(name=_text(item.get("name")), lith=_text(item.get("lith"))))

    return units
