"""
Lithology Normalization

Maps free-text upstream lithology to the simple keys used by the material
mapping (e.g. "Major:{biotite granite}" -> "granite").

Priority order:
1. Structured Major then Minor groups containing a specific rock
2. A specific rock anywhere in the text
3. Compositional/textural inference ("mafic volcanic" -> basalt)
4. Unconsolidated sediments and iron formations
5. Generic mixed_* fallback, else "unknown"
"""

from typing import Optional, Tuple

from ..ingestion.lithology import parse_structured_lith

UNKNOWN_LITHOLOGY = "unknown"

# Checked in order; the first substring hit wins
SPECIFIC_ROCKS: Tuple[str, ...] = (
    # Igneous plutonic
    "granite", "granodiorite", "diorite", "gabbro", "syenite", "tonalite",
    "monzonite", "peridotite", "dunite", "pyroxenite",
    # Igneous volcanic
    "basalt", "andesite", "rhyolite", "dacite", "trachyte", "phonolite",
    "obsidian", "pumice", "tuff", "ignimbrite",
    # Clastic sedimentary
    "sandstone", "siltstone", "shale", "mudstone", "claystone",
    "conglomerate", "breccia", "greywacke", "arkose",
    # Chemical/biological sedimentary
    "limestone", "dolomite", "dolostone", "chalk", "marl", "travertine",
    "tufa", "chert", "novaculite", "flint", "jasper", "coal", "lignite", "peat",
    # Metamorphic
    "slate", "phyllite", "schist", "gneiss", "migmatite", "marble",
    "quartzite", "amphibolite", "hornfels", "serpentinite", "soapstone",
    "greenstone", "blueschist", "eclogite", "granulite",
)

# (all of, none of, result), checked in order
_INFERENCE_RULES: Tuple[Tuple[Tuple[str, ...], Tuple[str, ...], str], ...] = (
    # Volcanic compositions
    (("mafic", "volcanic"), (), "basalt"),
    (("felsic", "volcanic"), (), "rhyolite"),
    (("intermediate", "volcanic"), (), "andesite"),
    (("flood basalt",), (), "basalt"),
    (("basalt group",), (), "basalt"),
    # Plutonic compositions
    (("mafic", "plutonic"), (), "gabbro"),
    (("felsic", "plutonic"), (), "granite"),
    (("intermediate", "plutonic"), (), "diorite"),
    (("plutonic", "granit"), (), "granite"),
    (("intrusive", "igneous"), (), "granite"),
    # Metamorphic textures
    (("crystalline", "metamorphic"), (), "gneiss"),
    (("foliated", "metamorphic"), (), "schist"),
    (("high-grade", "metamorphic"), (), "gneiss"),
    (("low-grade", "metamorphic"), (), "slate"),
    # Sedimentary textures and compositions
    (("volcaniclastic",), (), "tuff"),
    (("sedimentary", "volcanic"), (), "tuff"),
    (("carbonate",), ("non-carbonate",), "limestone"),
    (("calcareous",), (), "limestone"),
    # Unconsolidated sediments, mapped to consolidated equivalents
    (("alluvium",), (), "conglomerate"),
    (("alluvial",), (), "conglomerate"),
    (("glacial",), (), "conglomerate"),
    (("drift",), (), "conglomerate"),
    (("till",), (), "conglomerate"),
    (("sand",), ("sandstone",), "sandstone"),
    (("gravel",), (), "conglomerate"),
    (("silt",), ("siltstone",), "siltstone"),
    (("clay",), ("claystone",), "clay"),
    (("mud",), ("mudstone",), "mudstone"),
    # Iron-rich rocks
    (("iron formation",), (), "iron_formation"),
    (("banded iron",), (), "iron_formation"),
    (("hematite",), (), "iron_formation"),
    (("magnetite",), (), "iron_formation"),
    # Generic fallbacks
    (("sedimentary",), (), "mixed_sedimentary"),
    (("metamorphic",), (), "mixed_metamorphic"),
    (("igneous",), (), "mixed_igneous"),
    (("volcanic",), (), "tuff"),
)


def find_specific_rock(text: str) -> Optional[str]:
    lower = text.lower()
    for rock in SPECIFIC_ROCKS:
        if rock in lower:
            return rock
    return None


def normalize_lithology(lith: str) -> str:
    """Normalize an upstream lithology string to a mapping key."""
    if not lith:
        return UNKNOWN_LITHOLOGY

    structured = parse_structured_lith(lith)
    for candidate in structured.major + structured.minor:
        specific = find_specific_rock(candidate)
        if specific:
            return specific

    lower = lith.lower().strip()

    direct = find_specific_rock(lower)
    if direct:
        return direct

    for required, excluded, result in _INFERENCE_RULES:
        if all(word in lower for word in required) and not any(word in lower for word in excluded):
            return result

    return UNKNOWN_LITHOLOGY
