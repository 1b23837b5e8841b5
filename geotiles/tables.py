"""
Classification Tables

Static lookup tables shared by the build pipeline and the runtime:

- SpecificityTable: rock name -> tier (3 specific, 2 semi-specific, 1 generic)
- Resolve Ecoregions biome ids and names -> BiomeClass
- Display names and the set of lithologies considered generic
- estimate_biome: latitude-band biome used when no polygon data exists
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

SPECIFIC = 3
SEMI_SPECIFIC = 2
GENERIC = 1


class SpecificityTable:
    """Immutable rock name -> specificity tier mapping.

    score() matches a label exactly first, then by the longest table entry
    of tier >= 2 contained in the label. Generic entries only match exactly
    so "sedimentary sandstone" scores as sandstone, never as sedimentary.
    """

    def __init__(self, tiers: Mapping[str, int]):
        self._tiers = MappingProxyType(dict(tiers))
        # Longest first so "pelitic schist" is tried before "schist"
        self._substring_candidates: Tuple[str, ...] = tuple(
            sorted(
                (name for name, tier in self._tiers.items() if tier >= SEMI_SPECIFIC),
                key=len,
                reverse=True,
            )
        )

    @property
    def tiers(self) -> Mapping[str, int]:
        return self._tiers

    def __contains__(self, name: str) -> bool:
        return name in self._tiers

    def __len__(self) -> int:
        return len(self._tiers)

    def score(self, label: str) -> Tuple[int, Optional[str]]:
        """Return (tier, matched table name), or (0, None) when nothing matches."""
        normalized = label.lower().strip()

        tier = self._tiers.get(normalized)
        if tier is not None:
            return tier, normalized

        for name in self._substring_candidates:
            if name in normalized:
                return self._tiers[name], name

        return 0, None


_SPECIFIC_ROCKS = (
    # Igneous
    "granite", "granodiorite", "diorite", "gabbro", "basalt", "andesite",
    "rhyolite", "dacite", "obsidian", "pumice", "tuff", "ignimbrite",
    # Metamorphic
    "gneiss", "schist", "pelitic schist", "slate", "phyllite", "marble",
    "quartzite", "amphibolite",
    # Sedimentary
    "sandstone", "siltstone", "shale", "mudstone", "claystone", "limestone",
    "dolomite", "dolostone", "chalk", "marl", "chert", "novaculite",
    "conglomerate", "breccia",
)

_SEMI_SPECIFIC_ROCKS = (
    "mafic volcanic", "felsic volcanic", "intermediate volcanic",
    "carbonate", "carbonate rocks", "plutonic", "plutonic rocks",
    "clastic", "clastic rocks", "volcaniclastic", "evaporite",
    "crystalline rocks",
)

_GENERIC_ROCKS = (
    "sedimentary", "sedimentary rocks", "metamorphic", "metamorphic rocks",
    "igneous", "igneous rocks", "volcanic", "volcanic rocks",
)


def _build_lithology_tiers() -> Dict[str, int]:
    tiers = {name: SPECIFIC for name in _SPECIFIC_ROCKS}
    tiers.update({name: SEMI_SPECIFIC for name in _SEMI_SPECIFIC_ROCKS})
    tiers.update({name: GENERIC for name in _GENERIC_ROCKS})
    return tiers


LITHOLOGY_SPECIFICITY = SpecificityTable(_build_lithology_tiers())

# Rock names looked for in a map unit's name when it has no lith field
ROCK_NAME_HINTS: Tuple[str, ...] = (
    "granite", "limestone", "sandstone", "shale", "basalt", "gneiss",
    "schist", "marble", "quartzite", "slate", "dolomite",
)

# Normalized lithologies that count against the generic-ceiling gate
GENERIC_LITHOLOGIES: FrozenSet[str] = frozenset({
    "mixed_sedimentary",
    "mixed_metamorphic",
    "mixed_igneous",
    "sedimentary",
    "metamorphic",
    "igneous",
    "unknown",
})


# =============================================================================
# Biomes (Resolve Ecoregions 2017)
# =============================================================================

UNKNOWN_BIOME = "unknown"


class BiomeClass(str, Enum):
    TROPICAL_MOIST_BROADLEAF = "tropical_moist_broadleaf"
    TROPICAL_DRY_BROADLEAF = "tropical_dry_broadleaf"
    TROPICAL_CONIFER = "tropical_conifer"
    TEMPERATE_BROADLEAF_MIXED = "temperate_broadleaf_mixed"
    TEMPERATE_CONIFER = "temperate_conifer"
    BOREAL = "boreal"
    TROPICAL_GRASSLAND = "tropical_grassland"
    TEMPERATE_GRASSLAND = "temperate_grassland"
    FLOODED_GRASSLAND = "flooded_grassland"
    MONTANE = "montane"
    TUNDRA = "tundra"
    MEDITERRANEAN = "mediterranean"
    DESERT = "desert"
    MANGROVE = "mangrove"


# BIOME_NUM property -> class
RESOLVE_BIOMES: Mapping[int, BiomeClass] = MappingProxyType({
    1: BiomeClass.TROPICAL_MOIST_BROADLEAF,
    2: BiomeClass.TROPICAL_DRY_BROADLEAF,
    3: BiomeClass.TROPICAL_CONIFER,
    4: BiomeClass.TEMPERATE_BROADLEAF_MIXED,
    5: BiomeClass.TEMPERATE_CONIFER,
    6: BiomeClass.BOREAL,
    7: BiomeClass.TROPICAL_GRASSLAND,
    8: BiomeClass.TEMPERATE_GRASSLAND,
    9: BiomeClass.FLOODED_GRASSLAND,
    10: BiomeClass.MONTANE,
    11: BiomeClass.TUNDRA,
    12: BiomeClass.MEDITERRANEAN,
    13: BiomeClass.DESERT,
    14: BiomeClass.MANGROVE,
})

# Lowercased BIOME_NAME property -> class
RESOLVE_BIOME_NAMES: Mapping[str, BiomeClass] = MappingProxyType({
    "tropical & subtropical moist broadleaf forests": BiomeClass.TROPICAL_MOIST_BROADLEAF,
    "tropical & subtropical dry broadleaf forests": BiomeClass.TROPICAL_DRY_BROADLEAF,
    "tropical & subtropical coniferous forests": BiomeClass.TROPICAL_CONIFER,
    "temperate broadleaf & mixed forests": BiomeClass.TEMPERATE_BROADLEAF_MIXED,
    "temperate conifer forests": BiomeClass.TEMPERATE_CONIFER,
    "boreal forests/taiga": BiomeClass.BOREAL,
    "tropical & subtropical grasslands, savannas & shrublands": BiomeClass.TROPICAL_GRASSLAND,
    "temperate grasslands, savannas & shrublands": BiomeClass.TEMPERATE_GRASSLAND,
    "flooded grasslands & savannas": BiomeClass.FLOODED_GRASSLAND,
    "montane grasslands & shrublands": BiomeClass.MONTANE,
    "tundra": BiomeClass.TUNDRA,
    "mediterranean forests, woodlands & scrub": BiomeClass.MEDITERRANEAN,
    "deserts & xeric shrublands": BiomeClass.DESERT,
    "mangroves": BiomeClass.MANGROVE,
})

BIOME_DISPLAY_NAMES: Mapping[str, str] = MappingProxyType({
    "tropical_moist_broadleaf": "Tropical Rainforest",
    "tropical_dry_broadleaf": "Tropical Dry Forest",
    "tropical_conifer": "Tropical Conifer Forest",
    "temperate_broadleaf_mixed": "Temperate Forest",
    "temperate_conifer": "Conifer Forest",
    "boreal": "Boreal Forest",
    "tropical_grassland": "Savanna",
    "temperate_grassland": "Grassland",
    "flooded_grassland": "Wetland",
    "montane": "Mountain Shrubland",
    "tundra": "Tundra",
    "mediterranean": "Mediterranean",
    "desert": "Desert",
    "mangrove": "Mangrove",
    UNKNOWN_BIOME: "Unknown",
})


def resolve_biome(biome_num=None, biome_name: Optional[str] = None) -> Optional[BiomeClass]:
    """Resolve a biome from a BIOME_NUM, falling back to a BIOME_NAME."""
    if biome_num is not None:
        try:
            found = RESOLVE_BIOMES.get(int(biome_num))
        except (TypeError, ValueError):
            found = None
        if found is not None:
            return found

    if isinstance(biome_name, str):
        return RESOLVE_BIOME_NAMES.get(biome_name.strip().lower())

    return None


def get_biome_display_name(biome_code: str) -> str:
    return BIOME_DISPLAY_NAMES.get(biome_code, biome_code)


# Longitude bands with a Mediterranean climate in the subtropics
_MEDITERRANEAN_BANDS = ((-130, -115), (-10, 40), (130, 150))


def estimate_biome(lat: float, lng: float) -> BiomeClass:
    """Rough biome from latitude bands, with a Mediterranean longitude check."""
    abs_lat = abs(lat)

    if abs_lat > 66:
        return BiomeClass.TUNDRA
    if abs_lat > 55:
        return BiomeClass.BOREAL
    if abs_lat > 45:
        return BiomeClass.TEMPERATE_CONIFER
    if abs_lat > 35:
        return BiomeClass.TEMPERATE_BROADLEAF_MIXED
    if abs_lat > 23:
        if any(low < lng < high for low, high in _MEDITERRANEAN_BANDS):
            return BiomeClass.MEDITERRANEAN
        return BiomeClass.TROPICAL_DRY_BROADLEAF
    return BiomeClass.TROPICAL_MOIST_BROADLEAF
