"""
Tile Store Quality Gates

Checks run against a built store before it is published:
1. Generic lithology percentage is below a ceiling
2. Major cities have specific lithology data
3. Every lithology in the store has a material mapping
4. Lithology distribution (informational, always passes)

Usage:
    report = run_quality_gates("assets/tiles.db", load_mapping(path))
    print(report.format())
    if not report.passed: ...
"""

import json
import logging
import os
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence

from ..config import (
    CITY_PRECISION,
    DISTRIBUTION_TOP_N,
    INGESTION_PRECISION,
    MAJOR_CITIES_TO_CHECK,
    MAX_GENERIC_PERCENTAGE,
    MAX_NO_DATA_CITIES,
    MIN_SPECIFIC_CITIES_PERCENTAGE,
)
from ..exceptions import SourceDataError, StoreError
from ..geo import MAJOR_CITIES, City, encode
from ..tables import GENERIC_LITHOLOGIES
from .loader import readonly_uri

logger = logging.getLogger(__name__)


@dataclass
class GateResult:
    name: str
    passed: bool
    message: str
    details: List[str] = field(default_factory=list)


@dataclass
class QualityGateSettings:
    """Thresholds for the quality gates (defaults from config.py)."""
    max_generic_percentage: float = MAX_GENERIC_PERCENTAGE
    major_cities_to_check: int = MAJOR_CITIES_TO_CHECK
    min_specific_cities_percentage: float = MIN_SPECIFIC_CITIES_PERCENTAGE
    max_no_data_cities: int = MAX_NO_DATA_CITIES
    distribution_top_n: int = DISTRIBUTION_TOP_N
    generic_lithologies: FrozenSet[str] = GENERIC_LITHOLOGIES
    cities: Sequence[City] = tuple(MAJOR_CITIES)


@dataclass
class ValidationReport:
    results: List[GateResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def failed(self) -> List[GateResult]:
        return [r for r in self.results if not r.passed]

    def format(self) -> str:
        lines = []
        for result in self.results:
            status = "PASS" if result.passed else "FAIL"
            lines.append(f"[{status}] {result.name}")
            lines.append(f"       {result.message}")
            for detail in result.details:
                lines.append(f"       {detail}")
            lines.append("")

        lines.append("-" * 50)
        n_failed = len(self.failed)
        lines.append(f"Results: {len(self.results) - n_failed} passed, {n_failed} failed")
        lines.append(f"Validation {'PASSED' if self.passed else 'FAILED'}")
        return "\n".join(lines)


def load_mapping(path: str) -> Dict[str, Any]:
    """Load the lithology -> material mapping JSON. A missing file is an empty mapping."""
    if not os.path.exists(path):
        logger.warning("Lithology mapping not found at %s", path)
        return {}
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise SourceDataError(f"Could not read mapping {path}: {e}") from e

    if not isinstance(data, dict):
        raise SourceDataError(f"Mapping {path} must be a JSON object")
    return data


def _count_tiles(conn: sqlite3.Connection) -> int:
    return conn.execute("SELECT COUNT(*) FROM tiles").fetchone()[0]


# =============================================================================
# Gates
# =============================================================================

def check_generic_percentage(conn: sqlite3.Connection, settings: QualityGateSettings) -> GateResult:
    name = "Generic Lithology Percentage"
    total = _count_tiles(conn)
    if total == 0:
        return GateResult(name, False, "Store contains no tiles")

    generic = sorted(settings.generic_lithologies)
    placeholders = ",".join("?" for _ in generic)
    generic_count = conn.execute(
        f"SELECT COUNT(*) FROM tiles WHERE primary_lithology IN ({placeholders})",
        generic,
    ).fetchone()[0]

    pct = generic_count / total * 100
    ceiling = settings.max_generic_percentage
    passed = pct <= ceiling

    return GateResult(
        name=name,
        passed=passed,
        message=(
            f"{pct:.1f}% generic (threshold: {ceiling:g}%)"
            if passed
            else f"{pct:.1f}% generic exceeds threshold of {ceiling:g}%"
        ),
        details=[
            f"Total tiles: {total}",
            f"Generic tiles: {generic_count}",
            f"Specific tiles: {total - generic_count}",
        ],
    )


def check_major_cities(conn: sqlite3.Connection, settings: QualityGateSettings) -> GateResult:
    """Each city is looked up at precision 5, falling back to precision 4."""
    cities = list(settings.cities)[:settings.major_cities_to_check]
    generic_cities = []
    no_data_cities = []

    for city in cities:
        row = None
        for precision in (CITY_PRECISION, INGESTION_PRECISION):
            row = conn.execute(
                "SELECT primary_lithology FROM tiles WHERE cell_id = ?",
                (encode(city.lat, city.lng, precision),),
            ).fetchone()
            if row is not None:
                break

        if row is None:
            no_data_cities.append(city.name)
        elif row[0] in settings.generic_lithologies:
            generic_cities.append(f"{city.name} ({row[0]})")

    total = len(cities)
    specific = total - len(generic_cities) - len(no_data_cities)
    pct = specific / total * 100 if total else 0.0
    too_many_missing = len(no_data_cities) > settings.max_no_data_cities
    passed = pct >= settings.min_specific_cities_percentage and not too_many_missing

    if passed:
        message = f"{specific} of {total} cities ({pct:.0f}%) have specific lithology"
    elif too_many_missing:
        message = (
            f"{len(no_data_cities)} cities have no data "
            f"(max allowed: {settings.max_no_data_cities})"
        )
    else:
        message = (
            f"Only {pct:.0f}% of cities have specific lithology "
            f"(threshold: {settings.min_specific_cities_percentage:g}%)"
        )

    details = [f"Cities with specific lithology: {specific} ({pct:.0f}%)"]
    if generic_cities:
        details.append(f"Generic: {', '.join(generic_cities)}")
    if no_data_cities:
        details.append(f"No data: {', '.join(no_data_cities)}")

    return GateResult("Major Cities Lithology Quality", passed, message, details)


def check_mapping_completeness(conn: sqlite3.Connection, mapping: Mapping[str, Any]) -> GateResult:
    lithologies = [
        row[0] for row in conn.execute(
            "SELECT DISTINCT primary_lithology FROM tiles ORDER BY primary_lithology"
        )
    ]
    # Underscore keys such as "_meta" describe the file, not a lithology
    mapped = {key for key, value in mapping.items() if not key.startswith("_") and value}
    unmapped = [lith for lith in lithologies if lith != "unknown" and lith not in mapped]
    passed = not unmapped

    return GateResult(
        name="Lithology Material Mappings",
        passed=passed,
        message=(
            f"All {len(lithologies)} lithologies have material mappings"
            if passed
            else f"{len(unmapped)} lithologies missing material mappings"
        ),
        details=[] if passed else [f"Unmapped: {', '.join(unmapped)}"],
    )


def check_distribution(conn: sqlite3.Connection, settings: QualityGateSettings) -> GateResult:
    total = _count_tiles(conn)
    rows = conn.execute(
        """
        SELECT primary_lithology, COUNT(*) AS count
        FROM tiles
        GROUP BY primary_lithology
        ORDER BY count DESC, primary_lithology
        LIMIT ?
        """,
        (settings.distribution_top_n,),
    ).fetchall()

    details = []
    for lith, count in rows:
        pct = count / total * 100 if total else 0.0
        marker = " [GENERIC]" if lith in settings.generic_lithologies else ""
        details.append(f"  {lith}: {count} ({pct:.1f}%){marker}")

    return GateResult(
        name="Lithology Distribution",
        passed=True,
        message=f"Top {len(rows)} lithologies by frequency",
        details=details,
    )


def run_quality_gates(
    db_path: str,
    mapping: Mapping[str, Any],
    settings: Optional[QualityGateSettings] = None,
) -> ValidationReport:
    """Run all gates against the store at db_path (opened read-only)."""
    if not os.path.exists(db_path):
        raise StoreError(f"Tile store not found at {db_path}")

    settings = settings or QualityGateSettings()
    conn = sqlite3.connect(readonly_uri(db_path), uri=True)
    try:
        return ValidationReport(results=[
            check_generic_percentage(conn, settings),
            check_major_cities(conn, settings),
            check_mapping_completeness(conn, mapping),
            check_distribution(conn, settings),
        ])
    except sqlite3.Error as e:
        raise StoreError(f"Could not validate {db_path}: {e}") from e
    finally:
        conn.close()
