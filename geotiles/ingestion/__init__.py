"""
Ingestion module for building the raw data layers.

- rate_limit.py: Request spacing and retry policy
- lithology.py: Label extraction, specificity ranking, confidence
- macrostrat.py: Macrostrat map API client
- collector.py: Resumable, checkpointed fetch jobs
- biomes.py: Biome assignment from polygons or latitude estimate
"""

from .rate_limit import RateLimiter, RetryPolicy
from .lithology import (
    BROAD_PROFILE,
    CITY_PROFILE,
    ConfidenceProfile,
    build_lithology_record,
    extract_labels,
    rank_labels,
    select_primary,
)
from .macrostrat import MacrostratClient
from .collector import TaggedCell, FetchResult, run_fetch_job, fetch_lithology, fetch_city_lithology
from .biomes import resolve_feature, resolve_features, estimate_biome, process_biomes
