"""
Command Line Interface

Entry point for the build pipeline and lookup tools.

Usage:
    python -m geotiles fetch-lithology --resume
    python -m geotiles fetch-city-lithology --max-cities 50
    python -m geotiles process-biomes data/ecoregions.geojson
    python -m geotiles build
    python -m geotiles validate
    python -m geotiles lookup 40.7128 -74.006
    python -m geotiles serve --port 8000
"""

import argparse
import json
import logging
import os
import sys

from .config import API_HOST, API_PORT, MAX_CITIES
from .config_manager import PipelineConfig
from .exceptions import GeoTilesError, QualityGateError, StoreError


def _add_common_args(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--output-dir",
        help="Directory for raw intermediate JSON files (default: output)"
    )
    parser.add_argument(
        "--store",
        help="Path of the SQLite tile store (default: assets/tiles.db)"
    )
    parser.add_argument(
        "--mapping",
        help="Lithology -> material mapping JSON (default: data/lithology_materials.json)"
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress progress output"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show informational log messages"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geotiles",
        description="GeoTiles - offline biome and lithology tiles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m geotiles fetch-lithology
  python -m geotiles fetch-lithology --resume
  python -m geotiles fetch-city-lithology --max-cities 50
  python -m geotiles process-biomes path/to/ecoregions.geojson
  python -m geotiles build
  python -m geotiles validate
  python -m geotiles lookup 51.5074 -0.1278
        """
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    p = subparsers.add_parser("fetch-lithology", help="Fetch global lithology (precision 4)")
    p.add_argument("--resume", action="store_true", help="Skip cells already fetched")
    _add_common_args(p)

    p = subparsers.add_parser("fetch-city-lithology", help="Fetch city lithology grids (precision 5)")
    p.add_argument("--resume", action="store_true", help="Skip cells already fetched")
    p.add_argument(
        "--max-cities",
        type=int,
        default=MAX_CITIES,
        help=f"Number of most populous cities to fetch (default: {MAX_CITIES})"
    )
    _add_common_args(p)

    p = subparsers.add_parser("process-biomes", help="Assign biomes from a GeoJSON file")
    p.add_argument(
        "source",
        nargs="?",
        help="Resolve Ecoregions GeoJSON (omit for a latitude-based estimate)"
    )
    _add_common_args(p)

    p = subparsers.add_parser("build", help="Build, validate and publish the tile store")
    p.add_argument("--skip-validation", action="store_true", help="Publish without quality gates")
    _add_common_args(p)

    p = subparsers.add_parser("validate", help="Run quality gates on the published store")
    _add_common_args(p)

    p = subparsers.add_parser("lookup", help="Look up geology and biome for a coordinate")
    p.add_argument("lat", type=float, help="Latitude")
    p.add_argument("lng", type=float, help="Longitude")
    _add_common_args(p)

    p = subparsers.add_parser("serve", help="Run the lookup API server")
    p.add_argument("--host", default=API_HOST, help=f"Bind address (default: {API_HOST})")
    p.add_argument("--port", type=int, default=API_PORT, help=f"Port (default: {API_PORT})")
    _add_common_args(p)

    return parser


def _run(args: argparse.Namespace, config: PipelineConfig) -> int:
    if args.command == "fetch-lithology":
        from .ingestion.collector import fetch_lithology
        fetch_lithology(config, resume=args.resume)
        return 0

    if args.command == "fetch-city-lithology":
        from .ingestion.collector import fetch_city_lithology
        fetch_city_lithology(config, resume=args.resume, max_cities=args.max_cities)
        return 0

    if args.command == "process-biomes":
        from .ingestion.biomes import process_biomes
        config.ensure_output_dir()
        process_biomes(args.source, config.biomes_raw_path, verbose=config.verbose)
        return 0

    if args.command == "build":
        from .store.builder import build_store
        result = build_store(config, skip_validation=args.skip_validation)
        if config.verbose:
            print(f"\nDone! Published {result.total_tiles} tiles.")
        return 0

    if args.command == "validate":
        from .store.validation import load_mapping, run_quality_gates
        report = run_quality_gates(config.store_path, load_mapping(config.mapping_path))
        print(report.format())
        return 0 if report.passed else 1

    if args.command == "lookup":
        from .lookup import GeoLookup
        from .store.loader import TileLoader
        if not os.path.exists(config.store_path):
            raise StoreError(f"Tile store not found at {config.store_path}")
        with TileLoader(config.store_path) as loader:
            result = GeoLookup(loader).lookup(args.lat, args.lng)
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    if args.command == "serve":
        from .server import run_server
        run_server(host=args.host, port=args.port, store_path=config.store_path)
        return 0

    raise AssertionError(f"unhandled command {args.command}")


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = PipelineConfig(
            output_dir=args.output_dir,
            store_path=args.store,
            mapping_path=args.mapping,
            verbose=not args.quiet,
        )
        return _run(args, config)

    except QualityGateError as e:
        print(e.report.format())
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    except (GeoTilesError, ValueError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted by user.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
