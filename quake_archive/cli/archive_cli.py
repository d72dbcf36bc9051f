"""
Command-line interface for browsing and maintaining an archive snapshot.

Usage:
    quake-archive list --archive <path> [--config <yaml>] [--all] [--limit N] [--json]
    quake-archive show --archive <path> --record-id <uuid> [--config <yaml>]
    quake-archive enrich --archive <path> [--output <path>] [--regions <yaml>]
    quake-archive invalidate --archive <path> --record-id <uuid>
"""

import argparse
import json
import sys

from quake_archive.core.archive import Archive
from quake_archive.core.display import DEFAULT_FILTER, load_display_settings
from quake_archive.core.enrichment import (
    BoundingBoxGeoResolver,
    EnrichmentQueue,
    EnrichmentServices,
)
from quake_archive.core.storage import load_archive, save_archive
from quake_archive.observability.logger import get_logger
from quake_archive.utils.validation import validate_file_path, validate_limit, validate_record_id

logger = get_logger(__name__)


def create_services(regions_path: str | None = None) -> EnrichmentServices:
    """Build the enrichment services for one CLI invocation."""
    if regions_path:
        resolver = BoundingBoxGeoResolver.from_yaml(validate_file_path(regions_path, "regions"))
    else:
        resolver = BoundingBoxGeoResolver()
    return EnrichmentServices(queue=EnrichmentQueue("quake-cli"), geo_resolver=resolver)


def open_archive(args: argparse.Namespace, services: EnrichmentServices) -> Archive:
    return load_archive(validate_file_path(args.archive, "archive"), services)


def list_command(args: argparse.Namespace) -> int:
    """
    List archived records, most recent first.

    Args:
        args: Command line arguments

    Returns:
        Exit code (0 for success)
    """
    services = create_services()
    try:
        archive = open_archive(args, services)
        if args.all:
            records = archive.ordered()
        else:
            settings = load_display_settings(args.config)
            records = archive.visible(settings.snapshot(now=args.now))

        if args.limit:
            records = records[:validate_limit(args.limit)]

        if args.json:
            print(json.dumps([record.model_dump(mode="json") for record in records], indent=2))
            return 0

        print(f"\n{len(records)} of {len(archive)} record(s)\n")
        for record in records:
            print(f"{str(record.id):<38} {record.summary_line()}")
        print()
        return 0

    except Exception as e:
        logger.error(f"Error listing archive: {e}", exc_info=True)
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    finally:
        services.shutdown()


def show_command(args: argparse.Namespace) -> int:
    """
    Show one record and the display rules that hide it, if any.

    Args:
        args: Command line arguments

    Returns:
        Exit code (0 for success)
    """
    services = create_services()
    try:
        record_id = validate_record_id(args.record_id)
        archive = open_archive(args, services)
        record = archive.get(record_id)
        if record is None:
            print(f"\nNo record found with ID: {record_id}", file=sys.stderr)
            return 1

        config = load_display_settings(args.config).snapshot(now=args.now)
        rejections = DEFAULT_FILTER.rejections(record, config)

        print(f"\n{'=' * 60}")
        print(f"RECORD: {record.id}")
        print(f"{'=' * 60}\n")
        print(f"  Origin time:       {record.origin_datetime:%Y-%m-%d %H:%M:%S} UTC")
        print(f"  Location:          {record.latitude:.3f}, {record.longitude:.3f}")
        print(f"  Depth:             {record.depth:.1f} km")
        print(f"  Magnitude:         {record.magnitude:.1f}")
        print(f"  Quality class:     {record.quality_class.value}")
        print(f"  Region:            {record.region or '-'}")
        print(f"  Peak intensity:    {record.peak_intensity:.2f}")
        print(f"  Assigned stations: {record.assigned_stations}")
        ratio = record.max_association_ratio
        print(f"  Max ratio:         {ratio:.2f}" if ratio is not None else "  Max ratio:         -")
        print(f"  Invalidated:       {'yes' if record.invalidated else 'no'}")
        print(f"  Displayed:         {'yes' if not rejections else 'no (' + ', '.join(rejections) + ')'}")
        print(f"\n{'=' * 60}\n")
        return 0

    except Exception as e:
        logger.error(f"Error showing record: {e}", exc_info=True)
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    finally:
        services.shutdown()


def enrich_command(args: argparse.Namespace) -> int:
    """
    Re-run region and intensity enrichment for every record and save.

    Args:
        args: Command line arguments

    Returns:
        Exit code (0 for success, 1 on error or timeout)
    """
    services = create_services(args.regions)
    try:
        archive = open_archive(args, services)
        scheduled = 0
        for record in archive:
            record.resolve_region()
            if record.schedule_intensity_enrichment():
                scheduled += 1

        if not services.queue.drain(timeout=args.timeout):
            logger.error(f"Enrichment did not finish within {args.timeout}s")
            print(f"\nError: enrichment did not finish within {args.timeout}s", file=sys.stderr)
            return 1

        output = validate_file_path(args.output or args.archive, "output")
        written = save_archive(archive, output)
        print(json.dumps({"status": "enriched", "scheduled": scheduled, "written": written, "output": output}, indent=2))
        return 0

    except Exception as e:
        logger.error(f"Error enriching archive: {e}", exc_info=True)
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    finally:
        services.shutdown()


def invalidate_command(args: argparse.Namespace) -> int:
    """
    Flag a record as erroneous and save the snapshot.

    Args:
        args: Command line arguments

    Returns:
        Exit code (0 for success)
    """
    services = create_services()
    try:
        record_id = validate_record_id(args.record_id)
        archive = open_archive(args, services)
        record = archive.get(record_id)
        if record is None:
            print(f"\nNo record found with ID: {record_id}", file=sys.stderr)
            return 1

        record.invalidate()
        save_archive(archive, args.archive)
        print(json.dumps({"status": "invalidated", "record_id": str(record_id)}, indent=2))
        return 0

    except Exception as e:
        logger.error(f"Error invalidating record: {e}", exc_info=True)
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    finally:
        services.shutdown()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quake-archive",
        description="Browse and maintain a seismic event archive snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Records visible under the configured filters
  %(prog)s list --archive data/archive.json --config config/display_filter.yaml

  # Every record, as JSON
  %(prog)s list --archive data/archive.json --all --json

  # Recompute regions and intensities in place
  %(prog)s enrich --archive data/archive.json
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    list_parser = subparsers.add_parser("list", help="List archived records")
    list_parser.add_argument("--archive", required=True, help="Archive snapshot (JSON)")
    list_parser.add_argument("--config", help="Display filter YAML (default: $QUAKE_ARCHIVE_DISPLAY_CONFIG or built-in)")
    list_parser.add_argument("--all", action="store_true", help="Ignore display filters")
    list_parser.add_argument("--limit", type=int, help="Maximum number of records to print")
    list_parser.add_argument("--now", type=int, help="Reference time for the time filter (epoch millis)")
    list_parser.add_argument("--json", action="store_true", help="Print records as JSON")

    show_parser = subparsers.add_parser("show", help="Show one record")
    show_parser.add_argument("--archive", required=True, help="Archive snapshot (JSON)")
    show_parser.add_argument("--record-id", required=True, help="Record UUID")
    show_parser.add_argument("--config", help="Display filter YAML")
    show_parser.add_argument("--now", type=int, help="Reference time for the time filter (epoch millis)")

    enrich_parser = subparsers.add_parser("enrich", help="Recompute region and peak intensity")
    enrich_parser.add_argument("--archive", required=True, help="Archive snapshot (JSON)")
    enrich_parser.add_argument("--output", help="Where to write the result (default: overwrite --archive)")
    enrich_parser.add_argument("--regions", help="Region table YAML (default: built-in table)")
    enrich_parser.add_argument("--timeout", type=float, default=60.0, help="Seconds to wait for enrichment (default: 60)")

    invalidate_parser = subparsers.add_parser("invalidate", help="Flag a record as erroneous")
    invalidate_parser.add_argument("--archive", required=True, help="Archive snapshot (JSON)")
    invalidate_parser.add_argument("--record-id", required=True, help="Record UUID")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the archive CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "list":
        return list_command(args)
    elif args.command == "show":
        return show_command(args)
    elif args.command == "enrich":
        return enrich_command(args)
    elif args.command == "invalidate":
        return invalidate_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
