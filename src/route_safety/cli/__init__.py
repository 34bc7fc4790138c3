"""Command-line interface for Route Safety."""

import sys
import argparse
import logging


def main(argv=None):
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="route-safety",
        description="Rank candidate walking routes by community safety reviews"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze subcommand
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze and rank candidate routes"
    )
    analyze_parser.add_argument(
        "--route",
        dest="routes",
        action="append",
        required=True,
        help="Route file (.gpx holds one route, .json may hold several); repeatable"
    )
    reviews_group = analyze_parser.add_mutually_exclusive_group(required=True)
    reviews_group.add_argument(
        "--reviews",
        help="CSV file with reviews"
    )
    reviews_group.add_argument(
        "--reviews-url",
        help="Base URL of a review service (queried at <url>/reviews)"
    )
    analyze_parser.add_argument(
        "--time-of-day",
        help="Planned travel time as ISO-8601, e.g. 2026-10-19T22:00:00"
    )
    analyze_parser.add_argument(
        "--config",
        help="Path to safety config YAML (default: built-in settings)"
    )
    analyze_parser.add_argument(
        "--search-radius",
        type=float,
        help="Review search radius in meters around each point (default: 100)"
    )
    analyze_parser.add_argument(
        "--recency-days",
        type=int,
        help="Reviews newer than this many days get decaying weight (default: 60)"
    )
    analyze_parser.add_argument(
        "--confidence-threshold",
        type=int,
        help="Reviews needed at a point for full confidence (default: 2)"
    )
    analyze_parser.add_argument(
        "--no-recency-weight",
        dest="recency_weight",
        action="store_false",
        default=None,
        help="Weight all reviews equally regardless of age"
    )
    analyze_parser.add_argument(
        "--workers",
        type=int,
        help="Number of point scoring workers (default: 4)"
    )
    analyze_parser.add_argument(
        "--output-json",
        help="Write the full report as JSON"
    )
    analyze_parser.add_argument(
        "--output-geojson",
        help="Write route segments colored by safety as GeoJSON"
    )
    analyze_parser.add_argument(
        "--output-gpx",
        help="Write routes as GPX tracks with Garmin colors"
    )

    # Add-review subcommand
    review_parser = subparsers.add_parser(
        "add-review",
        help="Append a review to a CSV review file"
    )
    review_parser.add_argument(
        "--reviews",
        required=True,
        help="CSV file with reviews (created if missing)"
    )
    review_parser.add_argument("--lat", required=True, help="Latitude of the reviewed spot")
    review_parser.add_argument("--lon", required=True, help="Longitude of the reviewed spot")
    review_parser.add_argument(
        "--rating",
        type=float,
        required=True,
        help="Safety rating from 1 (unsafe) to 10 (very safe)"
    )
    for flag, help_text, required in (
        ("--police-presence", "Police presence", True),
        ("--street-lights", "Street lighting", False),
        ("--people-density", "People density", False),
        ("--traffic", "Vehicular traffic", False),
    ):
        review_parser.add_argument(
            flag,
            choices=["none", "low", "moderate", "high"],
            required=required,
            help=f"{help_text} level"
        )
    review_parser.add_argument(
        "--time-of-day",
        help="When the reviewer was there, ISO-8601 (default: now)"
    )
    review_parser.add_argument("--author", help="Reviewer id")

    # Parse arguments
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Route to appropriate subcommand
    if args.command == "analyze":
        from .analyze import run_analysis
        sys.exit(run_analysis(args))
    elif args.command == "add-review":
        from .review import run_add_review
        sys.exit(run_add_review(args))


if __name__ == "__main__":
    main()
