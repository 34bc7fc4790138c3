"""CLI command for route safety analysis."""

import sys
from pathlib import Path

from ..core.config import SafetyConfig
from ..core.errors import RouteSafetyError
from ..core.utils import load_gpx_route, load_routes_json
from ..exporters import export_geojson, export_gpx, export_json
from ..safety.analyzer import RouteSafetyAnalyzer
from ..stores import CsvReviewStore, HttpReviewStore


def load_routes(paths):
    """Load candidate routes from GPX and JSON files, in argument order."""
    routes = []
    for path in paths:
        if not Path(path).exists():
            raise FileNotFoundError(path)
        if Path(path).suffix.lower() == ".gpx":
            routes.append(load_gpx_route(path))
        else:
            routes.extend(load_routes_json(path))
    return routes


def build_config(args) -> SafetyConfig:
    """Config file values, then command-line overrides."""
    config = SafetyConfig.from_yaml(args.config) if args.config else SafetyConfig()

    overrides = {
        "search_radius_m": args.search_radius,
        "recency_days": args.recency_days,
        "confidence_threshold": args.confidence_threshold,
        "recency_weight": args.recency_weight,
        "max_workers": args.workers,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    return config.replace(**overrides) if overrides else config


def print_report(report):
    print("\n" + "=" * 70)
    print("📊 ANALYSIS RESULTS")
    print("=" * 70)

    for rank, analysis in enumerate(report.routes, start=1):
        result = analysis.result
        marker = "⭐" if rank == 1 else "  "
        print(
            f"{marker} {rank}. {analysis.route_name}: "
            f"safety {result.overall_safety:.1f}/10, "
            f"{result.total_distance_km:.2f} km, "
            f"{len(result.dangerous_segments)} dangerous segments"
        )
        print(
            f"     🟢 High: {result.breakdown.high}  "
            f"🟡 Moderate: {result.breakdown.moderate}  "
            f"🔴 Low: {result.breakdown.low}"
        )
        print(f"     Confidence: {analysis.confidence_level}")

    recommended = report.recommended
    print("\n" + "=" * 70)
    print(f"✅ RECOMMENDED: {recommended.route_name}")
    print("=" * 70)
    print(recommended.route_explanation)

    if recommended.result.dangerous_segments:
        print("\n⚠️  Segments needing caution:")
        for segment in recommended.segments:
            if segment.caution_notes:
                print(
                    f"  • {segment.start_point.name} → {segment.end_point.name}: "
                    f"{segment.caution_notes}"
                )


def run_analysis(args):
    """Execute route safety analysis command."""
    try:
        config = build_config(args)
        routes = load_routes(args.routes)

        if args.reviews:
            store = CsvReviewStore(args.reviews)
            source = args.reviews
        else:
            store = HttpReviewStore(args.reviews_url)
            source = args.reviews_url

        print("=" * 70)
        print("🚶 ROUTE SAFETY ANALYSIS")
        print("=" * 70)
        print(f"Routes: {len(routes)}")
        print(f"Reviews: {source}")
        print(f"Search radius: {config.search_radius_m:g} m")
        print(f"Recency weighting: {config.recency_weight} ({config.recency_days} days)")
        if args.time_of_day:
            print(f"Time of day: {args.time_of_day}")

        analyzer = RouteSafetyAnalyzer(store, config)
        report = analyzer.analyze_routes(routes, time_of_day=args.time_of_day)

        print_report(report)

        if args.output_json:
            path = export_json(report, args.output_json)
            print(f"\n✓ Exported JSON report: {path}")
        if args.output_geojson:
            path = export_geojson(report, args.output_geojson)
            print(f"✓ Exported GeoJSON file: {path}")
        if args.output_gpx:
            path = export_gpx(report, args.output_gpx)
            print(f"✓ Exported GPX file: {path}")

        return 0

    except FileNotFoundError as e:
        print(f"\n❌ Error: File not found: {e}", file=sys.stderr)
        return 1
    except (RouteSafetyError, ValueError) as e:
        print(f"\n❌ Error during safety analysis: {e}", file=sys.stderr)
        return 1
