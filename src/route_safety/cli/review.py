"""CLI command for adding reviews to a CSV review file."""

import sys
from datetime import datetime, timezone

from ..core.errors import RouteSafetyError
from ..safety.models import Review
from ..stores import CsvReviewStore


def run_add_review(args):
    """Validate and append one review."""
    now = datetime.now(timezone.utc)
    record = {
        "latitude": args.lat,
        "longitude": args.lon,
        "safety_rating": args.rating,
        "police_presence": args.police_presence,
        "street_lights": args.street_lights,
        "people_density": args.people_density,
        "traffic": args.traffic,
        "submitted_at": now,
        "review_time_of_day": args.time_of_day or now,
        "author_id": args.author,
    }

    try:
        review = Review.from_dict(record)
        CsvReviewStore(args.reviews).add(review)
    except (RouteSafetyError, OSError) as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        return 1

    print(
        f"✓ Added review at ({review.latitude}, {review.longitude}) "
        f"with rating {review.safety_rating:g}/10 to {args.reviews}"
    )
    return 0
