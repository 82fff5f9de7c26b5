"""CLI script for size-based product recommendations.

Loads a catalog from CSV exports and prints either recommendations for a
set of body measurements or the review statistics of one product.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sizerec.recommender.models import ProductStats, RecommendationEntry
from sizerec.recommender.ranker import RankingConfig
from sizerec.recommender.similarity import ScoringPolicy
from sizerec.service.catalog import CatalogService
from sizerec.service.exceptions import SizeRecException
from sizerec.service.logging_config import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = project_root / "data"


def get_recommendations(
    service: CatalogService,
    measurements: Dict[str, Optional[float]],
    limit: int = 10,
    exclude_product_id: Optional[str] = None,
) -> List[RecommendationEntry]:
    """Validate the measurements and rank products for them.

    Raises:
        InvalidMeasurementsError: If measurements are missing or implausible.
        InvalidRequestError: If the limit is out of range.
    """
    return service.recommend(
        {
            "measurements": measurements,
            "limit": limit,
            "exclude_product_id": exclude_product_id,
        }
    )


def print_recommendations(entries: List[RecommendationEntry], explain: bool = False) -> None:
    if not entries:
        print("\nNo products found with reviews from similarly-sized buyers.\n")
        return

    print(f"\nTop {len(entries)} products:")
    for position, entry in enumerate(entries, start=1):
        line = f"  {position:2d}. {entry.name} ({entry.product_id}) score={entry.final_score:.3f}"
        if explain:
            line += (
                f" similar_reviews={entry.similar_review_count}"
                f" avg_similarity={entry.average_similarity:.3f}"
            )
        print(line)
    print()


def print_stats(product_id: str, stats: ProductStats) -> None:
    print(f"\nReview statistics for {product_id}:")
    print(f"  Total reviews: {stats.total_reviews}")
    print(f"  Average rating: {stats.average_rating:.2f}")
    print("  Rating distribution:")
    for rating, count in stats.rating_distribution.items():
        print(f"    {rating}: {count}")
    print("  Measurement averages:")
    for name, average in stats.measurement_averages.items():
        shown = f"{average:.1f} cm" if average is not None else "n/a"
        print(f"    {name}: {shown} ({stats.measurement_counts[name]} reviews)")
    print()


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Recommend products from reviews by similarly-sized buyers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/recommend_cli.py --waist 70 --bust 90 --hips 95 --height 165
  python scripts/recommend_cli.py --waist 70 --bust 90 --hips 95 --height 165 --limit 5 --explain
  python scripts/recommend_cli.py --stats p001
        """,
    )

    for name in ("waist", "bust", "hips", "height"):
        parser.add_argument(f"--{name}", type=float, help=f"{name.title()} in cm")

    parser.add_argument(
        "--limit", type=int, default=10, help="Number of products (1-20, default: 10)"
    )
    parser.add_argument("--exclude", type=str, default=None, help="Product id to leave out")
    parser.add_argument(
        "--stats",
        type=str,
        default=None,
        metavar="PRODUCT_ID",
        help="Print review statistics for a product instead",
    )
    parser.add_argument(
        "--products-csv", type=str, default=str(DEFAULT_DATA_DIR / "products.csv")
    )
    parser.add_argument(
        "--reviews-csv", type=str, default=str(DEFAULT_DATA_DIR / "reviews.csv")
    )
    parser.add_argument(
        "--refresh-ratings",
        action="store_true",
        help="Recompute product ratings from the reviews file",
    )
    parser.add_argument(
        "--policy",
        type=str,
        choices=[policy.value for policy in ScoringPolicy],
        default=ScoringPolicy.BOUNDED_DEVIATION.value,
        help="Similarity formula (default: bounded_deviation)",
    )
    parser.add_argument("--explain", action="store_true", help="Show score breakdown")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function."""
    args = parse_arguments(argv)
    setup_logging("INFO" if args.verbose else "WARNING", log_format="text")

    try:
        service = CatalogService.from_csv(
            args.products_csv,
            args.reviews_csv,
            refresh_ratings=args.refresh_ratings,
            config=RankingConfig(scoring_policy=ScoringPolicy(args.policy)),
        )

        if args.stats:
            print_stats(args.stats, service.product_stats(args.stats))
            return 0

        entries = get_recommendations(
            service,
            {
                "waist": args.waist,
                "bust": args.bust,
                "hips": args.hips,
                "height": args.height,
            },
            limit=args.limit,
            exclude_product_id=args.exclude,
        )
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except SizeRecException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        for error in e.details.get("errors", []):
            location = ".".join(str(part) for part in error["loc"])
            print(f"  {location}: {error['msg']}", file=sys.stderr)
        return 1

    print_recommendations(entries, explain=args.explain)
    return 0


if __name__ == "__main__":
    sys.exit(main())
