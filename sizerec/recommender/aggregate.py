"""Per-product review statistics.

Statistics are recomputed from the full review set on every call. Nothing is
cached or maintained incrementally, so results always reflect the reviews
passed in.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from sizerec.recommender.measurements import MEASUREMENT_FIELDS
from sizerec.recommender.models import ProductStats, Review

# Configure module logger
logger = logging.getLogger(__name__)

RATING_VALUES = (1, 2, 3, 4, 5)


class ProductAggregator:
    """Folds reviews into ProductStats.

    Holds no state between calls; each call builds its own accumulators.
    """

    def aggregate(self, reviews: Iterable[Review]) -> ProductStats:
        """Summarize a product's reviews.

        Args:
            reviews: Reviews of a single product.

        Returns:
            ProductStats with the review count, mean rating (0 without
            reviews), a distribution over all five rating values, and per
            dimension the mean of present measurements (None when no review
            carries that dimension) with the number of values averaged.

        Example:
            >>> ProductAggregator().aggregate([]).rating_distribution
            {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
        """
        total_reviews = 0
        rating_sum = 0
        distribution: Dict[int, int] = {rating: 0 for rating in RATING_VALUES}
        measurement_sums: Dict[str, float] = {name: 0.0 for name in MEASUREMENT_FIELDS}
        measurement_counts: Dict[str, int] = {name: 0 for name in MEASUREMENT_FIELDS}

        for review in reviews:
            total_reviews += 1
            rating_sum += review.rating
            if review.rating in distribution:
                distribution[review.rating] += 1

            if review.measurements is None:
                continue
            for name in MEASUREMENT_FIELDS:
                value = review.measurements.get(name)
                if value is not None:
                    measurement_sums[name] += value
                    measurement_counts[name] += 1

        average_rating = rating_sum / total_reviews if total_reviews > 0 else 0.0

        measurement_averages: Dict[str, Optional[float]] = {
            name: (
                measurement_sums[name] / measurement_counts[name]
                if measurement_counts[name] > 0
                else None
            )
            for name in MEASUREMENT_FIELDS
        }

        return ProductStats(
            total_reviews=total_reviews,
            average_rating=average_rating,
            rating_distribution=distribution,
            measurement_averages=measurement_averages,
            measurement_counts=measurement_counts,
        )

    def aggregate_by_product(
        self, reviews: Iterable[Review]
    ) -> Dict[str, ProductStats]:
        """Summarize a mixed corpus, one ProductStats per product id."""
        grouped: Dict[str, List[Review]] = defaultdict(list)
        for review in reviews:
            grouped[review.product_id].append(review)

        logger.debug(f"Aggregating reviews for {len(grouped)} products")

        return {
            product_id: self.aggregate(product_reviews)
            for product_id, product_reviews in grouped.items()
        }


def aggregate(reviews: Iterable[Review]) -> ProductStats:
    """Shortcut for ``ProductAggregator().aggregate(reviews)``."""
    return ProductAggregator().aggregate(reviews)
