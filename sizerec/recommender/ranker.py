"""Recommendation ranking.

Scores every review against the shopper's measurements, keeps the reviews
that clear the acceptance threshold, and ranks products by a blend of their
average accepted similarity and their average rating.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from sizerec.recommender.measurements import MeasurementVector
from sizerec.recommender.models import Product, RecommendationEntry, Review, ScoredReview
from sizerec.recommender.similarity import ScoringPolicy, get_scorer

# Configure module logger
logger = logging.getLogger(__name__)

# Default ranking parameters
DEFAULT_ACCEPTANCE_THRESHOLD = 0.8
DEFAULT_SIMILARITY_WEIGHT = 0.7  # 70% average fit score
DEFAULT_RATING_WEIGHT = 0.3  # 30% normalized product rating
DEFAULT_LIMIT = 10
MAX_RATING = 5.0


@dataclass
class RankingConfig:
    """Parameters of a ranking pass.

    Attributes:
        acceptance_threshold: Minimum fit score for a review to count.
        similarity_weight: Share of the final score from average similarity.
        rating_weight: Share of the final score from the product rating.
        scoring_policy: Similarity formula used for every review.
        default_limit: Result size when the caller gives none.
    """

    acceptance_threshold: float = DEFAULT_ACCEPTANCE_THRESHOLD
    similarity_weight: float = DEFAULT_SIMILARITY_WEIGHT
    rating_weight: float = DEFAULT_RATING_WEIGHT
    scoring_policy: ScoringPolicy = ScoringPolicy.BOUNDED_DEVIATION
    default_limit: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        self.scoring_policy = ScoringPolicy(self.scoring_policy)

        if self.similarity_weight < 0 or self.rating_weight < 0:
            raise ValueError("Ranking weights must be non-negative")
        if self.default_limit < 1:
            raise ValueError(f"default_limit must be positive, got {self.default_limit}")

        # Normalize weights
        total_weight = self.similarity_weight + self.rating_weight
        if total_weight > 0:
            self.similarity_weight = self.similarity_weight / total_weight
            self.rating_weight = self.rating_weight / total_weight


@dataclass(frozen=True)
class RankingSummary:
    """Counts describing one ranking pass."""

    scoring_policy: ScoringPolicy
    num_scored_reviews: int
    num_accepted_reviews: int
    num_candidates: int


@dataclass
class ProductScoreAccumulator:
    """Working totals for one product during a single ranking pass."""

    product_id: str
    average_rating: float
    similar_review_count: int = 0
    total_similarity: float = 0.0

    def add(self, similarity_score: float) -> None:
        self.similar_review_count += 1
        self.total_similarity += similarity_score

    @property
    def average_similarity(self) -> float:
        return self.total_similarity / self.similar_review_count


class RecommendationRanker:
    """Ranks products by how well their reviewers' sizes match a shopper."""

    def __init__(self, config: Optional[RankingConfig] = None):
        self.config = config or RankingConfig()
        self.scorer = get_scorer(self.config.scoring_policy)

        logger.info(
            f"Initialized RecommendationRanker: "
            f"policy={self.config.scoring_policy.value}, "
            f"threshold={self.config.acceptance_threshold:.2f}, "
            f"similarity weight={self.config.similarity_weight:.2f}, "
            f"rating weight={self.config.rating_weight:.2f}"
        )

    def score_reviews(
        self,
        target: Optional[MeasurementVector],
        reviews: Iterable[Review],
    ) -> List[ScoredReview]:
        """Fit score of each review against ``target``, in input order."""
        return [
            ScoredReview(
                review_id=review.review_id,
                product_id=review.product_id,
                similarity_score=self.scorer(target, review.measurements),
                rating=review.rating,
            )
            for review in reviews
        ]

    def _final_score(self, accumulator: ProductScoreAccumulator) -> float:
        rating_score = min(max(accumulator.average_rating / MAX_RATING, 0.0), 1.0)
        return (
            accumulator.average_similarity * self.config.similarity_weight
            + rating_score * self.config.rating_weight
        )

    def rank(
        self,
        target: Optional[MeasurementVector],
        reviews: Iterable[Review],
        products: Mapping[str, Product],
        exclude_product_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[RecommendationEntry]:
        """Rank products for a shopper; see ``rank_with_summary``."""
        recommendations, _ = self.rank_with_summary(
            target,
            reviews,
            products,
            exclude_product_id=exclude_product_id,
            limit=limit,
        )
        return recommendations

    def rank_with_summary(
        self,
        target: Optional[MeasurementVector],
        reviews: Iterable[Review],
        products: Mapping[str, Product],
        exclude_product_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Tuple[List[RecommendationEntry], RankingSummary]:
        """Rank products for a shopper and report what the pass looked at.

        Args:
            target: The shopper's measurements.
            reviews: Candidate reviews across any number of products.
            products: Product records by id. Supplies each product's name and
                average rating; reviews of products missing here are skipped.
            exclude_product_id: Product to leave out, typically the one being
                viewed.
            limit: Maximum number of entries (default from config).

        Returns:
            A tuple of:
                - Entries sorted by final score, highest first, ties broken by
                  product id. Products without any review at or above the
                  acceptance threshold never appear. An absent target or an
                  empty corpus yields an empty list.
                - A RankingSummary with the policy used and how many reviews
                  were scored and accepted.

        Raises:
            ValueError: If limit is not a positive integer.
        """
        limit = self.config.default_limit if limit is None else limit
        if limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit}")

        accumulators: Dict[str, ProductScoreAccumulator] = {}
        num_scored = 0
        num_accepted = 0

        for review in reviews:
            if exclude_product_id is not None and review.product_id == exclude_product_id:
                continue
            product = products.get(review.product_id)
            if product is None:
                continue

            num_scored += 1
            similarity = self.scorer(target, review.measurements)
            if similarity < self.config.acceptance_threshold:
                continue

            num_accepted += 1
            accumulator = accumulators.get(review.product_id)
            if accumulator is None:
                accumulator = ProductScoreAccumulator(
                    product_id=review.product_id,
                    average_rating=product.average_rating,
                )
                accumulators[review.product_id] = accumulator
            accumulator.add(similarity)

        entries = [
            RecommendationEntry(
                product_id=acc.product_id,
                name=products[acc.product_id].name,
                final_score=self._final_score(acc),
                similar_review_count=acc.similar_review_count,
                average_similarity=acc.average_similarity,
            )
            for acc in accumulators.values()
        ]
        entries.sort(key=lambda entry: (-entry.final_score, entry.product_id))
        recommendations = entries[:limit]
        summary = RankingSummary(
            scoring_policy=self.config.scoring_policy,
            num_scored_reviews=num_scored,
            num_accepted_reviews=num_accepted,
            num_candidates=len(entries),
        )

        logger.info(
            "Ranked products",
            extra={
                "scoring_policy": summary.scoring_policy.value,
                "num_scored_reviews": num_scored,
                "num_accepted_reviews": num_accepted,
                "num_candidates": len(entries),
                "num_recommendations": len(recommendations),
                "excluded_product_id": exclude_product_id,
                "limit": limit,
            },
        )

        return recommendations, summary


def rank(
    target: Optional[MeasurementVector],
    reviews: Iterable[Review],
    products: Mapping[str, Product],
    exclude_product_id: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
) -> List[RecommendationEntry]:
    """Rank with the default configuration."""
    return RecommendationRanker().rank(
        target,
        reviews,
        products,
        exclude_product_id=exclude_product_id,
        limit=limit,
    )
