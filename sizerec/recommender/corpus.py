"""Read-only view over a review corpus.

ReviewCorpusIndex wraps reviews that the host has already loaded and offers
filtering, grouping and ordering. Every filter returns a new index; the
reviews themselves are never modified.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from sizerec.recommender.measurements import MeasurementVector
from sizerec.recommender.models import Review, ScoredReview
from sizerec.recommender.similarity import Scorer, score_batch

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.8

SORT_NEWEST = "newest"
SORT_MOST_HELPFUL = "most_helpful"
SORT_HIGHEST_RATING = "highest_rating"
SORT_LOWEST_RATING = "lowest_rating"
SORT_SIZE_SIMILARITY = "size_similarity"

SORT_OPTIONS = (
    SORT_NEWEST,
    SORT_MOST_HELPFUL,
    SORT_HIGHEST_RATING,
    SORT_LOWEST_RATING,
    SORT_SIZE_SIMILARITY,
)


class ReviewCorpusIndex:
    """Immutable, iterable collection of reviews."""

    def __init__(self, reviews: Iterable[Review] = ()):
        self._reviews: Tuple[Review, ...] = tuple(reviews)

    def __iter__(self) -> Iterator[Review]:
        return iter(self._reviews)

    def __len__(self) -> int:
        return len(self._reviews)

    def __repr__(self) -> str:
        return f"ReviewCorpusIndex({len(self._reviews)} reviews)"

    @property
    def reviews(self) -> Tuple[Review, ...]:
        return self._reviews

    def _where(self, predicate) -> "ReviewCorpusIndex":
        return ReviewCorpusIndex(r for r in self._reviews if predicate(r))

    def for_product(self, product_id: str) -> "ReviewCorpusIndex":
        return self._where(lambda r: r.product_id == product_id)

    def excluding_product(self, product_id: Optional[str]) -> "ReviewCorpusIndex":
        if product_id is None:
            return self
        return self._where(lambda r: r.product_id != product_id)

    def with_rating(self, rating: int) -> "ReviewCorpusIndex":
        return self._where(lambda r: r.rating == rating)

    def with_min_rating(self, rating: int) -> "ReviewCorpusIndex":
        return self._where(lambda r: r.rating >= rating)

    def created_since(self, moment: datetime) -> "ReviewCorpusIndex":
        """Reviews created at or after ``moment``; undated reviews are dropped."""
        return self._where(lambda r: r.created_at is not None and r.created_at >= moment)

    def product_ids(self) -> List[str]:
        """Distinct product ids, in first-seen order."""
        return list(dict.fromkeys(r.product_id for r in self._reviews))

    def group_by_product(self) -> Dict[str, "ReviewCorpusIndex"]:
        grouped: Dict[str, List[Review]] = defaultdict(list)
        for review in self._reviews:
            grouped[review.product_id].append(review)
        return {pid: ReviewCorpusIndex(items) for pid, items in grouped.items()}

    def _scores(
        self, target: Optional[MeasurementVector], scorer: Optional[Scorer]
    ) -> List[float]:
        if scorer is None:
            return score_batch(target, [r.measurements for r in self._reviews]).tolist()
        return [scorer(target, r.measurements) for r in self._reviews]

    def score_against(
        self,
        target: Optional[MeasurementVector],
        scorer: Optional[Scorer] = None,
    ) -> List[ScoredReview]:
        """Fit score of every review against ``target``, in corpus order.

        Uses the vectorized bounded-deviation scorer unless ``scorer`` is given.
        """
        scores = self._scores(target, scorer)
        return [
            ScoredReview(
                review_id=review.review_id,
                product_id=review.product_id,
                similarity_score=value,
                rating=review.rating,
            )
            for review, value in zip(self._reviews, scores)
        ]

    def similar_to(
        self,
        target: Optional[MeasurementVector],
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        scorer: Optional[Scorer] = None,
    ) -> List[ScoredReview]:
        """Reviews whose fit score reaches ``threshold``, most similar first."""
        scored = [
            s
            for s in self.score_against(target, scorer)
            if s.similarity_score >= threshold
        ]
        scored.sort(key=lambda s: s.similarity_score, reverse=True)

        logger.debug(
            "Filtered reviews by size similarity",
            extra={
                "num_reviews": len(self._reviews),
                "num_similar": len(scored),
                "threshold": threshold,
            },
        )

        return scored

    def sorted_by(
        self,
        sort: str = SORT_NEWEST,
        target: Optional[MeasurementVector] = None,
        scorer: Optional[Scorer] = None,
    ) -> "ReviewCorpusIndex":
        """Return the reviews in the requested order.

        Args:
            sort: One of SORT_OPTIONS. Ties keep corpus order.
            target: Shopper measurements, required for "size_similarity".
            scorer: Similarity function for "size_similarity"; defaults to
                the vectorized bounded-deviation scorer.

        Raises:
            ValueError: If the sort option is unknown, or if "size_similarity"
                is requested without a target.
        """
        if sort == SORT_NEWEST:
            dated = [r for r in self._reviews if r.created_at is not None]
            undated = [r for r in self._reviews if r.created_at is None]
            ordered = sorted(dated, key=lambda r: r.created_at, reverse=True) + undated
        elif sort == SORT_MOST_HELPFUL:
            ordered = sorted(self._reviews, key=lambda r: r.helpful_count, reverse=True)
        elif sort == SORT_HIGHEST_RATING:
            ordered = sorted(self._reviews, key=lambda r: r.rating, reverse=True)
        elif sort == SORT_LOWEST_RATING:
            ordered = sorted(self._reviews, key=lambda r: r.rating)
        elif sort == SORT_SIZE_SIMILARITY:
            if target is None:
                raise ValueError("Sorting by size similarity requires target measurements")
            scores = self._scores(target, scorer)
            pairs = sorted(
                zip(self._reviews, scores), key=lambda pair: pair[1], reverse=True
            )
            ordered = [review for review, _ in pairs]
        else:
            raise ValueError(f"Unknown sort option '{sort}'. Expected one of {SORT_OPTIONS}")

        return ReviewCorpusIndex(ordered)
