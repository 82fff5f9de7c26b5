"""Catalog service.

CatalogService is what a host application talks to: it holds the loaded
products and reviews, validates incoming parameters, runs the recommender,
and records logs and metrics around each call.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from sizerec.recommender.aggregate import ProductAggregator
from sizerec.recommender.corpus import ReviewCorpusIndex
from sizerec.recommender.models import Product, ProductStats, RecommendationEntry, Review
from sizerec.recommender.ranker import RankingConfig, RecommendationRanker
from sizerec.service.exceptions import ProductNotFoundError
from sizerec.service.loaders import (
    load_products_csv,
    load_reviews_csv,
    refresh_average_ratings,
)
from sizerec.service.metrics import MetricsService, metrics_service
from sizerec.service.schemas import (
    RecommendationRequest,
    ReviewQuery,
    parse_recommendation_request,
    parse_review_query,
)

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewListItem:
    """A review in a listing, with its fit score when measurements were given."""

    review: Review
    size_similarity: Optional[float] = None


class CatalogService:
    """Serves recommendations and review statistics over an in-memory corpus."""

    def __init__(
        self,
        products: Mapping[str, Product],
        reviews: Iterable[Review],
        config: Optional[RankingConfig] = None,
        metrics: Optional[MetricsService] = None,
    ):
        self.ranker = RecommendationRanker(config)
        self.aggregator = ProductAggregator()
        self.metrics = metrics or metrics_service
        self._products: Dict[str, Product] = {}
        self._reviews = ReviewCorpusIndex()
        self.reload(products, reviews)

    @classmethod
    def from_csv(
        cls,
        products_csv: str,
        reviews_csv: str,
        refresh_ratings: bool = False,
        config: Optional[RankingConfig] = None,
    ) -> "CatalogService":
        """Build a service from CSV exports.

        Args:
            products_csv: Path to the products CSV.
            reviews_csv: Path to the reviews CSV.
            refresh_ratings: Recompute each product's average rating from the
                loaded reviews instead of trusting the exported value.
            config: Ranking configuration.

        Raises:
            FileNotFoundError: If either file is missing.
            CorpusFormatError: If either file is malformed.
        """
        products = load_products_csv(products_csv)
        reviews = load_reviews_csv(reviews_csv)
        if refresh_ratings:
            products = refresh_average_ratings(products, reviews)
        return cls(products, reviews, config=config)

    @property
    def products(self) -> Dict[str, Product]:
        return dict(self._products)

    @property
    def reviews(self) -> ReviewCorpusIndex:
        return self._reviews

    def reload(self, products: Mapping[str, Product], reviews: Iterable[Review]) -> None:
        """Replace the corpus served by this instance."""
        self._products = dict(products)
        self._reviews = ReviewCorpusIndex(reviews)
        logger.info(
            "Catalog loaded",
            extra={
                "num_products": len(self._products),
                "num_reviews": len(self._reviews),
            },
        )

    def get_product(self, product_id: str) -> Product:
        """Look up a product.

        Raises:
            ProductNotFoundError: If the product is not in the catalog.
        """
        product = self._products.get(product_id)
        if product is None:
            logger.warning(f"Product {product_id} not found")
            raise ProductNotFoundError(product_id)
        return product

    def recommend(
        self, request: Union[RecommendationRequest, Mapping[str, Any]]
    ) -> List[RecommendationEntry]:
        """Recommend products for the measurements in ``request``.

        Args:
            request: A validated RecommendationRequest, or raw parameters
                (measurements, exclude_product_id, limit) to validate.

        Returns:
            Ranked recommendation entries.

        Raises:
            InvalidMeasurementsError: If measurements are missing or
                implausible.
            InvalidRequestError: If the limit or another parameter is invalid.
        """
        if not isinstance(request, RecommendationRequest):
            request = parse_recommendation_request(request)

        start_time = time.time()
        try:
            recommendations, summary = self.ranker.rank_with_summary(
                request.measurements.to_vector(),
                self._reviews,
                self._products,
                exclude_product_id=request.exclude_product_id,
                limit=request.limit,
            )
        except Exception as e:
            logger.error(
                "Recommendation ranking failed",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            raise

        latency_ms = (time.time() - start_time) * 1000
        self.metrics.record_ranking(summary, len(recommendations), latency_ms)

        logger.info(
            "Recommendations generated",
            extra={
                "num_recommendations": len(recommendations),
                "limit": request.limit,
                "exclude_product_id": request.exclude_product_id,
                "total_time_ms": round(latency_ms, 2),
            },
        )

        return recommendations

    def product_stats(self, product_id: str) -> ProductStats:
        """Review statistics for one product, recomputed on every call.

        Raises:
            ProductNotFoundError: If the product is not in the catalog.
        """
        self.get_product(product_id)
        return self.aggregator.aggregate(self._reviews.for_product(product_id))

    def product_reviews(
        self,
        product_id: str,
        query: Union[ReviewQuery, Mapping[str, Any], None] = None,
    ) -> List[ReviewListItem]:
        """List a product's reviews.

        Reviews can be narrowed to one rating and ordered by any of the
        review sort options. When complete measurements are supplied each
        item carries its fit score, and with ``size_similarity`` set only
        reviews reaching the acceptance threshold are kept.

        Raises:
            ProductNotFoundError: If the product is not in the catalog.
            InvalidMeasurementsError: If measurements are implausible, or
                missing while size similarity is requested.
            InvalidRequestError: If rating or sort is invalid.
        """
        if not isinstance(query, ReviewQuery):
            query = parse_review_query(query or {})

        self.get_product(product_id)

        corpus = self._reviews.for_product(product_id)
        if query.rating is not None:
            corpus = corpus.with_rating(query.rating)

        target = None
        if query.measurements is not None and query.measurements.is_complete():
            target = query.measurements.to_vector()

        scorer = self.ranker.scorer
        threshold = self.ranker.config.acceptance_threshold
        corpus = corpus.sorted_by(query.sort, target, scorer=scorer)

        if target is None:
            return [ReviewListItem(review=review) for review in corpus]

        items = [
            ReviewListItem(review=review, size_similarity=scored.similarity_score)
            for review, scored in zip(corpus, corpus.score_against(target, scorer))
        ]
        if query.size_similarity:
            items = [
                item
                for item in items
                if item.size_similarity >= threshold
            ]

        return items
