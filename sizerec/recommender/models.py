"""Catalog records consumed and produced by the recommender.

Products and reviews are handed in by the host application; scored reviews,
recommendation entries and product statistics are handed back by value.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from sizerec.recommender.measurements import MeasurementVector


@dataclass(frozen=True)
class Product:
    """A catalog product.

    Attributes:
        product_id: Unique product identifier.
        name: Display name.
        average_rating: Mean review rating, 0 when the product has no reviews.
        category: Optional category (dress, top, bottom, ...).
        price: Optional rental price.
    """

    product_id: str
    name: str
    average_rating: float = 0.0
    category: Optional[str] = None
    price: Optional[float] = None


@dataclass(frozen=True)
class Review:
    """A buyer review, optionally tagged with the buyer's measurements."""

    review_id: str
    product_id: str
    rating: int
    user_id: Optional[str] = None
    measurements: Optional[MeasurementVector] = None
    created_at: Optional[datetime] = None
    helpful_count: int = 0
    review_text: str = ""


@dataclass(frozen=True)
class ScoredReview:
    """A review's fit score against one target vector."""

    review_id: str
    product_id: str
    similarity_score: float
    rating: int


@dataclass(frozen=True)
class RecommendationEntry:
    """One ranked product in a recommendation list.

    Attributes:
        product_id: Recommended product.
        name: Product display name.
        final_score: Blend of average similarity and normalized rating.
        similar_review_count: Reviews that passed the acceptance threshold.
        average_similarity: Mean fit score over the accepted reviews.
    """

    product_id: str
    name: str
    final_score: float
    similar_review_count: int
    average_similarity: float


@dataclass(frozen=True)
class ProductStats:
    """Summary statistics folded from a product's reviews."""

    total_reviews: int
    average_rating: float
    rating_distribution: Dict[int, int] = field(default_factory=dict)
    measurement_averages: Dict[str, Optional[float]] = field(default_factory=dict)
    measurement_counts: Dict[str, int] = field(default_factory=dict)
