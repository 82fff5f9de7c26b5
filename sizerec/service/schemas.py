"""Request validation models.

The recommender trusts the measurements it receives. These pydantic models
are the layer in front of it that rejects implausible values and enforces
request bounds before the core is called.
"""

import logging
from typing import Any, Dict, List, Literal, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator

from sizerec.recommender.measurements import MeasurementVector
from sizerec.service.exceptions import InvalidMeasurementsError, InvalidRequestError

# Configure module logger
logger = logging.getLogger(__name__)

MAX_RECOMMENDATION_LIMIT = 20

SortOption = Literal[
    "newest", "most_helpful", "highest_rating", "lowest_rating", "size_similarity"
]

ModelT = TypeVar("ModelT", bound=BaseModel)


class MeasurementsInput(BaseModel):
    """Body measurements as submitted by a shopper, in centimeters."""

    waist: Optional[float] = Field(
        default=None, ge=50, le=200, description="Waist measurement must be between 50-200 cm"
    )
    bust: Optional[float] = Field(
        default=None, ge=50, le=200, description="Bust measurement must be between 50-200 cm"
    )
    hips: Optional[float] = Field(
        default=None, ge=50, le=200, description="Hips measurement must be between 50-200 cm"
    )
    height: Optional[float] = Field(
        default=None, ge=130, le=230, description="Height must be between 130-230 cm"
    )

    def to_vector(self) -> MeasurementVector:
        return MeasurementVector(
            waist=self.waist, bust=self.bust, hips=self.hips, height=self.height
        )

    def is_complete(self) -> bool:
        return self.to_vector().is_complete()


class RecommendationRequest(BaseModel):
    """Parameters of a size-based recommendation request."""

    measurements: MeasurementsInput
    exclude_product_id: Optional[str] = Field(
        default=None, description="Product to leave out of the results"
    )
    limit: int = Field(
        default=10,
        ge=1,
        le=MAX_RECOMMENDATION_LIMIT,
        description="Limit must be between 1-20",
    )

    @field_validator("measurements")
    @classmethod
    def require_all_measurements(cls, value: MeasurementsInput) -> MeasurementsInput:
        if not value.is_complete():
            raise ValueError("All measurements are required for recommendations")
        return value


class ReviewQuery(BaseModel):
    """Filtering and ordering options for a product's review listing."""

    rating: Optional[int] = Field(
        default=None, ge=1, le=5, description="Rating must be between 1-5"
    )
    sort: SortOption = "newest"
    size_similarity: bool = Field(
        default=False, description="Keep only reviews from similarly-sized buyers"
    )
    measurements: Optional[MeasurementsInput] = Field(default=None, validate_default=True)

    @field_validator("measurements")
    @classmethod
    def require_measurements_for_similarity(
        cls, value: Optional[MeasurementsInput], info: ValidationInfo
    ) -> Optional[MeasurementsInput]:
        needs_measurements = (
            info.data.get("size_similarity")
            or info.data.get("sort") == "size_similarity"
        )
        if needs_measurements and (value is None or not value.is_complete()):
            raise ValueError("All measurements are required when using size similarity")
        return value


def _validate(model: Type[ModelT], data: Mapping[str, Any], message: str) -> ModelT:
    try:
        return model.model_validate(dict(data))
    except ValidationError as e:
        errors: List[Dict[str, Any]] = e.errors(include_url=False, include_context=False)
        logger.warning(
            message,
            extra={"model": model.__name__, "num_errors": len(errors)},
        )
        if any(error["loc"] and error["loc"][0] == "measurements" for error in errors):
            raise InvalidMeasurementsError(message, errors) from e
        raise InvalidRequestError(message, errors) from e


def parse_recommendation_request(data: Mapping[str, Any]) -> RecommendationRequest:
    """Validate raw recommendation parameters.

    Raises:
        InvalidMeasurementsError: If measurements are missing or implausible.
        InvalidRequestError: If another parameter (e.g. limit) is invalid.
    """
    return _validate(RecommendationRequest, data, "Invalid recommendation request")


def parse_review_query(data: Mapping[str, Any]) -> ReviewQuery:
    """Validate raw review listing parameters.

    Raises:
        InvalidMeasurementsError: If measurements are implausible or missing
            while size similarity is requested.
        InvalidRequestError: If rating or sort is invalid.
    """
    return _validate(ReviewQuery, data, "Invalid review query")
