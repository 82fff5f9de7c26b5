"""Tests for request validation models."""

import pytest

from sizerec.recommender.measurements import MeasurementVector
from sizerec.service.exceptions import InvalidMeasurementsError, InvalidRequestError
from sizerec.service.schemas import (
    MeasurementsInput,
    ReviewQuery,
    parse_recommendation_request,
    parse_review_query,
)

VALID_MEASUREMENTS = {"waist": 70, "bust": 90, "hips": 95, "height": 165}


def test_measurements_input_to_vector():
    """Validated input converts to a measurement vector."""
    measurements = MeasurementsInput(**VALID_MEASUREMENTS)

    assert measurements.is_complete()
    assert measurements.to_vector() == MeasurementVector(
        waist=70.0, bust=90.0, hips=95.0, height=165.0
    )


def test_partial_measurements_are_not_complete():
    """Missing fields are allowed on the model but flagged as incomplete."""
    measurements = MeasurementsInput(waist=70, height=165)

    assert not measurements.is_complete()
    assert measurements.to_vector().present_fields() == ["waist", "height"]


def test_recommendation_request_defaults():
    """Limit defaults to 10 and no product is excluded."""
    request = parse_recommendation_request({"measurements": VALID_MEASUREMENTS})

    assert request.limit == 10
    assert request.exclude_product_id is None


def test_recommendation_request_accepts_bounds():
    """Range edges are inclusive."""
    request = parse_recommendation_request(
        {
            "measurements": {"waist": 50, "bust": 200, "hips": 50, "height": 230},
            "limit": 20,
            "exclude_product_id": "p001",
        }
    )

    assert request.limit == 20
    assert request.exclude_product_id == "p001"


@pytest.mark.parametrize(
    "field,value",
    [
        ("waist", 49.9),
        ("bust", 200.1),
        ("hips", 0),
        ("height", 129),
        ("height", 231),
    ],
)
def test_out_of_range_measurement_rejected(field, value):
    """Implausible measurements raise InvalidMeasurementsError."""
    measurements = dict(VALID_MEASUREMENTS, **{field: value})

    with pytest.raises(InvalidMeasurementsError) as exc_info:
        parse_recommendation_request({"measurements": measurements})

    locations = [tuple(error["loc"]) for error in exc_info.value.errors]
    assert ("measurements", field) in locations


def test_recommendation_requires_all_measurements():
    """Recommendations need every dimension."""
    with pytest.raises(InvalidMeasurementsError) as exc_info:
        parse_recommendation_request({"measurements": {"waist": 70, "bust": 90}})

    messages = " ".join(error["msg"] for error in exc_info.value.errors)
    assert "All measurements are required for recommendations" in messages


def test_recommendation_without_measurements_rejected():
    """Leaving measurements out entirely is a measurement error."""
    with pytest.raises(InvalidMeasurementsError):
        parse_recommendation_request({"limit": 5})


@pytest.mark.parametrize("limit", [0, 21, 50])
def test_limit_out_of_range_rejected(limit):
    """Limits outside 1-20 raise InvalidRequestError."""
    with pytest.raises(InvalidRequestError) as exc_info:
        parse_recommendation_request(
            {"measurements": VALID_MEASUREMENTS, "limit": limit}
        )

    assert exc_info.value.message == "Invalid recommendation request"
    assert exc_info.value.details["errors"][0]["loc"] == ("limit",)


def test_review_query_defaults():
    """An empty query lists newest first without filtering."""
    query = parse_review_query({})

    assert query == ReviewQuery()
    assert query.sort == "newest"
    assert query.rating is None
    assert query.size_similarity is False
    assert query.measurements is None


def test_review_query_accepts_all_sort_options():
    """Every non-similarity sort works without measurements."""
    for sort in ("newest", "most_helpful", "highest_rating", "lowest_rating"):
        assert parse_review_query({"sort": sort}).sort == sort


def test_review_query_rejects_unknown_sort_and_rating():
    """Bad sort names and ratings raise InvalidRequestError."""
    with pytest.raises(InvalidRequestError):
        parse_review_query({"sort": "random"})
    with pytest.raises(InvalidRequestError):
        parse_review_query({"rating": 6})


@pytest.mark.parametrize(
    "query",
    [
        {"size_similarity": True},
        {"sort": "size_similarity"},
        {"size_similarity": True, "measurements": {"waist": 70}},
    ],
)
def test_review_query_similarity_requires_measurements(query):
    """Size similarity without complete measurements is rejected."""
    with pytest.raises(InvalidMeasurementsError) as exc_info:
        parse_review_query(query)

    messages = " ".join(error["msg"] for error in exc_info.value.errors)
    assert "All measurements are required when using size similarity" in messages


def test_review_query_with_measurements():
    """Complete measurements enable size-similarity sorting."""
    query = parse_review_query(
        {"sort": "size_similarity", "measurements": VALID_MEASUREMENTS}
    )

    assert query.measurements.is_complete()
