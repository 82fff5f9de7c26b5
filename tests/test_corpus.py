"""Tests for the read-only review corpus view."""

from datetime import datetime, timedelta

import pytest

from sizerec.recommender.corpus import ReviewCorpusIndex
from sizerec.recommender.measurements import MeasurementVector
from sizerec.recommender.models import Review
from sizerec.recommender.similarity import percent_deviation_score

NOW = datetime(2024, 6, 1, 12, 0, 0)
TARGET = MeasurementVector(waist=70, bust=90, hips=95, height=165)


@pytest.fixture
def corpus() -> ReviewCorpusIndex:
    """Fixture providing reviews across two products."""
    return ReviewCorpusIndex([
        Review(
            review_id="r1",
            product_id="p1",
            rating=5,
            measurements=MeasurementVector(waist=70, bust=90, hips=95, height=165),
            created_at=NOW - timedelta(days=10),
            helpful_count=2,
        ),
        Review(
            review_id="r2",
            product_id="p1",
            rating=2,
            measurements=MeasurementVector(waist=85, bust=100, hips=105, height=165),
            created_at=NOW - timedelta(days=1),
            helpful_count=9,
        ),
        Review(
            review_id="r3",
            product_id="p2",
            rating=4,
            measurements=MeasurementVector(waist=72, bust=91, hips=95, height=168),
            created_at=NOW - timedelta(days=30),
            helpful_count=0,
        ),
        Review(
            review_id="r4",
            product_id="p2",
            rating=4,
            measurements=None,
            created_at=None,
            helpful_count=5,
        ),
    ])


def ids(index) -> list:
    return [review.review_id for review in index]


# ===== Iteration and filtering =====


def test_iteration_and_length(corpus):
    """The index iterates in input order and reports its size."""
    assert len(corpus) == 4
    assert ids(corpus) == ["r1", "r2", "r3", "r4"]


def test_for_product_and_excluding_product(corpus):
    """Product filters select or drop a single product's reviews."""
    assert ids(corpus.for_product("p1")) == ["r1", "r2"]
    assert ids(corpus.excluding_product("p1")) == ["r3", "r4"]
    assert ids(corpus.excluding_product(None)) == ids(corpus)
    assert len(corpus.for_product("missing")) == 0


def test_rating_filters(corpus):
    """Rating filters match exactly or by minimum."""
    assert ids(corpus.with_rating(4)) == ["r3", "r4"]
    assert ids(corpus.with_min_rating(4)) == ["r1", "r3", "r4"]


def test_created_since_drops_older_and_undated(corpus):
    """Recency filtering keeps reviews at or after the cutoff."""
    recent = corpus.created_since(NOW - timedelta(days=10))

    assert ids(recent) == ["r1", "r2"]


def test_filters_return_new_index(corpus):
    """Every filter returns a new index."""
    filtered = corpus.with_rating(5)

    assert filtered is not corpus
    assert len(corpus) == 4


def test_product_ids_and_grouping(corpus):
    """Reviews group by product in first-seen order."""
    assert corpus.product_ids() == ["p1", "p2"]

    groups = corpus.group_by_product()
    assert ids(groups["p1"]) == ["r1", "r2"]
    assert ids(groups["p2"]) == ["r3", "r4"]


# ===== Size similarity =====


def test_score_against_keeps_corpus_order(corpus):
    """Every review is scored, including those without measurements."""
    scored = corpus.score_against(TARGET)

    assert [s.review_id for s in scored] == ["r1", "r2", "r3", "r4"]
    assert scored[0].similarity_score == pytest.approx(1.0)
    assert scored[1].similarity_score == pytest.approx(0.25)
    assert scored[3].similarity_score == 0.0


def test_similar_to_applies_threshold_and_orders(corpus):
    """Only reviews at or above the threshold are returned, best first."""
    similar = corpus.similar_to(TARGET)

    assert [s.review_id for s in similar] == ["r1", "r3"]
    assert similar[0].similarity_score >= similar[1].similarity_score
    assert all(s.similarity_score >= 0.8 for s in similar)


def test_similar_to_with_custom_scorer(corpus):
    """A caller-supplied scorer replaces the default policy."""
    similar = corpus.similar_to(TARGET, threshold=0.85, scorer=percent_deviation_score)

    assert [s.review_id for s in similar] == ["r1", "r3", "r2"]


def test_similar_to_without_target_is_empty(corpus):
    """No target measurements means no review is similar."""
    assert corpus.similar_to(None) == []


# ===== Ordering =====


def test_sorted_by_newest_puts_undated_last(corpus):
    """Newest first; reviews without a date go to the end."""
    assert ids(corpus.sorted_by("newest")) == ["r2", "r1", "r3", "r4"]


def test_sorted_by_helpfulness_and_rating(corpus):
    """Helpfulness and rating sorts order as named; ties keep corpus order."""
    assert ids(corpus.sorted_by("most_helpful")) == ["r2", "r4", "r1", "r3"]
    assert ids(corpus.sorted_by("highest_rating")) == ["r1", "r3", "r4", "r2"]
    assert ids(corpus.sorted_by("lowest_rating")) == ["r2", "r3", "r4", "r1"]


def test_sorted_by_size_similarity(corpus):
    """Size-similarity sort puts the closest fit first."""
    ordered = ids(corpus.sorted_by("size_similarity", target=TARGET))

    assert ordered == ["r1", "r3", "r2", "r4"]


def test_sorted_by_size_similarity_requires_target(corpus):
    """Sorting by similarity without measurements is an error."""
    with pytest.raises(ValueError, match="requires target"):
        corpus.sorted_by("size_similarity")


def test_sorted_by_unknown_option(corpus):
    """Unknown sort options raise ValueError."""
    with pytest.raises(ValueError, match="Unknown sort option"):
        corpus.sorted_by("random")
