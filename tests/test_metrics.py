"""Tests for the ranking metrics service."""

import threading

import pytest

from sizerec.recommender.ranker import RankingSummary
from sizerec.recommender.similarity import ScoringPolicy
from sizerec.service.metrics import MetricsService, metrics_service


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics_service.reset()
    yield
    metrics_service.reset()


def summary(scored, accepted, policy=ScoringPolicy.BOUNDED_DEVIATION):
    return RankingSummary(
        scoring_policy=policy,
        num_scored_reviews=scored,
        num_accepted_reviews=accepted,
        num_candidates=accepted,
    )


def test_metrics_service_is_singleton():
    """Every instantiation returns the shared instance."""
    assert MetricsService() is metrics_service


def test_empty_metrics():
    """Before any ranking the counters are zero and no rate is known."""
    assert metrics_service.get_metrics() == {
        "ranking_count": 0,
        "rankings_by_policy": {},
        "empty_ranking_count": 0,
        "acceptance_rate": None,
        "average_recommendations": 0.0,
        "average_latency_ms": 0.0,
        "max_latency_ms": 0.0,
    }


def test_record_ranking():
    """Acceptance rate, empty passes and latency follow the recorded passes."""
    metrics_service.record_ranking(summary(40, 10), num_recommendations=4, latency_ms=10.0)
    metrics_service.record_ranking(summary(60, 0), num_recommendations=0, latency_ms=30.0)

    metrics = metrics_service.get_metrics()
    assert metrics["ranking_count"] == 2
    assert metrics["empty_ranking_count"] == 1
    assert metrics["acceptance_rate"] == 0.1
    assert metrics["average_recommendations"] == 2.0
    assert metrics["average_latency_ms"] == 20.0
    assert metrics["max_latency_ms"] == 30.0


def test_rankings_are_counted_per_policy():
    """Each pass is attributed to the policy that scored it."""
    metrics_service.record_ranking(summary(5, 1), 1, 1.0)
    metrics_service.record_ranking(
        summary(5, 1, ScoringPolicy.PERCENT_DEVIATION), 1, 1.0
    )
    metrics_service.record_ranking(summary(5, 1), 1, 1.0)

    assert metrics_service.get_metrics()["rankings_by_policy"] == {
        "bounded_deviation": 2,
        "percent_deviation": 1,
    }


def test_record_ranking_from_threads():
    """Concurrent updates are all counted."""

    def record():
        for _ in range(100):
            metrics_service.record_ranking(summary(2, 1), 1, 1.0)

    threads = [threading.Thread(target=record) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    metrics = metrics_service.get_metrics()
    assert metrics["ranking_count"] == 800
    assert metrics["acceptance_rate"] == 0.5
