"""Metrics service for tracking ranking passes.

Counts passes per scoring policy, how many of the scored reviews cleared
the acceptance threshold, how often a shopper got no recommendation at all,
and the latency of each pass.
"""

import threading
from collections import Counter
from typing import Dict, Optional

from sizerec.recommender.ranker import RankingSummary


class MetricsService:
    """Singleton service for ranking metrics.

    Thread-safe; this is the only shared mutable state in SizeRec.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        """Create singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._counter_lock = threading.Lock()
        self._reset_counters()
        self._initialized = True

    def _reset_counters(self) -> None:
        self._rankings_by_policy: Counter = Counter()
        self._empty_rankings = 0
        self._scored_reviews = 0
        self._accepted_reviews = 0
        self._total_recommendations = 0
        self._total_latency_ms = 0.0
        self._max_latency_ms = 0.0

    def record_ranking(
        self,
        summary: RankingSummary,
        num_recommendations: int,
        latency_ms: float,
    ) -> None:
        """Record one ranking pass.

        Args:
            summary: Counts reported by the ranker for the pass
            num_recommendations: Number of entries returned to the caller
            latency_ms: Time spent in the pass, in milliseconds
        """
        with self._counter_lock:
            self._rankings_by_policy[summary.scoring_policy.value] += 1
            self._scored_reviews += summary.num_scored_reviews
            self._accepted_reviews += summary.num_accepted_reviews
            self._total_recommendations += num_recommendations
            if num_recommendations == 0:
                self._empty_rankings += 1
            self._total_latency_ms += latency_ms
            self._max_latency_ms = max(self._max_latency_ms, latency_ms)

    def get_metrics(self) -> Dict:
        """Get current metrics.

        Returns:
            Dictionary with:
            - ranking_count: Number of ranking passes
            - rankings_by_policy: Passes per scoring policy name
            - empty_ranking_count: Passes that returned no product
            - acceptance_rate: Share of scored reviews at or above the
              threshold, or None before any review was scored
            - average_recommendations: Mean entries returned per pass
            - average_latency_ms: Mean latency in milliseconds
            - max_latency_ms: Maximum latency observed
        """
        with self._counter_lock:
            ranking_count = sum(self._rankings_by_policy.values())
            acceptance_rate: Optional[float] = None
            if self._scored_reviews > 0:
                acceptance_rate = round(self._accepted_reviews / self._scored_reviews, 4)

            if ranking_count > 0:
                avg_recommendations = self._total_recommendations / ranking_count
                avg_latency = self._total_latency_ms / ranking_count
            else:
                avg_recommendations = 0.0
                avg_latency = 0.0

            return {
                "ranking_count": ranking_count,
                "rankings_by_policy": dict(self._rankings_by_policy),
                "empty_ranking_count": self._empty_rankings,
                "acceptance_rate": acceptance_rate,
                "average_recommendations": round(avg_recommendations, 2),
                "average_latency_ms": round(avg_latency, 2),
                "max_latency_ms": round(self._max_latency_ms, 2),
            }

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._counter_lock:
            self._reset_counters()


# Global singleton instance
metrics_service = MetricsService()
