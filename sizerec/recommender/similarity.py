"""Size-similarity scoring between two measurement vectors.

Two scoring policies are available. The bounded-deviation policy is the
default: each dimension loses credit linearly until it reaches a fixed
per-dimension deviation cap, dimensions missing on either side are skipped,
and the weights are renormalized over what was compared. It is symmetric and
never divides by a user-supplied value.

The percent-deviation policy measures each deviation relative to the
target's own value. It is kept for deployments that already rank with it.
A ranker is always built around exactly one policy; the two are never
mixed inside one ranking pass.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Optional, Sequence

import numpy as np

from sizerec.recommender.measurements import (
    MAX_ALLOWED_DEVIATION,
    MEASUREMENT_FIELDS,
    MEASUREMENT_WEIGHTS,
    MeasurementVector,
)

# Configure module logger
logger = logging.getLogger(__name__)

Scorer = Callable[[Optional[MeasurementVector], Optional[MeasurementVector]], float]


class ScoringPolicy(str, Enum):
    """Available similarity formulas."""

    BOUNDED_DEVIATION = "bounded_deviation"
    PERCENT_DEVIATION = "percent_deviation"


def bounded_deviation_score(
    target: Optional[MeasurementVector],
    candidate: Optional[MeasurementVector],
    max_allowed_deviation: Dict[str, float] = MAX_ALLOWED_DEVIATION,
) -> float:
    """Score two vectors with per-dimension deviation caps.

    For every dimension present on both sides the term is
    ``max(0, 1 - |target - candidate| / cap)``. Terms are averaged with the
    dimension weights, renormalized over the dimensions actually compared.

    Args:
        target: The shopper's measurements.
        candidate: A reviewer's measurements.
        max_allowed_deviation: Deviation cap per dimension, in centimeters.

    Returns:
        Fit score in [0, 1]. 0 when either vector is missing or when no
        dimension can be compared.

    Example:
        >>> a = MeasurementVector(waist=70, bust=90, hips=95, height=165)
        >>> bounded_deviation_score(a, a)
        1.0
    """
    if target is None or candidate is None:
        return 0.0

    total_score = 0.0
    total_weight = 0.0

    for name in MEASUREMENT_FIELDS:
        target_value = target.get(name)
        candidate_value = candidate.get(name)
        if target_value is None or candidate_value is None:
            continue

        deviation = abs(target_value - candidate_value)
        term = max(0.0, 1.0 - deviation / max_allowed_deviation[name])
        total_score += term * MEASUREMENT_WEIGHTS[name]
        total_weight += MEASUREMENT_WEIGHTS[name]

    if total_weight == 0:
        return 0.0

    return total_score / total_weight


def percent_deviation_score(
    target: Optional[MeasurementVector],
    candidate: Optional[MeasurementVector],
) -> float:
    """Score two vectors by deviation relative to the target's values.

    Each dimension contributes ``max(0, 1 - |target - candidate| / target)``
    with a fixed weight of 0.25, so a deviation of the target's full value or
    more earns nothing. A dimension absent on either side (including a zero
    target value) contributes 0; the weights are not renormalized. Argument
    order matters.
    """
    if target is None or candidate is None:
        return 0.0

    total_score = 0.0
    for name in MEASUREMENT_FIELDS:
        target_value = target.get(name)
        candidate_value = candidate.get(name)
        if target_value is None or candidate_value is None:
            continue

        relative = abs(target_value - candidate_value) / target_value
        term = max(0.0, 1.0 - relative)
        total_score += term * MEASUREMENT_WEIGHTS[name]

    return total_score


_SCORERS: Dict[ScoringPolicy, Scorer] = {
    ScoringPolicy.BOUNDED_DEVIATION: bounded_deviation_score,
    ScoringPolicy.PERCENT_DEVIATION: percent_deviation_score,
}


def get_scorer(policy: ScoringPolicy = ScoringPolicy.BOUNDED_DEVIATION) -> Scorer:
    """Return the scoring function for a policy.

    Raises:
        ValueError: If the policy name is unknown.
    """
    return _SCORERS[ScoringPolicy(policy)]


def score(
    target: Optional[MeasurementVector],
    candidate: Optional[MeasurementVector],
) -> float:
    """Fit score under the default (bounded-deviation) policy."""
    return bounded_deviation_score(target, candidate)


def _to_array(vector: Optional[MeasurementVector]) -> np.ndarray:
    """Vector as a float array with NaN for absent dimensions."""
    if vector is None:
        return np.full(len(MEASUREMENT_FIELDS), np.nan)
    return np.array(
        [
            np.nan if vector.get(name) is None else vector.get(name)
            for name in MEASUREMENT_FIELDS
        ],
        dtype=np.float64,
    )


def score_batch(
    target: Optional[MeasurementVector],
    candidates: Sequence[Optional[MeasurementVector]],
) -> np.ndarray:
    """Bounded-deviation scores of many candidates against one target.

    Vectorized counterpart of ``bounded_deviation_score`` for bulk review
    filtering. Absent dimensions are skipped and weights renormalized per
    candidate, exactly as in the scalar version.

    Args:
        target: The shopper's measurements.
        candidates: Reviewer measurements; None entries score 0.

    Returns:
        Array of shape (len(candidates),) with scores in [0, 1].
    """
    n_candidates = len(candidates)
    if n_candidates == 0 or target is None:
        return np.zeros(n_candidates, dtype=np.float64)

    target_array = _to_array(target)
    candidate_matrix = np.vstack([_to_array(c) for c in candidates])

    caps = np.array([MAX_ALLOWED_DEVIATION[name] for name in MEASUREMENT_FIELDS])
    weights = np.array([MEASUREMENT_WEIGHTS[name] for name in MEASUREMENT_FIELDS])

    deviations = np.abs(candidate_matrix - target_array)
    comparable = ~np.isnan(deviations)

    terms = np.clip(1.0 - np.nan_to_num(deviations) / caps, 0.0, None)
    weighted_terms = np.where(comparable, terms * weights, 0.0)
    total_weights = np.where(comparable, weights, 0.0).sum(axis=1)

    scores = np.zeros(n_candidates, dtype=np.float64)
    has_weight = total_weights > 0
    scores[has_weight] = weighted_terms[has_weight].sum(axis=1) / total_weights[has_weight]

    logger.debug(
        "Scored candidate batch",
        extra={
            "num_candidates": n_candidates,
            "num_comparable": int(has_weight.sum()),
        },
    )

    return scores
