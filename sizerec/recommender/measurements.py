"""Body measurement vectors.

Defines the four-dimensional measurement record shared by shoppers and
reviewers, along with the per-dimension constants used for scoring and
validation.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

# Measurement dimensions, in canonical order
MEASUREMENT_FIELDS: Tuple[str, ...] = ("waist", "bust", "hips", "height")

# Equal weight for every dimension
MEASUREMENT_WEIGHTS: Dict[str, float] = {
    "waist": 0.25,
    "bust": 0.25,
    "hips": 0.25,
    "height": 0.25,
}

# Deviation (cm) at which a dimension stops contributing to the fit score
MAX_ALLOWED_DEVIATION: Dict[str, float] = {
    "waist": 10.0,
    "bust": 10.0,
    "hips": 10.0,
    "height": 15.0,
}

# Plausible human ranges (cm), enforced by the request validation layer
PLAUSIBLE_RANGES: Dict[str, Tuple[float, float]] = {
    "waist": (50.0, 200.0),
    "bust": (50.0, 200.0),
    "hips": (50.0, 200.0),
    "height": (130.0, 230.0),
}


def _coerce(value: Any) -> Optional[float]:
    """Convert a raw cell to a float, or None when it carries no value."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


@dataclass(frozen=True)
class MeasurementVector:
    """Waist, bust, hips and height in centimeters.

    Any field may be None. A field that is None or 0 is treated as absent:
    it never takes part in a comparison or an average.
    """

    waist: Optional[float] = None
    bust: Optional[float] = None
    hips: Optional[float] = None
    height: Optional[float] = None

    @classmethod
    def from_mapping(
        cls, mapping: Optional[Mapping[str, Any]]
    ) -> "MeasurementVector":
        """Build a vector from a dict-like object.

        Missing keys, blank strings, NaN and unparsable values all become
        None. A None mapping yields an all-absent vector.

        Example:
            >>> MeasurementVector.from_mapping({"waist": "70", "height": 165})
            MeasurementVector(waist=70.0, bust=None, hips=None, height=165.0)
        """
        if not mapping:
            return cls()
        return cls(**{name: _coerce(mapping.get(name)) for name in MEASUREMENT_FIELDS})

    def get(self, name: str) -> Optional[float]:
        """Return the value of a dimension, or None if it is absent."""
        value = getattr(self, name)
        if not value:
            return None
        return value

    def present_fields(self) -> List[str]:
        """Names of the dimensions that carry a usable value."""
        return [name for name in MEASUREMENT_FIELDS if self.get(name) is not None]

    def is_complete(self) -> bool:
        """True when all four dimensions are present."""
        return len(self.present_fields()) == len(MEASUREMENT_FIELDS)

    def is_empty(self) -> bool:
        """True when no dimension is present."""
        return not self.present_fields()

    def as_dict(self) -> Dict[str, Optional[float]]:
        return {name: self.get(name) for name in MEASUREMENT_FIELDS}
