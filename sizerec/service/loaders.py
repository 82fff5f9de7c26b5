"""Corpus loading utilities.

This module reads product and review exports from CSV into the records the
recommender consumes, and refreshes product ratings from their reviews. It
is the host-side data-access layer; the recommender itself never reads files.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

import pandas as pd

from sizerec.recommender.aggregate import ProductAggregator
from sizerec.recommender.measurements import MEASUREMENT_FIELDS, MeasurementVector
from sizerec.recommender.models import Product, Review
from sizerec.service.exceptions import CorpusFormatError

# Configure module logger
logger = logging.getLogger(__name__)

PRODUCT_REQUIRED_COLUMNS = {"product_id", "name"}
REVIEW_REQUIRED_COLUMNS = {"review_id", "product_id", "rating"}

# Identifier columns are kept as text even when they look numeric
ID_COLUMNS = ("product_id", "review_id", "user_id")


def _optional(row: Mapping[str, Any], column: str) -> Optional[Any]:
    """Cell value, or None when the column is missing or the cell is empty."""
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    return value


def _read_csv(csv_path: str, required_columns: Set[str]) -> pd.DataFrame:
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    logger.info(f"Loading CSV from {csv_path}")
    try:
        header = pd.read_csv(csv_file, nrows=0).columns
        id_dtypes = {column: str for column in ID_COLUMNS if column in header}
        df = pd.read_csv(csv_file, dtype=id_dtypes)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise CorpusFormatError(str(csv_path), str(e)) from e

    if not required_columns.issubset(df.columns):
        missing = sorted(required_columns - set(df.columns))
        raise CorpusFormatError(str(csv_path), f"missing required columns: {missing}")

    for column in required_columns:
        if df[column].isna().any():
            raise CorpusFormatError(str(csv_path), f"empty values in column '{column}'")

    return df


def load_products_csv(csv_path: str) -> Dict[str, Product]:
    """Load products from a CSV export.

    Args:
        csv_path: CSV with columns product_id and name, and optionally
            average_rating, category and price.

    Returns:
        Products keyed by product id.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
        CorpusFormatError: If required columns are missing or empty.
    """
    df = _read_csv(csv_path, PRODUCT_REQUIRED_COLUMNS)
    products: Dict[str, Product] = {}
    for row in df.to_dict("records"):
        average_rating = _optional(row, "average_rating")
        price = _optional(row, "price")
        category = _optional(row, "category")
        products[row["product_id"]] = Product(
            product_id=row["product_id"],
            name=str(row["name"]),
            average_rating=float(average_rating) if average_rating is not None else 0.0,
            category=str(category) if category is not None else None,
            price=float(price) if price is not None else None,
        )

    logger.info(f"Loaded {len(products)} products")
    return products


def load_reviews_csv(csv_path: str) -> List[Review]:
    """Load reviews from a CSV export.

    Args:
        csv_path: CSV with columns review_id, product_id and rating, and
            optionally user_id, waist, bust, hips, height, created_at,
            helpful_count and review_text. Empty measurement cells are
            treated as absent.

    Returns:
        Reviews in file order.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
        CorpusFormatError: If required columns are missing or empty, or a
            rating is not a whole number.
    """
    df = _read_csv(csv_path, REVIEW_REQUIRED_COLUMNS)

    ratings = pd.to_numeric(df["rating"], errors="coerce")
    invalid = ratings.isna() | (ratings % 1 != 0)
    if invalid.any():
        bad_values = df.loc[invalid, "rating"].astype(str).tolist()[:5]
        raise CorpusFormatError(
            str(csv_path), f"ratings must be whole numbers, got {bad_values}"
        )
    df["rating"] = ratings.astype(int)

    if "created_at" in df.columns:
        df["created_at"] = pd.to_datetime(df["created_at"], errors="coerce")

    has_measurements = any(name in df.columns for name in MEASUREMENT_FIELDS)

    reviews: List[Review] = []
    for row in df.to_dict("records"):
        measurements = None
        if has_measurements:
            vector = MeasurementVector.from_mapping(
                {name: _optional(row, name) for name in MEASUREMENT_FIELDS}
            )
            measurements = None if vector.is_empty() else vector

        created_at = _optional(row, "created_at")
        user_id = _optional(row, "user_id")
        helpful_count = _optional(row, "helpful_count")

        reviews.append(
            Review(
                review_id=row["review_id"],
                product_id=row["product_id"],
                rating=int(row["rating"]),
                user_id=str(user_id) if user_id is not None else None,
                measurements=measurements,
                created_at=created_at.to_pydatetime() if created_at is not None else None,
                helpful_count=int(helpful_count) if helpful_count is not None else 0,
                review_text=str(_optional(row, "review_text") or ""),
            )
        )

    logger.info(
        "Loaded reviews",
        extra={
            "num_reviews": len(reviews),
            "num_with_measurements": sum(1 for r in reviews if r.measurements is not None),
        },
    )
    return reviews


def refresh_average_ratings(
    products: Mapping[str, Product],
    reviews: Iterable[Review],
) -> Dict[str, Product]:
    """Recompute every product's average rating from its reviews.

    Products without reviews get an average rating of 0. The input mapping
    is left untouched.
    """
    stats = ProductAggregator().aggregate_by_product(reviews)

    refreshed = {}
    for product_id, product in products.items():
        product_stats = stats.get(product_id)
        average_rating = product_stats.average_rating if product_stats else 0.0
        refreshed[product_id] = replace(product, average_rating=average_rating)

    return refreshed
