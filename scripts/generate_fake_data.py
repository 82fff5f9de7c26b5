"""Generate a fake rental catalog for testing and development.

This module creates synthetic products and reviews, where each review carries
the reviewer's body measurements. Reviewers are drawn from a few body-type
clusters so that size-based recommendations have something to find.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_data.py

    Or import and use programmatically:
        from scripts.generate_fake_data import generate_fake_catalog
        products_df, reviews_df = generate_fake_catalog(num_products=20)
"""

import argparse
import random
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional, Tuple

import pandas as pd

# Default configuration constants
DEFAULT_NUM_PRODUCTS = 30
DEFAULT_NUM_REVIEWS = 600
DEFAULT_DAYS_BACK = 90
DEFAULT_MISSING_RATE = 0.1
SECONDS_PER_DAY = 86400

CATEGORIES = ["dress", "top", "bottom", "outerwear", "accessories"]
STYLES = ["Linen", "Silk", "Velvet", "Denim", "Satin", "Wrap", "Pleated", "Tailored"]

# Body-type cluster centers (cm)
BODY_TYPES = [
    {"waist": 64, "bust": 84, "hips": 90, "height": 158},
    {"waist": 70, "bust": 90, "hips": 95, "height": 165},
    {"waist": 78, "bust": 98, "hips": 104, "height": 170},
    {"waist": 88, "bust": 108, "hips": 114, "height": 175},
]
MEASUREMENT_SPREAD = 3.0


def generate_fake_catalog(
    num_products: int = DEFAULT_NUM_PRODUCTS,
    num_reviews: int = DEFAULT_NUM_REVIEWS,
    missing_rate: float = DEFAULT_MISSING_RATE,
    end_date: Optional[datetime] = None,
    random_seed: Optional[int] = None,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Generate synthetic products and measurement-tagged reviews.

    Each product is mostly reviewed by one body-type cluster, so shoppers
    near that cluster should see it recommended.

    Args:
        num_products: Number of products. Must be positive.
        num_reviews: Number of reviews. Must be positive.
        missing_rate: Probability that a single measurement is left blank.
        end_date: Latest review timestamp. Defaults to now.
        random_seed: Seed for reproducible output.

    Returns:
        A tuple of DataFrames:
            - products: product_id, name, category, price, average_rating
            - reviews: review_id, product_id, user_id, rating, review_text,
              helpful_count, created_at, waist, bust, hips, height

    Raises:
        ValueError: If a count is non-positive or missing_rate is outside
            [0, 1].
    """
    if num_products <= 0 or num_reviews <= 0:
        raise ValueError("num_products and num_reviews must be positive")
    if not 0.0 <= missing_rate <= 1.0:
        raise ValueError("missing_rate must be between 0 and 1")

    rng = random.Random(random_seed)
    if end_date is None:
        end_date = datetime.now()
    start_date = end_date - timedelta(days=DEFAULT_DAYS_BACK)

    products = []
    product_body_type = {}
    for index in range(num_products):
        product_id = f"p{index + 1:03d}"
        category = rng.choice(CATEGORIES)
        products.append({
            "product_id": product_id,
            "name": f"{rng.choice(STYLES)} {category.title()} {index + 1}",
            "category": category,
            "price": round(rng.uniform(15, 150), 2),
        })
        product_body_type[product_id] = index % len(BODY_TYPES)

    reviews = []
    for index in range(num_reviews):
        product = rng.choice(products)
        product_id = product["product_id"]

        # Most reviewers share the product's body type
        body_type = product_body_type[product_id]
        if rng.random() < 0.25:
            body_type = rng.randrange(len(BODY_TYPES))
        center = BODY_TYPES[body_type]

        review = {
            "review_id": f"r{index + 1:05d}",
            "product_id": product_id,
            "user_id": f"u{rng.randint(1, num_reviews // 2 + 1):04d}",
            "rating": rng.choices([1, 2, 3, 4, 5], weights=[1, 1, 3, 5, 6])[0],
            "review_text": f"Rented the {product['name']} for an event.",
            "helpful_count": rng.randint(0, 20),
            "created_at": start_date
            + timedelta(seconds=rng.randrange(DEFAULT_DAYS_BACK * SECONDS_PER_DAY)),
        }
        for name, value in center.items():
            if rng.random() < missing_rate:
                review[name] = None
            else:
                review[name] = round(rng.gauss(value, MEASUREMENT_SPREAD), 1)
        reviews.append(review)

    reviews_df = pd.DataFrame(reviews).sort_values("created_at").reset_index(drop=True)

    products_df = pd.DataFrame(products)
    average_ratings = reviews_df.groupby("product_id")["rating"].mean()
    products_df["average_rating"] = (
        products_df["product_id"].map(average_ratings).fillna(0.0).round(2)
    )

    return products_df, reviews_df


def main() -> None:
    """Generate a catalog and save it under data/."""
    parser = argparse.ArgumentParser(description="Generate a fake rental catalog")
    parser.add_argument("--num-products", type=int, default=DEFAULT_NUM_PRODUCTS)
    parser.add_argument("--num-reviews", type=int, default=DEFAULT_NUM_REVIEWS)
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--output-dir",
        type=str,
        default=str(Path(__file__).parent.parent / "data"),
        help="Directory for products.csv and reviews.csv (default: data/)",
    )
    args = parser.parse_args()

    print(f"Generating {args.num_reviews} fake reviews for {args.num_products} products...")

    try:
        products_df, reviews_df = generate_fake_catalog(
            num_products=args.num_products,
            num_reviews=args.num_reviews,
            random_seed=args.seed,
        )
    except ValueError as e:
        print(f"Error generating data: {e}")
        return

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    products_path = output_dir / "products.csv"
    reviews_path = output_dir / "reviews.csv"
    products_df.to_csv(products_path, index=False)
    reviews_df.to_csv(reviews_path, index=False)

    print(f"\nData generated successfully!")
    print(f"Saved to: {products_path}, {reviews_path}")
    print(f"\nData summary:")
    print(f"  Products: {len(products_df)}")
    print(f"  Reviews: {len(reviews_df)}")
    print(f"  Reviews with all measurements: "
          f"{int(reviews_df[['waist', 'bust', 'hips', 'height']].notna().all(axis=1).sum())}")
    print(f"  Date range: {reviews_df['created_at'].min()} to {reviews_df['created_at'].max()}")


if __name__ == "__main__":
    main()
