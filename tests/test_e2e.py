"""End-to-end tests for the SizeRec pipeline.

Tests the complete flow: generate catalog → write CSVs → load service →
recommend and summarize through the CLI.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from scripts import recommend_cli
from scripts.generate_fake_data import BODY_TYPES, generate_fake_catalog
from sizerec.service.catalog import CatalogService

SHOPPER = BODY_TYPES[1]


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI reconfigures logging; undo it after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def catalog_files(tmp_path):
    """Fixture writing a reproducible generated catalog to CSV."""
    products_df, reviews_df = generate_fake_catalog(
        num_products=12,
        num_reviews=300,
        end_date=datetime(2024, 6, 1),
        random_seed=42,
    )
    products_csv = tmp_path / "products.csv"
    reviews_csv = tmp_path / "reviews.csv"
    products_df.to_csv(products_csv, index=False)
    reviews_df.to_csv(reviews_csv, index=False)
    return str(products_csv), str(reviews_csv)


def shopper_args(products_csv, reviews_csv, *extra):
    return [
        "--waist", str(SHOPPER["waist"]),
        "--bust", str(SHOPPER["bust"]),
        "--hips", str(SHOPPER["hips"]),
        "--height", str(SHOPPER["height"]),
        "--products-csv", products_csv,
        "--reviews-csv", reviews_csv,
        *extra,
    ]


def test_generate_fake_catalog_shape():
    """Generated data has the expected columns and ids."""
    products_df, reviews_df = generate_fake_catalog(
        num_products=5, num_reviews=50, random_seed=1
    )

    assert len(products_df) == 5
    assert len(reviews_df) == 50
    assert {"product_id", "name", "average_rating"}.issubset(products_df.columns)
    assert {"review_id", "product_id", "rating", "waist", "height"}.issubset(
        reviews_df.columns
    )
    assert products_df["product_id"].iloc[0] == "p001"
    assert reviews_df["rating"].between(1, 5).all()


def test_generate_fake_catalog_rejects_bad_arguments():
    with pytest.raises(ValueError):
        generate_fake_catalog(num_products=0)
    with pytest.raises(ValueError):
        generate_fake_catalog(missing_rate=1.5)


def test_full_pipeline_recommends_matching_products(catalog_files):
    """Products reviewed mostly by the shopper's body type collect the most fits."""
    products_csv, reviews_csv = catalog_files
    service = CatalogService.from_csv(products_csv, reviews_csv, refresh_ratings=True)

    results = service.recommend({"measurements": SHOPPER, "limit": 20})

    assert 0 < len(results) <= 12
    scores = [entry.final_score for entry in results]
    assert scores == sorted(scores, reverse=True)
    # Products cycle through body types; index 1 mod 4 belongs to this shopper
    matching = {f"p{index + 1:03d}" for index in range(12) if index % 4 == 1}
    most_reviewed = max(results, key=lambda entry: entry.similar_review_count)
    assert most_reviewed.product_id in matching


def test_full_pipeline_excludes_product(catalog_files):
    """The excluded product never appears."""
    products_csv, reviews_csv = catalog_files
    service = CatalogService.from_csv(products_csv, reviews_csv)

    top = service.recommend({"measurements": SHOPPER})[0].product_id
    results = service.recommend({"measurements": SHOPPER, "exclude_product_id": top})

    assert top not in {entry.product_id for entry in results}


def test_cli_recommendations(catalog_files, capsys):
    """The CLI prints ranked products and exits cleanly."""
    products_csv, reviews_csv = catalog_files

    exit_code = recommend_cli.main(
        shopper_args(products_csv, reviews_csv, "--limit", "3", "--explain")
    )

    assert exit_code == 0
    output = capsys.readouterr().out
    assert "Top 3 products:" in output
    assert "similar_reviews=" in output


def test_cli_stats(catalog_files, capsys):
    """The CLI prints review statistics for one product."""
    products_csv, reviews_csv = catalog_files

    exit_code = recommend_cli.main(
        ["--stats", "p001", "--products-csv", products_csv, "--reviews-csv", reviews_csv]
    )

    assert exit_code == 0
    output = capsys.readouterr().out
    assert "Review statistics for p001" in output
    assert "Rating distribution" in output


def test_cli_reports_invalid_measurements(catalog_files, capsys):
    """Missing measurements are reported on stderr with a failing exit code."""
    products_csv, reviews_csv = catalog_files

    exit_code = recommend_cli.main(
        ["--waist", "70", "--products-csv", products_csv, "--reviews-csv", reviews_csv]
    )

    assert exit_code == 1
    assert "All measurements are required" in capsys.readouterr().err


def test_cli_reports_malformed_ratings(catalog_files, tmp_path, capsys):
    """A reviews export with a non-numeric rating fails without a traceback."""
    products_csv, _ = catalog_files
    reviews_csv = tmp_path / "bad_reviews.csv"
    reviews_csv.write_text("review_id,product_id,rating\nr1,p001,great\n")

    exit_code = recommend_cli.main(shopper_args(products_csv, str(reviews_csv)))

    assert exit_code == 1
    assert "ratings must be whole numbers" in capsys.readouterr().err


def test_cli_reports_missing_files(tmp_path, capsys):
    """Missing corpus files fail with a readable error."""
    exit_code = recommend_cli.main(
        shopper_args(str(tmp_path / "none.csv"), str(tmp_path / "none.csv"))
    )

    assert exit_code == 1
    assert "CSV file not found" in capsys.readouterr().err
