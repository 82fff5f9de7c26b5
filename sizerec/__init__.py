"""SizeRec: size-aware product recommendations for a rental catalog.

This package scores how closely reviewers' body measurements match a
shopper's, folds review statistics per product, and ranks products whose
reviews come from similarly-sized buyers.

Modules:
    recommender: Pure scoring, aggregation and ranking logic
    service: Host-side validation, logging, metrics and corpus loading
"""

__version__ = "0.1.0"
