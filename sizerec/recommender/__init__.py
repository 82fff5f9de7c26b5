"""Size-similarity scoring and recommendation ranking.

This module contains the measurement types, the similarity scorers, the
review corpus view, per-product aggregation and the recommendation ranker.
Everything here is pure and works on data already loaded by the caller.
"""
