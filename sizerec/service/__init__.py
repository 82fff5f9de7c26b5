"""Host-side services for SizeRec.

This module wraps the pure recommender with what a host application needs:
request validation, corpus loading from CSV, structured logging, metrics
and a catalog facade that ties them together.
"""
