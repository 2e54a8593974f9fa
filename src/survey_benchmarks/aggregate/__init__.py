"""Indexing, filtering and percentile aggregation over survey rows.

The routines here are pure in-memory computations: they receive a fully
materialized row collection and return filtered rows or summary records.
"""
