"""Name normalization and variable resolution.

Survey providers disagree on specialty labels and variable column names;
these modules reduce both to canonical keys and read metrics out of dynamic
and legacy row shapes alike.
"""
