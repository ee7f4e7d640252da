"""Claim fusion: equivalence grouping, scoring and conflict detection."""

from __future__ import annotations

from .engine import FusionEngine
from .grouping import EquivalenceClass, group_claims, noisy_or
from .policy import DIMENSION_RULE, WEIGHT_RULE, FusionPolicy, NumericRule

__all__ = [
    "DIMENSION_RULE",
    "WEIGHT_RULE",
    "EquivalenceClass",
    "FusionEngine",
    "FusionPolicy",
    "NumericRule",
    "group_claims",
    "noisy_or",
]
