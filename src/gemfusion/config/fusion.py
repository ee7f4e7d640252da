"""Fusion policy configuration values."""

from __future__ import annotations

import os

from gemfusion.domain.fusion import FusionPolicy, NumericRule
from gemfusion.domain.fusion.policy import DEFAULT_ANALYSIS_VERSION, DIMENSION_RULE, WEIGHT_RULE
from gemfusion.domain.model import Attribute

from .env import env_float
from .errors import ConfigurationError


def get_fusion_policy() -> FusionPolicy:
    """Build the fusion policy from ``GEMFUSION_*`` environment overrides."""

    weight_tolerance = env_float("GEMFUSION_WEIGHT_TOLERANCE_CT", WEIGHT_RULE.tolerance)
    weight_review = env_float("GEMFUSION_WEIGHT_REVIEW_TOLERANCE_CT", WEIGHT_RULE.review_tolerance)
    dimension_tolerance = env_float("GEMFUSION_DIMENSION_TOLERANCE_MM", DIMENSION_RULE.tolerance)
    dimension_review = env_float(
        "GEMFUSION_DIMENSION_REVIEW_TOLERANCE_MM", DIMENSION_RULE.review_tolerance
    )
    defaults = FusionPolicy()
    min_confidence = env_float("GEMFUSION_MIN_CONFIDENCE", defaults.min_confidence)
    conflict_margin = env_float("GEMFUSION_CONFLICT_MARGIN", defaults.conflict_margin)
    free_text_ceiling = env_float(
        "GEMFUSION_FREE_TEXT_CEILING", defaults.free_text_confidence_ceiling
    )

    try:
        weight_rule = NumericRule(tolerance=weight_tolerance, review_tolerance=weight_review)
        dimension_rule = NumericRule(
            tolerance=dimension_tolerance, review_tolerance=dimension_review
        )
        return FusionPolicy(
            numeric_rules={
                Attribute.WEIGHT: weight_rule,
                Attribute.LENGTH: dimension_rule,
                Attribute.WIDTH: dimension_rule,
                Attribute.DEPTH: dimension_rule,
            },
            min_confidence=min_confidence,
            conflict_margin=conflict_margin,
            free_text_confidence_ceiling=free_text_ceiling,
            analysis_version=os.getenv("GEMFUSION_ANALYSIS_VERSION") or DEFAULT_ANALYSIS_VERSION,
        )
    except ValueError as exc:
        raise ConfigurationError(f"Invalid fusion policy configuration: {exc}") from exc
