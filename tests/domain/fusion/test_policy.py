from __future__ import annotations

from types import MappingProxyType

import pytest

from gemfusion.domain.fusion import DIMENSION_RULE, WEIGHT_RULE, FusionPolicy, NumericRule
from gemfusion.domain.model import Attribute, SourceKind


def test_default_policy_rules() -> None:
    policy = FusionPolicy()

    assert policy.rule_for(Attribute.WEIGHT) == WEIGHT_RULE
    assert policy.rule_for(Attribute.DEPTH) == DIMENSION_RULE
    assert policy.weight_of(SourceKind.LABEL) == pytest.approx(0.9)
    assert policy.min_confidence == pytest.approx(0.6)
    assert policy.analysis_version == "v5"


def test_priority_prefers_instrument_over_certificate_at_equal_weight() -> None:
    policy = FusionPolicy()

    assert policy.priority_of(SourceKind.INSTRUMENT) > policy.priority_of(SourceKind.CERTIFICATE)
    assert policy.priority_of(SourceKind.LABEL) > policy.priority_of(SourceKind.VISUAL_ESTIMATE)


@pytest.mark.parametrize(
    ("tolerance", "decimals"),
    [(0.02, 2), (0.25, 2), (0.5, 1), (1.0, 0), (0.005, 3)],
)
def test_rule_decimals_follow_tolerance(tolerance: float, decimals: int) -> None:
    assert NumericRule(tolerance=tolerance, review_tolerance=tolerance).decimals == decimals


@pytest.mark.parametrize("tolerance", [0.0, -0.1, float("nan"), float("inf")])
def test_rule_rejects_non_positive_tolerances(tolerance: float) -> None:
    with pytest.raises(ValueError, match="tolerance"):
        NumericRule(tolerance=tolerance, review_tolerance=0.1)


def test_policy_requires_rule_for_every_numeric_attribute() -> None:
    rules = MappingProxyType({Attribute.WEIGHT: WEIGHT_RULE})

    with pytest.raises(ValueError, match="length"):
        FusionPolicy(numeric_rules=rules)


def test_policy_requires_weight_for_every_source_kind() -> None:
    weights = MappingProxyType({SourceKind.INSTRUMENT: 1.0})

    with pytest.raises(ValueError, match="Source weight"):
        FusionPolicy(source_weights=weights)


@pytest.mark.parametrize("field", ["min_confidence", "conflict_margin", "free_text_confidence_ceiling"])
def test_policy_rejects_thresholds_outside_unit_interval(field: str) -> None:
    with pytest.raises(ValueError, match=field):
        FusionPolicy(**{field: 1.5})  # type: ignore[arg-type]


def test_policy_rejects_empty_version() -> None:
    with pytest.raises(ValueError, match="analysis_version"):
        FusionPolicy(analysis_version="")
