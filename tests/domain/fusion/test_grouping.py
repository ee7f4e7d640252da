from __future__ import annotations

import pytest

from gemfusion.domain.fusion import FusionPolicy, group_claims, noisy_or
from gemfusion.domain.model import Attribute, SourceKind
from tests.helpers.claims import make_claim


def test_noisy_or_combines_independent_evidence() -> None:
    assert noisy_or([0.9, 0.765]) == pytest.approx(0.9765)
    assert noisy_or([]) == 0.0
    assert noisy_or([1.5]) == 1.0


def test_numeric_claims_within_tolerance_share_a_class() -> None:
    claims = [
        make_claim(Attribute.WEIGHT, 2.48, 0.9, claim_id="a#0"),
        make_claim(Attribute.WEIGHT, 2.50, 0.5, claim_id="b#0"),
        make_claim(Attribute.WEIGHT, 2.53, 0.5, claim_id="c#0"),
    ]

    classes = group_claims(Attribute.WEIGHT, claims, FusionPolicy())

    assert [group.claim_ids for group in classes] == [("a#0", "b#0"), ("c#0",)]


def test_numeric_grouping_is_seeded_by_strongest_claim() -> None:
    weak = make_claim(Attribute.WEIGHT, 2.50, 0.4, SourceKind.VISUAL_ESTIMATE, claim_id="a#0")
    strong = make_claim(Attribute.WEIGHT, 2.52, 0.95, claim_id="b#0")

    classes = group_claims(Attribute.WEIGHT, [weak, strong], FusionPolicy())

    assert len(classes) == 1
    assert classes[0].members[0] is strong


def test_categorical_claims_group_by_exact_value() -> None:
    claims = [
        make_claim(Attribute.COLOR, "blue", 0.8, image_id="img-2", claim_id="img-2#0"),
        make_claim(Attribute.COLOR, "blue", 0.6, image_id="img-1", claim_id="img-1#0"),
        make_claim(Attribute.COLOR, "green", 0.7, claim_id="img-3#0"),
    ]

    classes = {group.value: group for group in group_claims(Attribute.COLOR, claims, FusionPolicy())}

    assert set(classes) == {"blue", "green"}
    assert classes["blue"].image_ids == ("img-1", "img-2")
    assert classes["blue"].max_confidence == pytest.approx(0.8)
    assert classes["blue"].score == pytest.approx(1 - 0.2 * 0.4)
