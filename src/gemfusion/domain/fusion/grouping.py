"""Equivalence grouping and scoring of claims for a single attribute."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gemfusion.domain.model import AttributeKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gemfusion.domain.model import Attribute, ClaimValue, NormalizedClaim

    from .policy import FusionPolicy

# Absorbs float noise when comparing a distance against a tolerance.
_EPSILON = 1e-9


@dataclass(slots=True, frozen=True)
class EquivalenceClass:
    """Claims for one attribute considered to denote the same value."""

    attribute: Attribute
    members: tuple[NormalizedClaim, ...]
    score: float
    value: ClaimValue

    @property
    def claim_ids(self) -> tuple[str, ...]:
        return tuple(sorted(claim.claim_id for claim in self.members))

    @property
    def image_ids(self) -> tuple[str, ...]:
        return tuple(sorted({claim.image_id for claim in self.members}))

    @property
    def max_confidence(self) -> float:
        return max(claim.confidence for claim in self.members)

    def contains(self, claim: NormalizedClaim) -> bool:
        return any(member.claim_id == claim.claim_id for member in self.members)


def evidence(claim: NormalizedClaim, policy: FusionPolicy) -> float:
    return claim.confidence * policy.weight_of(claim.source_kind)


def noisy_or(weights: Sequence[float]) -> float:
    """Combine independent evidence: ``1 - prod(1 - w)``, clamped to [0, 1]."""

    remaining = math.prod(1.0 - min(max(weight, 0.0), 1.0) for weight in weights)
    return min(max(1.0 - remaining, 0.0), 1.0)


def group_claims(
    attribute: Attribute,
    claims: Sequence[NormalizedClaim],
    policy: FusionPolicy,
) -> list[EquivalenceClass]:
    if attribute.kind is AttributeKind.NUMERIC:
        return _group_numeric(attribute, claims, policy)
    return _group_exact(attribute, claims, policy)


def _strength_key(claim: NormalizedClaim, policy: FusionPolicy) -> tuple[float, float, str]:
    return (-evidence(claim, policy), -claim.confidence, claim.claim_id)


def _group_numeric(
    attribute: Attribute,
    claims: Sequence[NormalizedClaim],
    policy: FusionPolicy,
) -> list[EquivalenceClass]:
    rule = policy.rule_for(attribute)
    pending = sorted(claims, key=lambda claim: _strength_key(claim, policy))
    classes: list[EquivalenceClass] = []
    while pending:
        seed = pending[0]
        seed_value = float(seed.value)
        members = [
            claim
            for claim in pending
            if abs(float(claim.value) - seed_value) <= rule.tolerance + _EPSILON
        ]
        absorbed = {claim.claim_id for claim in members}
        pending = [claim for claim in pending if claim.claim_id not in absorbed]
        classes.append(
            EquivalenceClass(
                attribute=attribute,
                members=tuple(members),
                score=noisy_or([evidence(claim, policy) for claim in members]),
                value=_weighted_mean(members, policy, decimals=rule.decimals),
            )
        )
    return classes


def _group_exact(
    attribute: Attribute,
    claims: Sequence[NormalizedClaim],
    policy: FusionPolicy,
) -> list[EquivalenceClass]:
    buckets: dict[str, list[NormalizedClaim]] = {}
    for claim in sorted(claims, key=lambda claim: _strength_key(claim, policy)):
        buckets.setdefault(str(claim.value), []).append(claim)
    return [
        EquivalenceClass(
            attribute=attribute,
            members=tuple(members),
            score=noisy_or([evidence(claim, policy) for claim in members]),
            value=value,
        )
        for value, members in buckets.items()
    ]


def _weighted_mean(
    members: Sequence[NormalizedClaim],
    policy: FusionPolicy,
    *,
    decimals: int,
) -> float:
    weights = [evidence(claim, policy) for claim in members]
    values = [float(claim.value) for claim in members]
    total = math.fsum(weights)
    if total <= 0:
        mean = math.fsum(values) / len(values)
    else:
        mean = math.fsum(value * weight for value, weight in zip(values, weights, strict=True))
        mean /= total
    return round(mean, decimals)
