"""Fusion engine: reconcile normalized claims into one result per gemstone.

Per attribute the engine groups claims into equivalence classes, scores each
class by noisy-OR of its source-weighted evidence, picks a winner with a
total deterministic ordering and flags conflicts and low confidence. It holds
no state between calls, so one engine may serve concurrent callers.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gemfusion.domain.errors import InvalidClaimError
from gemfusion.domain.model import (
    Attribute,
    AttributeKind,
    FusedAttribute,
    FusionResult,
    NormalizedClaim,
)

from .grouping import EquivalenceClass, group_claims
from .policy import FusionPolicy

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

log = logging.getLogger(__name__)

_SCORE_DECIMALS = 9
_CONFIDENCE_DECIMALS = 4


@dataclass(slots=True, frozen=True)
class FusionEngine:
    policy: FusionPolicy = field(default_factory=FusionPolicy)

    def fuse(
        self,
        gemstone_id: str,
        claims: Iterable[NormalizedClaim],
        *,
        images: Sequence[str] | None = None,
        failed_images: Sequence[str] = (),
    ) -> FusionResult:
        """Fuse ``claims`` for ``gemstone_id``.

        Disagreement never raises; it is reported through ``conflicts`` and
        ``low_confidence``. Claims breaking the input contract raise
        ``InvalidClaimError``.
        """

        by_attribute, claim_images = _collect(claims)

        attributes: dict[Attribute, FusedAttribute] = {}
        conflicts: list[Attribute] = []
        low_confidence: list[Attribute] = []
        for attribute in Attribute:
            attribute_claims = by_attribute.get(attribute)
            if not attribute_claims:
                continue
            fused = self._fuse_attribute(attribute, attribute_claims)
            attributes[attribute] = fused
            if fused.conflict:
                conflicts.append(attribute)
            if fused.low_confidence:
                low_confidence.append(attribute)

        overall = (
            round(math.fsum(f.confidence for f in attributes.values()) / len(attributes), 4)
            if attributes
            else 0.0
        )
        if images is None:
            images = claim_images

        log.debug(
            "Fused %d attributes for gemstone %s (conflicts=%s, low_confidence=%s)",
            len(attributes),
            gemstone_id,
            [str(a) for a in conflicts],
            [str(a) for a in low_confidence],
        )
        return FusionResult(
            gemstone_id=gemstone_id,
            attributes=attributes,
            overall_confidence=overall,
            conflicts=tuple(conflicts),
            low_confidence=tuple(low_confidence),
            analysis_version=self.policy.analysis_version,
            images=tuple(images),
            failed_images=tuple(failed_images),
        )

    def _fuse_attribute(
        self,
        attribute: Attribute,
        claims: Sequence[NormalizedClaim],
    ) -> FusedAttribute:
        classes = sorted(group_claims(attribute, claims, self.policy), key=self._rank)
        winner = classes[0]
        confidence = round(min(max(winner.score, 0.0), 1.0), _CONFIDENCE_DECIMALS)

        conflict = self._runner_up_too_close(winner, classes[1:]) or bool(
            self._strong_dissent(attribute, winner, claims)
        )
        return FusedAttribute(
            attribute=attribute,
            final_value=winner.value,
            confidence=confidence,
            provenance=winner.claim_ids,
            supporting_images=winner.image_ids,
            conflict=conflict,
            low_confidence=winner.score < self.policy.min_confidence,
            dissent=tuple(
                sorted(claim.claim_id for claim in claims if not winner.contains(claim))
            ),
        )

    def _rank(self, candidate: EquivalenceClass) -> tuple[object, ...]:
        best_priority = max(
            self.policy.priority_of(claim.source_kind) for claim in candidate.members
        )
        return (
            -round(candidate.score, _SCORE_DECIMALS),
            -len(candidate.members),
            -candidate.max_confidence,
            (-best_priority[0], -best_priority[1]),
            candidate.value,
        )

    def _runner_up_too_close(
        self,
        winner: EquivalenceClass,
        others: Sequence[EquivalenceClass],
    ) -> bool:
        if not others:
            return False
        runner_up = others[0]
        threshold = winner.score * (1.0 - self.policy.conflict_margin)
        return round(runner_up.score, _SCORE_DECIMALS) >= round(threshold, _SCORE_DECIMALS)

    def _strong_dissent(
        self,
        attribute: Attribute,
        winner: EquivalenceClass,
        claims: Sequence[NormalizedClaim],
    ) -> list[str]:
        dissenting: list[str] = []
        for claim in claims:
            if winner.contains(claim) or claim.confidence < self.policy.min_confidence:
                continue
            if attribute.kind is AttributeKind.NUMERIC:
                rule = self.policy.rule_for(attribute)
                distance = abs(float(claim.value) - float(winner.value))
                if round(distance, _SCORE_DECIMALS) <= rule.review_tolerance:
                    continue
            dissenting.append(claim.claim_id)
        return dissenting


def _collect(
    claims: Iterable[NormalizedClaim],
) -> tuple[dict[Attribute, list[NormalizedClaim]], list[str]]:
    by_attribute: dict[Attribute, list[NormalizedClaim]] = {}
    images: dict[str, None] = {}
    seen: set[str] = set()
    for claim in claims:
        if not isinstance(claim, NormalizedClaim):
            raise InvalidClaimError(f"Fusion input must be normalized claims, got {claim!r}")
        if claim.claim_id in seen:
            raise InvalidClaimError(f"Duplicate claim id {claim.claim_id}")
        seen.add(claim.claim_id)
        by_attribute.setdefault(claim.attribute, []).append(claim)
        images.setdefault(claim.image_id, None)
    return by_attribute, list(images)
