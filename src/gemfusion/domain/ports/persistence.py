"""Ports for persisting analysis records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from gemfusion.domain.model import FusionRecord, GemstoneStatus, ImageExtractionRecord


@runtime_checkable
class ExtractionRepository(Protocol):
    """Per-image extraction records keyed by ``(gemstone_id, image_id)``."""

    def upsert(self, record: ImageExtractionRecord) -> None: ...

    def list_for_gemstone(self, gemstone_id: str) -> list[ImageExtractionRecord]: ...


@runtime_checkable
class FusionResultRepository(Protocol):
    """Fused results keyed by gemstone id; the last writer wins."""

    def upsert(self, record: FusionRecord) -> None: ...

    def get(self, gemstone_id: str) -> FusionRecord | None: ...


@runtime_checkable
class GemstoneRepository(Protocol):
    """Analysis status of gemstones."""

    def mark_analyzed(
        self,
        gemstone_id: str,
        *,
        analyzed_at: datetime,
        analysis_version: str,
    ) -> None: ...

    def get(self, gemstone_id: str) -> GemstoneStatus | None: ...
