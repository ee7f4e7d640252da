"""SQLAlchemy mapping metadata for analysis records."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Float,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    orm,
)

from gemfusion.domain.model import FusionRecord, GemstoneStatus, ImageExtractionRecord

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}

image_extraction_table = Table(
    "gem_image_extractions",
    mapper_registry.metadata,
    Column("gemstone_id", String, primary_key=True),
    Column("image_id", String, primary_key=True),
    Column("image_type", String(16), nullable=False),
    Column("claims", JSON, nullable=False),
    Column("raw_response", JSON(none_as_null=True), nullable=True),
    Column("model_version", String, nullable=True),
    Column("processing_cost_usd", Float, nullable=True),
    Column("processing_time_ms", Integer, nullable=True),
    Column("created_at", UTCDateTime(), nullable=True),
    Index("ix_gem_image_extractions_gemstone_id", "gemstone_id"),
)

fusion_result_table = Table(
    "gemstone_fusion_results",
    mapper_registry.metadata,
    Column("gemstone_id", String, primary_key=True),
    Column("images", JSON, nullable=False),
    Column("final", JSON, nullable=False),
    Column("confidence", JSON, nullable=False),
    Column("provenance", JSON, nullable=False),
    Column("conflicts", JSON, nullable=False),
    Column("low_confidence", JSON, nullable=False),
    Column("failed_images", JSON, nullable=False),
    Column("needs_review", Boolean, nullable=False, default=False),
    Column("overall_confidence", Float, nullable=False, default=0.0),
    Column("analysis_version", String(16), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=True),
)

gemstone_table = Table(
    "gemstones",
    mapper_registry.metadata,
    Column("gemstone_id", String, primary_key=True),
    Column("analyzed", Boolean, nullable=False, default=False),
    Column("analyzed_at", UTCDateTime(), nullable=True),
    Column("analysis_version", String(16), nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the analysis records."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(ImageExtractionRecord, image_extraction_table)
    mapper_registry.map_imperatively(FusionRecord, fusion_result_table)
    mapper_registry.map_imperatively(GemstoneStatus, gemstone_table)

    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
