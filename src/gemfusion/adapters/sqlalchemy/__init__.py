"""SQLAlchemy adapter package for gemfusion."""

from __future__ import annotations

from .mappings import (
    create_all_tables,
    fusion_result_table,
    gemstone_table,
    image_extraction_table,
    mapper_registry,
    start_mappers,
)
from .repositories import (
    SqlAlchemyExtractionRepository,
    SqlAlchemyFusionResultRepository,
    SqlAlchemyGemstoneRepository,
)
from .unit_of_work import (
    SqlAlchemyAnalysisUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyAnalysisUnitOfWork",
    "SqlAlchemyExtractionRepository",
    "SqlAlchemyFusionResultRepository",
    "SqlAlchemyGemstoneRepository",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "fusion_result_table",
    "gemstone_table",
    "image_extraction_table",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
