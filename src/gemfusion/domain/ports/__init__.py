"""Domain port definitions for adapters."""

from __future__ import annotations

from .inference import ImageClassifier, ImageExtractor, ImageFetcher
from .persistence import ExtractionRepository, FusionResultRepository, GemstoneRepository
from .unit_of_work import (
    AnalysisRepositories,
    AnalysisUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AnalysisRepositories",
    "AnalysisUnitOfWork",
    "ExtractionRepository",
    "FusionResultRepository",
    "GemstoneRepository",
    "ImageClassifier",
    "ImageExtractor",
    "ImageFetcher",
    "RepositoryCollection",
    "UnitOfWork",
]
