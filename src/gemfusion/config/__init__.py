"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_int, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .fusion import get_fusion_policy
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .images import get_image_fetch_config
from .inference import InferenceConfig, get_inference_config
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "InferenceConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "env_float",
    "env_int",
    "get_database_config",
    "get_fusion_policy",
    "get_image_fetch_config",
    "get_inference_config",
    "get_storage_config",
    "require_env_var",
    "require_env_vars",
]
