"""
Configuration system built on pydantic models.

Provides typed, validated configuration for grid detection, cell assembly,
text recognition and logging, loadable from JSON, YAML or TOML files.
"""

from .models import (
    Config,
    GridDetectionConfig,
    CellConfig,
    PreprocessingConfig,
    RecognizerConfig,
    OutputConfig,
    LoggingConfig,
    DedupMode,
    DegeneratePolicy,
    LogLevel,
)
from .loader import (
    load_config,
    load_config_from_dict,
    save_config,
    get_default_config,
    validate_config_file,
)

__all__ = [
    # Configuration models
    "Config",
    "GridDetectionConfig",
    "CellConfig",
    "PreprocessingConfig",
    "RecognizerConfig",
    "OutputConfig",
    "LoggingConfig",
    "DedupMode",
    "DegeneratePolicy",
    "LogLevel",
    # Configuration loading
    "load_config",
    "load_config_from_dict",
    "save_config",
    "get_default_config",
    "validate_config_file",
]
