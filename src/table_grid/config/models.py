"""
Pydantic models for table grid extraction configuration.

Defines configuration schemas with validation, defaults and documentation
for grid detection, cell assembly, recognition and logging.
"""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LogLevel(str, Enum):
    """Supported logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DedupMode(str, Enum):
    """How the line deduplicator treats a candidate that does not match."""
    REFERENCE = "reference"
    RESTART = "restart"


class DegeneratePolicy(str, Enum):
    """What to do with a cell whose inset width or height is not positive."""
    SKIP = "skip"
    CLAMP = "clamp"
    ERROR = "error"


class GridDetectionConfig(BaseModel):
    """Configuration for run scanning, segment cleaning and deduplication."""

    dark_threshold: int = Field(
        default=200,
        ge=1,
        le=256,
        description="A pixel is dark when its intensity is below this value"
    )
    merge_gap: int = Field(
        default=5,
        ge=0,
        description="Runs closer than this gap are merged into one segment"
    )
    vertical_min_length_ratio: float = Field(
        default=0.10,
        ge=0.0,
        le=1.0,
        description="Minimum vertical segment length as fraction of image height"
    )
    horizontal_min_length_ratio: float = Field(
        default=0.75,
        ge=0.0,
        le=1.0,
        description="Minimum horizontal segment length as fraction of image width"
    )
    dedup_tolerance: int = Field(
        default=10,
        gt=0,
        description="Maximum start/end drift for two candidates to be the same border"
    )
    dedup_min_separation: int = Field(
        default=10,
        ge=0,
        description="Minimum index gap before both ends of a stable border are emitted"
    )
    dedup_mode: DedupMode = Field(
        default=DedupMode.REFERENCE,
        description="Handling of non-matching candidates during deduplication"
    )


class CellConfig(BaseModel):
    """Configuration for cell rectangle assembly."""

    inset: int = Field(
        default=4,
        ge=0,
        description="Pixels removed from each side of a cell to exclude border pixels"
    )
    degenerate_policy: DegeneratePolicy = Field(
        default=DegeneratePolicy.SKIP,
        description="Handling of cells whose inset rectangle is empty"
    )
    fail_on_empty_grid: bool = Field(
        default=False,
        description="Raise instead of returning an empty table when no cells are found"
    )


class PreprocessingConfig(BaseModel):
    """Configuration for image preparation before grid detection."""

    contrast: float = Field(
        default=20.0,
        gt=-100.0,
        description="Contrast adjustment in percent applied before grayscale conversion"
    )


class RecognizerConfig(BaseModel):
    """Configuration for the Tesseract text recognizer."""

    language: str = Field(
        default="deu",
        min_length=1,
        description="Tesseract language code(s), e.g. 'deu' or 'deu+eng'"
    )
    tesseract_cmd: Optional[str] = Field(
        default=None,
        description="Path to the tesseract executable (uses PATH when unset)"
    )
    psm: Optional[int] = Field(
        default=None,
        ge=0,
        le=13,
        description="Tesseract page segmentation mode"
    )
    extra_config: str = Field(
        default="",
        description="Additional command line options passed to tesseract"
    )
    workers: int = Field(
        default=1,
        ge=1,
        description="Number of threads used to recognize cells"
    )


class OutputConfig(BaseModel):
    """Configuration for debug output."""

    debug_dir: Optional[str] = Field(
        default=None,
        description="Directory for grid overlay images (disabled when unset)"
    )
    line_color_bgr: Tuple[int, int, int] = Field(
        default=(0, 0, 255),
        description="BGR color for detected grid lines"
    )
    cell_color_bgr: Tuple[int, int, int] = Field(
        default=(0, 255, 0),
        description="BGR color for cell rectangles"
    )
    line_thickness: int = Field(
        default=1,
        gt=0,
        description="Thickness of drawn lines"
    )

    @field_validator('line_color_bgr', 'cell_color_bgr')
    @classmethod
    def validate_bgr_color(cls, v):
        """Validate BGR color values."""
        if not all(0 <= c <= 255 for c in v):
            raise ValueError("BGR color values must be between 0 and 255")
        return v

    @field_validator('debug_dir')
    @classmethod
    def normalize_directory(cls, v):
        """Normalize path separators."""
        if v is None:
            return v
        if not v.strip():
            raise ValueError("Directory path must be a non-empty string")
        return v.replace('\\', '/')


class LoggingConfig(BaseModel):
    """Configuration for logging setup."""

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Base logging level"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional log file path"
    )
    use_rich: bool = Field(
        default=True,
        description="Whether to use rich console output"
    )
    format_style: str = Field(
        default="detailed",
        pattern="^(simple|detailed|minimal)$",
        description="Logging format style"
    )


class Config(BaseModel):
    """Main configuration model for table grid extraction."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        use_enum_values=True,
    )

    grid: GridDetectionConfig = Field(
        default_factory=GridDetectionConfig,
        description="Grid line detection configuration"
    )
    cells: CellConfig = Field(
        default_factory=CellConfig,
        description="Cell assembly configuration"
    )
    preprocessing: PreprocessingConfig = Field(
        default_factory=PreprocessingConfig,
        description="Image preparation configuration"
    )
    recognizer: RecognizerConfig = Field(
        default_factory=RecognizerConfig,
        description="Text recognizer configuration"
    )
    output: OutputConfig = Field(
        default_factory=OutputConfig,
        description="Debug output configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration"
    )

    version: str = Field(
        default="1.0.0",
        description="Configuration version"
    )
    description: Optional[str] = Field(
        default=None,
        description="Configuration description"
    )

