"""
Pydantic models for ufunc configuration and performance metrics.
"""

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s'

ENV_PREFIX = "UFUNC_"


class Settings(BaseModel):
    """Logging configuration for applications using ufunc"""
    log_level: str = Field(
        default="WARNING",
        description="Level applied to the 'ufunc' logger"
    )
    log_format: str = Field(
        default=DEFAULT_LOG_FORMAT,
        min_length=1,
        description="logging format string"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional file to write log records to, besides stdout"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Accept standard level names in any case"""
        level = str(v).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from UFUNC_LOG_LEVEL, UFUNC_LOG_FORMAT and UFUNC_LOG_FILE"""
        environ = os.environ if environ is None else environ
        values = {}
        for field_name in cls.model_fields:
            key = ENV_PREFIX + field_name.upper()
            if key in environ:
                values[field_name] = environ[key]
        return cls(**values)


class OperationMetrics(BaseModel):
    """Timing and memory of one measured operation"""
    operation: str = Field(..., description="Name given to the measured call")
    execution_time_ms: float = Field(..., ge=0, description="Wall time in milliseconds")
    memory_usage_mb: float = Field(..., ge=0, description="Peak traced memory in megabytes")
    success: bool = Field(..., description="Whether the call returned normally")
    result_size: Optional[int] = Field(None, description="len() of the result, when it has one")
    error: Optional[str] = Field(None, description="Error message when the call raised")


class PerformanceSummary(BaseModel):
    """Totals and averages over every measured operation"""
    total_operations: int = 0
    total_time_ms: float = 0.0
    total_memory_mb: float = 0.0
    avg_time_ms: float = 0.0
    avg_memory_mb: float = 0.0
