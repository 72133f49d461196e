"""
Error handling module for the CRD apply engine.

This module provides the error hierarchy raised across the engine boundary
with clear categorization for different types of failures.
"""

from .engine_errors import (
    ApplyError,
    ClientError,
    ConfigurationError,
    DeleteError,
    DeleteFailedError,
    EngineError,
    MalformedWaitSpecificationError,
    OperationCancelledError,
    PatchFailedError,
    ResourceNotFoundError,
    SerializationError,
    WaitTimeoutError,
    WaitTimeoutExceededError,
)

__all__ = [
    "EngineError",
    "ClientError",
    "ResourceNotFoundError",
    "ConfigurationError",
    "ApplyError",
    "PatchFailedError",
    "SerializationError",
    "MalformedWaitSpecificationError",
    "WaitTimeoutError",
    "DeleteError",
    "DeleteFailedError",
    "WaitTimeoutExceededError",
    "OperationCancelledError",
]
