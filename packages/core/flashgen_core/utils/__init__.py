"""Utility functions."""

from flashgen_core.utils.logging import get_logger
from flashgen_core.utils.retry import is_retryable, with_retry

__all__ = [
    "get_logger",
    "is_retryable",
    "with_retry",
]
