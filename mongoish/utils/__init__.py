"""
Utility functions and helpers for MONGOISH.

This module provides the argument validation used across the client,
database and collection layers.
"""

from .validation import (has_id, validate_name, validate_record,
                         validate_records, validate_string, validate_url)

__all__ = [
    "has_id",
    "validate_name",
    "validate_record",
    "validate_records",
    "validate_string",
    "validate_url",
]
