"""
Schemas Package

JSON schema definition and validation utilities for sheet payloads.
"""

from .validator import (
    validate_payload,
    decode_rules,
    ValidationError,
)

__all__ = [
    "validate_payload",
    "decode_rules",
    "ValidationError",
]
