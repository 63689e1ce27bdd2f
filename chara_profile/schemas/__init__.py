from .character import CharacterProfile, NameRequest
from .validation import (
    NameRequestError,
    ProfileValidationError,
    SchemaViolation,
    validate_name_request,
    validate_profile,
)

__all__ = [
    "CharacterProfile",
    "NameRequest",
    "NameRequestError",
    "ProfileValidationError",
    "SchemaViolation",
    "validate_name_request",
    "validate_profile",
]
