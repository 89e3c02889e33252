"""Validation schemas for user-submitted forms."""

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError, field_validator

from config.constants import (
    BIO_MAX_LENGTH,
    BIO_MIN_LENGTH,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    THREAD_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
)


class UserValidation(BaseModel):
    profile_photo: str = Field(..., min_length=1)
    name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    username: str = Field(..., min_length=USERNAME_MIN_LENGTH, max_length=USERNAME_MAX_LENGTH)
    bio: str = Field(..., min_length=BIO_MIN_LENGTH, max_length=BIO_MAX_LENGTH)

    @field_validator("profile_photo")
    @classmethod
    def _photo_is_url(cls, value: str) -> str:
        if value.startswith(("http://", "https://", "data:")):
            return value
        raise ValueError("Profile photo must be a URL or an inline image")


class ThreadValidation(BaseModel):
    thread: str = Field(..., min_length=THREAD_MIN_LENGTH)
    account_id: UUID


class CommentValidation(BaseModel):
    thread: str = Field(..., min_length=THREAD_MIN_LENGTH)
    author: UUID


@dataclass
class ValidationResult:
    valid: bool
    errors: dict[str, str] = field(default_factory=dict)
    values: dict[str, Any] = field(default_factory=dict)


def validate(schema: type[BaseModel], values: dict[str, Any]) -> ValidationResult:
    """Check ``values`` against ``schema``; errors are keyed by field name."""
    try:
        model = schema.model_validate(values)
    except ValidationError as e:
        errors: dict[str, str] = {}
        for err in e.errors():
            key = ".".join(str(p) for p in err["loc"]) or "__root__"
            errors.setdefault(key, err["msg"])
        return ValidationResult(valid=False, errors=errors)
    return ValidationResult(valid=True, values=model.model_dump(mode="json"))
