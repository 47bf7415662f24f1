# companion_app/schemas/companion.py
"""
Companion record validation.

The same rules run in the client form controller (before any request is
sent) and in the API handlers (before anything is written), so a record
that passes one always passes the other. Length thresholds come from the
settings unless a caller passes explicit ones.
"""
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Set

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from companion_app.core.config import settings

# Form field name -> message shown when the field is empty
REQUIRED_MESSAGES: Dict[str, str] = {
    "name": "Name is required.",
    "description": "Description is required.",
    "instructions": "Instructions are required.",
    "seed": "Seed is required.",
    "src": "Image is required.",
    "categoryID": "Category is required.",
}

FORM_FIELDS = tuple(REQUIRED_MESSAGES)

# Any accepted key (or model field name) -> form field name
_FORM_FIELD_FOR_KEY: Dict[str, str] = {
    "name": "name",
    "description": "description",
    "instructions": "instructions",
    "instruction": "instructions",
    "seed": "seed",
    "src": "src",
    "categoryID": "categoryID",
    "categoryId": "categoryID",
    "category_id": "categoryID",
}


class CompanionValidationError(ValueError):
    """Raised when a candidate companion record fails validation."""

    def __init__(self, errors: Dict[str, str], missing: Set[str]):
        self.errors = errors
        self.missing = missing
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))


def _min_length_error(label: str, min_length: int) -> PydanticCustomError:
    return PydanticCustomError(
        "too_short",
        "{label} require at least {min_length} characters.",
        {"label": label, "min_length": min_length},
    )


class CompanionPayload(BaseModel):
    """A validated companion record as submitted by the form."""
    model_config = ConfigDict(populate_by_name=True, validate_default=True)

    name: str = Field("", validation_alias=AliasChoices("name"))
    description: str = Field("", validation_alias=AliasChoices("description"))
    instructions: str = Field("", validation_alias=AliasChoices("instructions", "instruction"))
    seed: str = Field("", validation_alias=AliasChoices("seed"))
    src: str = Field("", validation_alias=AliasChoices("src"))
    category_id: str = Field("", validation_alias=AliasChoices("categoryID", "categoryId", "category_id"))

    @field_validator("name", "description", "src", "category_id")
    @classmethod
    def _not_blank(cls, value: str, info: ValidationInfo) -> str:
        if not value.strip():
            field = _FORM_FIELD_FOR_KEY[info.field_name]
            raise PydanticCustomError("missing", REQUIRED_MESSAGES[field])
        return value

    @field_validator("instructions")
    @classmethod
    def _instructions_long_enough(cls, value: str, info: ValidationInfo) -> str:
        if not value.strip():
            raise PydanticCustomError("missing", REQUIRED_MESSAGES["instructions"])
        min_length = (info.context or {}).get(
            "instructions_min_length", settings.COMPANION_INSTRUCTIONS_MIN_LENGTH
        )
        if len(value) < min_length:
            raise _min_length_error("Instructions", min_length)
        return value

    @field_validator("seed")
    @classmethod
    def _seed_long_enough(cls, value: str, info: ValidationInfo) -> str:
        if not value.strip():
            raise PydanticCustomError("missing", REQUIRED_MESSAGES["seed"])
        min_length = (info.context or {}).get("seed_min_length", settings.COMPANION_SEED_MIN_LENGTH)
        if len(value) < min_length:
            raise _min_length_error("Seed", min_length)
        return value

    def to_form_values(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "description": self.description,
            "instructions": self.instructions,
            "seed": self.seed,
            "src": self.src,
            "categoryID": self.category_id,
        }


def validate_companion(
    data: Mapping[str, Any],
    *,
    instructions_min_length: Optional[int] = None,
    seed_min_length: Optional[int] = None,
) -> CompanionPayload:
    """
    Validate a candidate record (field name -> value).

    Returns the typed payload, or raises CompanionValidationError with one
    message per failing form field. Fields that were absent or blank are
    also reported in ``missing``.
    """
    context = {}
    if instructions_min_length is not None:
        context["instructions_min_length"] = instructions_min_length
    if seed_min_length is not None:
        context["seed_min_length"] = seed_min_length

    # None means "not filled in" on both sides of the wire
    cleaned = {key: ("" if value is None else value) for key, value in dict(data).items()}

    try:
        return CompanionPayload.model_validate(cleaned, context=context)
    except ValidationError as exc:
        errors: Dict[str, str] = {}
        missing: Set[str] = set()
        for error in exc.errors():
            key = str(error["loc"][0]) if error["loc"] else ""
            field = _FORM_FIELD_FOR_KEY.get(key, key)
            if error["type"] == "missing":
                missing.add(field)
                message = REQUIRED_MESSAGES.get(field, error["msg"])
            elif error["type"] == "too_short":
                message = error["msg"]
            else:
                message = f"{REQUIRED_MESSAGES.get(field, field).split(' ')[0]} must be text."
            errors.setdefault(field, message)
        raise CompanionValidationError(errors, missing) from None


class CategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class CompanionRead(BaseModel):
    """Companion as returned by the API (camelCase keys)."""
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: str
    user_name: str
    src: str
    name: str
    description: str
    instructions: str
    seed: str
    category_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CompanionDetail(CompanionRead):
    message_count: int = 0
