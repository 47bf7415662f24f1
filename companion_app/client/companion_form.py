# companion_app/client/companion_form.py
"""
Companion create/edit form.

The form's state is an immutable record; every change goes through
``reduce(state, action)``, which returns a new state. The controller owns
the current state, runs the shared validation before any request, and
keeps at most one submission in flight.
"""
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from companion_app.client.api_client import APIError, CompanionAPIClient
from companion_app.schemas.companion import (
    FORM_FIELDS,
    CompanionValidationError,
    validate_companion,
)


class FormStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


class CompanionFormState(BaseModel):
    model_config = ConfigDict(frozen=True)

    values: Dict[str, str]
    errors: Dict[str, str] = Field(default_factory=dict)
    status: FormStatus = FormStatus.IDLE
    submit_error: Optional[str] = None
    companion_id: Optional[str] = None
    saved: Optional[Dict[str, Any]] = None

    @property
    def is_loading(self) -> bool:
        return self.status == FormStatus.SUBMITTING


class FieldChanged(BaseModel):
    model_config = ConfigDict(frozen=True)
    field: str
    value: str


class SubmitStarted(BaseModel):
    model_config = ConfigDict(frozen=True)


class ValidationFailed(BaseModel):
    model_config = ConfigDict(frozen=True)
    errors: Dict[str, str]


class SubmitSucceeded(BaseModel):
    model_config = ConfigDict(frozen=True)
    record: Dict[str, Any]


class SubmitFailed(BaseModel):
    model_config = ConfigDict(frozen=True)
    message: str


GENERIC_SUBMIT_ERROR = "Something went wrong. Please try again."

FormAction = Union[FieldChanged, SubmitStarted, ValidationFailed, SubmitSucceeded, SubmitFailed]

# API record key -> form field
_RECORD_KEYS = {
    "name": "name",
    "description": "description",
    "instructions": "instructions",
    "seed": "seed",
    "src": "src",
    "categoryId": "categoryID",
}


def initial_form_state(existing: Optional[Mapping[str, Any]] = None) -> CompanionFormState:
    """Empty form, or one pre-populated from a companion record returned by the API."""
    values = {field: "" for field in FORM_FIELDS}
    companion_id = None
    if existing:
        for key, field in _RECORD_KEYS.items():
            if existing.get(key) is not None:
                values[field] = str(existing[key])
        companion_id = existing.get("id")
    return CompanionFormState(values=values, companion_id=companion_id)


def reduce(state: CompanionFormState, action: FormAction) -> CompanionFormState:
    if isinstance(action, FieldChanged):
        if action.field not in state.values:
            raise ValueError(f"Unknown form field: {action.field}")
        # inputs are disabled while submitting
        if state.is_loading:
            return state
        errors = {k: v for k, v in state.errors.items() if k != action.field}
        return state.model_copy(update={"values": {**state.values, action.field: action.value}, "errors": errors})

    if isinstance(action, SubmitStarted):
        return state.model_copy(update={"status": FormStatus.SUBMITTING, "submit_error": None, "errors": {}})

    if isinstance(action, ValidationFailed):
        return state.model_copy(update={"status": FormStatus.IDLE, "errors": dict(action.errors)})

    if isinstance(action, SubmitSucceeded):
        return state.model_copy(update={
            "status": FormStatus.IDLE,
            "errors": {},
            "submit_error": None,
            "saved": dict(action.record),
            "companion_id": action.record.get("id", state.companion_id),
        })

    if isinstance(action, SubmitFailed):
        return state.model_copy(update={"status": FormStatus.IDLE, "submit_error": action.message})

    raise TypeError(f"Unsupported form action: {type(action).__name__}")


class CompanionFormController:
    def __init__(
        self,
        api: CompanionAPIClient,
        existing: Optional[Mapping[str, Any]] = None,
        instructions_min_length: Optional[int] = None,
        seed_min_length: Optional[int] = None,
    ):
        self.api = api
        self.state = initial_form_state(existing)
        self.instructions_min_length = instructions_min_length
        self.seed_min_length = seed_min_length

    def dispatch(self, action: FormAction) -> CompanionFormState:
        self.state = reduce(self.state, action)
        return self.state

    def change(self, field: str, value: str) -> CompanionFormState:
        return self.dispatch(FieldChanged(field=field, value=value))

    async def submit(self) -> CompanionFormState:
        """
        Validates, then creates (no companion id yet) or updates the companion.
        Failures end up in `submit_error`; entered values are kept.
        """
        if self.state.is_loading:
            logger.debug("Submission already in flight, ignoring submit.")
            return self.state

        try:
            validate_companion(
                self.state.values,
                instructions_min_length=self.instructions_min_length,
                seed_min_length=self.seed_min_length,
            )
        except CompanionValidationError as e:
            return self.dispatch(ValidationFailed(errors=e.errors))

        self.dispatch(SubmitStarted())
        values = dict(self.state.values)
        try:
            if self.state.companion_id:
                record = await self.api.update_companion(self.state.companion_id, values)
            else:
                record = await self.api.create_companion(values)
            if not isinstance(record, dict):
                raise ValueError(f"Unexpected companion record: {record!r}")
        except APIError as e:
            logger.error(f"Saving companion failed: {e}")
            return self.dispatch(SubmitFailed(message=e.message))
        except Exception as e:
            # includes a 2xx answer whose body is not a JSON record
            logger.error(f"Saving companion failed: {e}")
            return self.dispatch(SubmitFailed(message=GENERIC_SUBMIT_ERROR))

        logger.info(f"Saved companion {record.get('id')}")
        return self.dispatch(SubmitSucceeded(record=record))
