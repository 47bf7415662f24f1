# tests/unit/test_companion_validation.py
"""Tests for the shared companion validation rules."""

import pytest

from companion_app.core.config import settings
from companion_app.schemas.companion import CompanionValidationError, validate_companion
from tests.conftest import INSTRUCTIONS, SEED


def _values(**overrides):
    values = {
        "name": "Milo",
        "description": "A curious fox",
        "instructions": INSTRUCTIONS,
        "seed": SEED,
        "src": "/img/milo.png",
        "categoryID": "cat_1",
    }
    values.update(overrides)
    return values


class TestValidRecords:

    def test_valid_record_is_typed(self):
        payload = validate_companion(_values())

        assert payload.name == "Milo"
        assert payload.instructions == INSTRUCTIONS
        assert payload.category_id == "cat_1"

    def test_server_side_key_spelling_is_accepted(self):
        values = _values()
        values["instruction"] = values.pop("instructions")
        values["categoryId"] = values.pop("categoryID")

        payload = validate_companion(values)

        assert payload.instructions == INSTRUCTIONS
        assert payload.category_id == "cat_1"

    def test_exactly_minimum_length_passes(self):
        payload = validate_companion(_values(instructions="i" * 200, seed="s" * 200))

        assert len(payload.instructions) == 200

    def test_to_form_values_uses_form_keys(self):
        assert validate_companion(_values()).to_form_values() == _values()

    def test_unknown_keys_are_ignored(self):
        payload = validate_companion(_values(userId="someone-else"))

        assert not hasattr(payload, "userId")


class TestRejectedRecords:

    @pytest.mark.parametrize(
        "field, message",
        [
            ("name", "Name is required."),
            ("description", "Description is required."),
            ("src", "Image is required."),
            ("categoryID", "Category is required."),
        ],
    )
    def test_empty_required_field(self, field, message):
        with pytest.raises(CompanionValidationError) as exc_info:
            validate_companion(_values(**{field: ""}))

        assert exc_info.value.errors == {field: message}
        assert exc_info.value.missing == {field}

    def test_whitespace_only_counts_as_empty(self):
        with pytest.raises(CompanionValidationError) as exc_info:
            validate_companion(_values(name="   "))

        assert exc_info.value.errors["name"] == "Name is required."

    def test_absent_and_none_fields_are_missing(self):
        values = _values(description=None)
        del values["src"]

        with pytest.raises(CompanionValidationError) as exc_info:
            validate_companion(values)

        assert exc_info.value.missing == {"description", "src"}

    def test_short_instructions_and_seed(self):
        with pytest.raises(CompanionValidationError) as exc_info:
            validate_companion(_values(instructions="i" * 199, seed="too short"))

        errors = exc_info.value.errors
        assert errors["instructions"] == "Instructions require at least 200 characters."
        assert errors["seed"] == "Seed require at least 200 characters."
        assert exc_info.value.missing == set()

    def test_every_field_reported_at_once(self):
        with pytest.raises(CompanionValidationError) as exc_info:
            validate_companion({})

        assert set(exc_info.value.errors) == {
            "name", "description", "instructions", "seed", "src", "categoryID"
        }

    def test_non_text_value(self):
        with pytest.raises(CompanionValidationError) as exc_info:
            validate_companion(_values(name=42))

        assert exc_info.value.errors == {"name": "Name must be text."}
        assert exc_info.value.missing == set()


class TestConfigurableThresholds:

    def test_explicit_thresholds(self):
        payload = validate_companion(
            _values(instructions="short", seed="tiny"),
            instructions_min_length=5,
            seed_min_length=4,
        )

        assert payload.seed == "tiny"

    def test_threshold_follows_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "COMPANION_SEED_MIN_LENGTH", 500)

        with pytest.raises(CompanionValidationError) as exc_info:
            validate_companion(_values())

        assert exc_info.value.errors == {"seed": "Seed require at least 500 characters."}
