"""Tests for submission validation against field definitions"""

import itertools

import pytest
from pydantic import ValidationError

from ez_forms.models.form_field import (
    CheckboxField,
    FieldValidation,
    NumberField,
    TextField,
    parse_fields,
)
from ez_forms.services.field_validator import clean_submission, validate_submission


def _contact_form():
    return parse_fields(
        [
            {"id": "name", "type": "text", "label": "Name", "required": True},
            {"id": "email", "type": "email", "label": "Email", "required": True},
            {"id": "notes", "type": "textarea", "label": "Notes"},
            {
                "id": "topics",
                "type": "checkbox",
                "label": "Topics",
                "required": True,
                "options": ["news", "events", "jobs"],
            },
            {
                "id": "size",
                "type": "select",
                "label": "T-shirt size",
                "options": ["S", "M", "L"],
            },
        ]
    )


class TestFieldSpecParsing:
    def test_fields_parse_to_typed_variants(self):
        fields = _contact_form()
        assert [f.type for f in fields] == [
            "text",
            "email",
            "textarea",
            "checkbox",
            "select",
        ]
        assert isinstance(fields[3], CheckboxField)
        assert fields[3].multi_value is True
        assert fields[0].multi_value is False

    @pytest.mark.parametrize("field_type", ["select", "checkbox", "radio"])
    def test_choice_fields_require_options(self, field_type):
        with pytest.raises(ValidationError):
            parse_fields([{"id": "f1", "type": field_type, "label": "Pick"}])
        with pytest.raises(ValidationError):
            parse_fields(
                [{"id": "f1", "type": field_type, "label": "Pick", "options": []}]
            )

    def test_options_ignored_on_scalar_fields(self):
        (field,) = parse_fields(
            [{"id": "f1", "type": "text", "label": "Name", "options": ["x"]}]
        )
        assert not hasattr(field, "options")

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            parse_fields([{"id": "f1", "type": "signature", "label": "Sign"}])

    def test_invalid_pattern_rejected(self):
        with pytest.raises(ValidationError):
            FieldValidation(pattern="([a-z")


class TestRequiredFields:
    def test_complete_submission_is_accepted(self):
        data = {
            "name": "Ada",
            "email": "ada@example.com",
            "topics": ["news"],
        }
        assert validate_submission(_contact_form(), data) == []

    def test_all_missing_required_fields_are_reported(self):
        errors = validate_submission(_contact_form(), {})
        assert errors == [
            "Name is required",
            "Email is required",
            "Topics is required",
        ]

    @pytest.mark.parametrize("empty", [None, ""])
    def test_empty_scalar_counts_as_missing(self, empty):
        errors = validate_submission(
            _contact_form(),
            {"name": empty, "email": "ada@example.com", "topics": ["news"]},
        )
        assert errors == ["Name is required"]

    def test_empty_selection_counts_as_missing(self):
        errors = validate_submission(
            _contact_form(),
            {"name": "Ada", "email": "ada@example.com", "topics": []},
        )
        assert errors == ["Topics is required"]

    def test_optional_fields_never_rejected_for_absence(self):
        fields = parse_fields(
            [{"id": "f1", "type": "text", "label": "Nickname", "required": False}]
        )
        assert validate_submission(fields, {}) == []
        assert validate_submission(fields, {"f1": ""}) == []

    def test_unknown_keys_are_ignored(self):
        data = {
            "name": "Ada",
            "email": "ada@example.com",
            "topics": ["jobs"],
            "utm_source": "newsletter",
        }
        assert validate_submission(_contact_form(), data) == []

    def test_accepted_iff_every_required_field_has_value(self):
        fields = parse_fields(
            [
                {"id": "a", "type": "text", "label": "A", "required": True},
                {"id": "b", "type": "date", "label": "B", "required": False},
                {
                    "id": "c",
                    "type": "checkbox",
                    "label": "C",
                    "required": True,
                    "options": ["x", "y"],
                },
            ]
        )
        scalar_values = [None, "", "filled"]
        set_values = [None, [], ["x"]]

        for a, b, c in itertools.product(scalar_values, scalar_values, set_values):
            data = {k: v for k, v in {"a": a, "b": b, "c": c}.items() if v is not None}
            required_present = a == "filled" and c == ["x"]
            assert (validate_submission(fields, data) == []) == required_present


class TestValueShape:
    def test_checkbox_requires_list(self):
        fields = [CheckboxField(id="c", label="Colours", options=["red"])]
        assert validate_submission(fields, {"c": "red"}) == [
            "Colours must be a list of options"
        ]

    def test_scalar_field_rejects_list(self):
        fields = [TextField(id="t", label="Name")]
        assert validate_submission(fields, {"t": ["Ada"]}) == ["Name must be text"]

    def test_number_accepts_json_numbers(self):
        fields = [NumberField(id="n", label="Guests")]
        assert validate_submission(fields, {"n": 3}) == []
        assert validate_submission(fields, {"n": "3"}) == []
        assert validate_submission(fields, {"n": True}) == ["Guests must be a number"]

    @pytest.mark.parametrize("value", ["abc", "nan", "inf", "-inf", "1e999", 10**400])
    def test_number_must_be_finite_without_bounds(self, value):
        fields = [NumberField(id="n", label="Guests")]
        assert validate_submission(fields, {"n": value}) == [
            "Guests must be a valid number"
        ]


class TestAdvisoryConstraints:
    def test_number_bounds(self):
        fields = [
            NumberField(
                id="n", label="Guests", validation=FieldValidation(min=1, max=5)
            )
        ]
        assert validate_submission(fields, {"n": "3"}) == []
        assert validate_submission(fields, {"n": "0"}) == ["Guests must be at least 1"]
        assert validate_submission(fields, {"n": 9}) == ["Guests must be at most 5"]
        assert validate_submission(fields, {"n": "many"}) == [
            "Guests must be a valid number"
        ]

    @pytest.mark.parametrize("value", ["nan", "NaN", "inf", "-inf", 10**400])
    def test_non_finite_or_oversized_number_never_satisfies_bounds(self, value):
        fields = [
            NumberField(
                id="n", label="Guests", validation=FieldValidation(min=1, max=10)
            )
        ]
        assert validate_submission(fields, {"n": value}) == [
            "Guests must be a valid number"
        ]

    def test_text_length_bounds(self):
        fields = [
            TextField(id="t", label="Code", validation=FieldValidation(min=2, max=4))
        ]
        assert validate_submission(fields, {"t": "abc"}) == []
        assert validate_submission(fields, {"t": "a"}) == [
            "Code must be at least 2 characters"
        ]
        assert validate_submission(fields, {"t": "abcde"}) == [
            "Code must be at most 4 characters"
        ]

    def test_pattern_must_match_whole_value(self):
        fields = [
            TextField(
                id="zip", label="ZIP", validation=FieldValidation(pattern=r"\d{5}")
            )
        ]
        assert validate_submission(fields, {"zip": "94107"}) == []
        assert validate_submission(fields, {"zip": "94107-1234"}) == [
            "ZIP is not in the expected format"
        ]

    def test_checkbox_selection_count(self):
        fields = [
            CheckboxField(
                id="c",
                label="Days",
                options=["mon", "tue", "wed"],
                validation=FieldValidation(max=2),
            )
        ]
        assert validate_submission(fields, {"c": ["mon", "tue"]}) == []
        assert validate_submission(fields, {"c": ["mon", "tue", "wed"]}) == [
            "Select at most 2 options for Days"
        ]

    def test_constraint_errors_aggregate_with_required_errors(self):
        fields = [
            TextField(id="name", label="Name", required=True),
            TextField(
                id="code", label="Code", validation=FieldValidation(pattern=r"[A-Z]+")
            ),
        ]
        assert validate_submission(fields, {"code": "abc"}) == [
            "Name is required",
            "Code is not in the expected format",
        ]

    def test_constraints_skipped_for_empty_optional_value(self):
        fields = [
            TextField(id="t", label="Code", validation=FieldValidation(min=3))
        ]
        assert validate_submission(fields, {"t": ""}) == []


def test_clean_submission_keeps_known_fields_and_dedupes_selections():
    data = {
        "name": "Ada",
        "email": "ada@example.com",
        "topics": ["news", "jobs", "news"],
        "notes": "",
        "extra": "dropped",
    }
    assert clean_submission(_contact_form(), data) == {
        "name": "Ada",
        "email": "ada@example.com",
        "topics": ["news", "jobs"],
    }
