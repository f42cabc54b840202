"""Tests for task form validation (jsonschema) and stored form parsing."""

import pytest

from taskgate.application.services.form_validator import (
    apply_defaults,
    build_json_schema,
    form_schema_to_dict,
    get_required_fields,
    is_valid_form_schema,
    parse_form_schema,
    validate_form_data,
    validate_form_data_or_raise,
)
from taskgate.domain.enums import FormFieldType
from taskgate.domain.exceptions import FormValidationException
from taskgate.domain.value_objects.core import FormField, FormSchema, SelectOption


@pytest.fixture
def approval_form() -> FormSchema:
    return FormSchema(
        fields={
            "decision": FormField(
                type=FormFieldType.SELECT,
                label="Decision",
                required=True,
                options=(SelectOption("approve", "Approve"), SelectOption("reject", "Reject")),
            ),
            "amount": FormField(type="number", label="Amount", min=0, max=10_000),
            "comment": FormField(type="textarea", label="Comment", max=20),
            "code": FormField(type="text", pattern=r"^[A-Z]{3}$", message="Use three capitals"),
            "urgent": FormField(type="boolean", default=False),
            "effective": FormField(type="date", label="Effective date"),
        }
    )


def test_build_json_schema(approval_form: FormSchema) -> None:
    schema = build_json_schema(approval_form)
    assert schema["required"] == ["decision"]
    assert schema["properties"]["decision"] == {"type": "string", "enum": ["approve", "reject"]}
    assert schema["properties"]["amount"] == {"type": ["number", "null"], "minimum": 0, "maximum": 10_000}


def test_valid_data_drops_unknown_fields(approval_form: FormSchema) -> None:
    result = validate_form_data(
        approval_form,
        {"decision": "approve", "amount": 120, "effective": "2024-03-01", "extra": 1},
    )
    assert result.valid is True
    assert result.data == {"decision": "approve", "amount": 120, "effective": "2024-03-01"}


def test_missing_required_field(approval_form: FormSchema) -> None:
    result = validate_form_data(approval_form, {"amount": 5})
    assert result.valid is False
    assert result.errors == {"decision": ["Decision is required"]}


@pytest.mark.parametrize(
    ("data", "field", "message"),
    [
        ({"decision": "maybe"}, "decision", "Decision must be one of: approve, reject"),
        ({"decision": "approve", "amount": -1}, "amount", "Amount must be at least 0"),
        ({"decision": "approve", "amount": "ten"}, "amount", "Amount must be a number"),
        ({"decision": "approve", "comment": "x" * 21}, "comment", "Comment must be at most 20 characters"),
        ({"decision": "approve", "code": "abc"}, "code", "Use three capitals"),
        ({"decision": "approve", "urgent": "yes"}, "urgent", "urgent must be a boolean"),
        ({"decision": "approve", "effective": "next week"}, "effective", "Effective date must be a valid ISO date string"),
    ],
)
def test_field_errors(approval_form: FormSchema, data, field, message) -> None:
    """Each failing field reports a label-based (or custom) message."""
    result = validate_form_data(approval_form, data)
    assert result.valid is False
    assert result.errors[field] == [message]


def test_optional_fields_accept_null(approval_form: FormSchema) -> None:
    assert validate_form_data(approval_form, {"decision": "reject", "amount": None}).valid is True


def test_validate_or_raise(approval_form: FormSchema) -> None:
    with pytest.raises(FormValidationException) as exc_info:
        validate_form_data_or_raise(approval_form, {})
    assert exc_info.value.error_code == "FORM_VALIDATION_ERROR"
    assert exc_info.value.details == {"errors": {"decision": "Decision is required"}}


def test_apply_defaults_and_required(approval_form: FormSchema) -> None:
    assert apply_defaults(approval_form, {"decision": "approve"}) == {"decision": "approve", "urgent": False}
    assert apply_defaults(approval_form, {"urgent": True})["urgent"] is True
    assert get_required_fields(approval_form) == ["decision"]


def test_is_valid_form_schema() -> None:
    assert is_valid_form_schema({"fields": {"a": {"type": "text"}}}) is True
    assert is_valid_form_schema({"fields": {"a": {"type": "colour"}}}) is False
    assert is_valid_form_schema({"fields": {"a": {"type": "select", "options": [{"value": 1}]}}}) is False
    assert is_valid_form_schema({"fields": []}) is False
    assert is_valid_form_schema(None) is False


def test_parse_form_schema_reads_stored_shape() -> None:
    form = parse_form_schema({
        "fields": {
            "reason": {
                "type": "text",
                "label": "Reason",
                "required": True,
                "helpText": "Why?",
                "validation": {"min": 3, "message": "Too short"},
            }
        }
    })
    assert form is not None
    field = form.fields["reason"]
    assert field.required is True
    assert field.help_text == "Why?"
    assert field.min == 3
    assert field.message == "Too short"
    assert parse_form_schema({"fields": {"x": {}}}) is None


def test_form_schema_to_dict_is_read_back(approval_form: FormSchema) -> None:
    assert parse_form_schema(form_schema_to_dict(approval_form)) == approval_form
