"""Task form validation.

A FormSchema is translated to a JSON Schema and submitted data is
validated with jsonschema. Error messages are per field and match the
form's labels (or the field's custom message).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

import jsonschema

from taskgate.domain.enums import FormFieldType
from taskgate.domain.exceptions import FormValidationException
from taskgate.domain.value_objects.core import FormField, FormSchema, SelectOption

_DATE_FORMAT = "iso-date-or-datetime"

_format_checker = jsonschema.FormatChecker()


@_format_checker.checks(_DATE_FORMAT, raises=ValueError)
def _is_iso_date(value: object) -> bool:
    if not isinstance(value, str):
        return True
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        date.fromisoformat(value)
    return True


def _field_json_schema(f: FormField) -> dict[str, Any]:
    if f.type in (FormFieldType.TEXT, FormFieldType.TEXTAREA):
        schema: dict[str, Any] = {"type": "string"}
        if f.min is not None:
            schema["minLength"] = int(f.min)
        if f.max is not None:
            schema["maxLength"] = int(f.max)
        if f.pattern:
            schema["pattern"] = f.pattern
    elif f.type is FormFieldType.NUMBER:
        schema = {"type": "number"}
        if f.min is not None:
            schema["minimum"] = f.min
        if f.max is not None:
            schema["maximum"] = f.max
    elif f.type is FormFieldType.BOOLEAN:
        schema = {"type": "boolean"}
    elif f.type is FormFieldType.DATE:
        schema = {"type": "string", "format": _DATE_FORMAT}
    elif f.options:
        schema = {"type": "string", "enum": [o.value for o in f.options]}
    else:
        schema = {"type": "string"}

    if not f.required:
        schema["type"] = [schema["type"], "null"]
        if "enum" in schema:
            schema["enum"] = [*schema["enum"], None]
    return schema


def build_json_schema(form: FormSchema) -> dict[str, Any]:
    """Return the JSON Schema equivalent of a task form."""
    return {
        "type": "object",
        "properties": {name: _field_json_schema(f) for name, f in form.fields.items()},
        "required": form.required_fields,
    }


def _message(name: str, f: FormField, error: jsonschema.ValidationError) -> str:
    kind = error.validator
    if f.message and kind in ("minLength", "maxLength", "pattern", "minimum", "maximum"):
        return f.message
    label = f.label or name
    if kind == "minLength":
        return f"{label} must be at least {error.validator_value} characters"
    if kind == "maxLength":
        return f"{label} must be at most {error.validator_value} characters"
    if kind == "pattern":
        return f"{label} has invalid format"
    if kind == "minimum":
        return f"{label} must be at least {error.validator_value}"
    if kind == "maximum":
        return f"{label} must be at most {error.validator_value}"
    if kind == "enum":
        allowed = ", ".join(o.value for o in f.options)
        return f"{label} must be one of: {allowed}"
    if kind == "format":
        return f"{label} must be a valid ISO date string"
    if kind == "type":
        expected = {
            FormFieldType.NUMBER: "a number",
            FormFieldType.BOOLEAN: "a boolean",
        }.get(f.type, "a string")
        return f"{label} must be {expected}"
    return error.message


@dataclass(frozen=True)
class FormValidationResult:
    """Outcome of validating submitted data."""

    valid: bool
    data: dict[str, Any] | None
    errors: dict[str, list[str]] = field(default_factory=dict)


def validate_form_data(form: FormSchema, data: dict[str, Any]) -> FormValidationResult:
    """Validate data against the form. Fields not in the form are dropped from the result."""
    validator = jsonschema.Draft202012Validator(
        build_json_schema(form), format_checker=_format_checker
    )
    errors: dict[str, list[str]] = {}
    for error in validator.iter_errors(data):
        if error.validator == "required":
            for name in error.validator_value:
                if name not in data:
                    label = form.fields[name].label or name
                    errors.setdefault(name, []).append(f"{label} is required")
            continue
        if not error.path:
            errors.setdefault("", []).append(error.message)
            continue
        name = str(error.path[0])
        errors.setdefault(name, []).append(_message(name, form.fields[name], error))
    if errors:
        return FormValidationResult(valid=False, data=None, errors=errors)
    cleaned = {k: v for k, v in data.items() if k in form.fields}
    return FormValidationResult(valid=True, data=cleaned)


def validate_form_data_or_raise(form: FormSchema, data: dict[str, Any]) -> dict[str, Any]:
    """Return cleaned data or raise FormValidationException."""
    result = validate_form_data(form, data)
    if not result.valid:
        raise FormValidationException(
            {name: "; ".join(messages) for name, messages in result.errors.items()}
        )
    return result.data or {}


def apply_defaults(form: FormSchema, data: dict[str, Any] | None = None) -> dict[str, Any]:
    """Fill missing fields that declare a default."""
    out = dict(data or {})
    for name, f in form.fields.items():
        if name not in out and f.default is not None:
            out[name] = f.default
    return out


def get_required_fields(form: FormSchema) -> list[str]:
    return form.required_fields


def is_valid_form_schema(raw: Any) -> bool:
    """True when raw is a well-formed stored form ({"fields": {name: {...}}})."""
    if not isinstance(raw, dict) or not isinstance(raw.get("fields"), dict):
        return False
    for spec in raw["fields"].values():
        if not isinstance(spec, dict) or spec.get("type") not in FormFieldType.values():
            return False
        options = spec.get("options")
        if spec["type"] == FormFieldType.SELECT.value and options is not None:
            if not isinstance(options, list):
                return False
            for option in options:
                if not (
                    isinstance(option, dict)
                    and isinstance(option.get("value"), str)
                    and isinstance(option.get("label"), str)
                ):
                    return False
    return True


def parse_form_schema(raw: Any) -> FormSchema | None:
    """Build a FormSchema from stored JSON, or None when it is malformed.

    Accepts camelCase keys used by stored forms (helpText).
    """
    if not is_valid_form_schema(raw):
        return None
    fields: dict[str, FormField] = {}
    for name, spec in raw["fields"].items():
        validation = spec.get("validation") or {}
        fields[name] = FormField(
            type=spec["type"],
            label=spec.get("label"),
            required=bool(spec.get("required", False)),
            default=spec.get("default"),
            options=tuple(SelectOption(o["value"], o["label"]) for o in spec.get("options") or ()),
            min=validation.get("min", spec.get("min")),
            max=validation.get("max", spec.get("max")),
            pattern=validation.get("pattern", spec.get("pattern")),
            message=validation.get("message"),
            help_text=spec.get("helpText", spec.get("help_text")),
            placeholder=spec.get("placeholder"),
            disabled=bool(spec.get("disabled", False)),
        )
    return FormSchema(fields=fields)


def form_schema_to_dict(form: FormSchema) -> dict[str, Any]:
    """Serialize a FormSchema to the stored JSON shape read by parse_form_schema."""
    fields: dict[str, Any] = {}
    for name, f in form.fields.items():
        spec: dict[str, Any] = {"type": f.type.value, "required": f.required}
        for key, value in (("label", f.label), ("default", f.default),
                           ("helpText", f.help_text), ("placeholder", f.placeholder)):
            if value is not None:
                spec[key] = value
        if f.disabled:
            spec["disabled"] = True
        if f.options:
            spec["options"] = [{"value": o.value, "label": o.label} for o in f.options]
        validation = {k: v for k, v in (("min", f.min), ("max", f.max),
                                        ("pattern", f.pattern), ("message", f.message)) if v is not None}
        if validation:
            spec["validation"] = validation
        fields[name] = spec
    return {"fields": fields}
