"""Request payload checks.

The payload shapes are the pydantic models in `noteful.models`; the functions
here run them and turn the first pydantic error into the domain error for that
field. Everything is pure and synchronous: existence and ownership of
referenced items are checked afterwards by `noteful.services.references`.
"""
from __future__ import annotations

from typing import Any, Iterable, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from noteful.models.auth import UserIn
from noteful.models.notes import FolderIn, NoteIn, TagIn, is_object_id
from noteful.services.errors import AccountValidationError, ValidationError

M = TypeVar("M", bound=BaseModel)

_MESSAGES = {
    "missing": "Missing `{field}` in request body",
    "string_type": "The `{field}` must be a string",
    "string_too_short": "Must be at least {min_length} characters long",
    "string_too_long": "Must be less than {max_length} characters long",
    "model_type": "Request body must be a JSON object",
    "model_attributes_type": "Request body must be a JSON object",
    "json_invalid": "Request body is not valid JSON",
}


def error_from(errors: Iterable[dict[str, Any]], error_cls: Type[ValidationError] = ValidationError) -> ValidationError:
    """Domain error for the first entry of a pydantic (or FastAPI) error list."""
    err = next(iter(errors), None)
    if err is None:
        return error_cls("Invalid request body", field="body")

    loc = list(err.get("loc") or ())
    if loc and loc[0] == "body":
        loc = loc[1:]
    field = loc[0] if loc and isinstance(loc[0], str) else "body"

    kind = err.get("type", "")
    ctx = err.get("ctx") or {}
    if kind == "value_error":
        message = str(ctx.get("error", err.get("msg", "")))
    else:
        # an explicit null counts as missing
        if field != "body" and err.get("input", ...) is None:
            kind = "missing"
        template = _MESSAGES.get(kind, "Invalid `{field}` entered")
        message = template.format(field=field, **{k: v for k, v in ctx.items() if k != "field"})
    return error_cls(message, field=field)


def _parse(model: Type[M], payload: Any, error_cls: Type[ValidationError] = ValidationError) -> M:
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise error_from(exc.errors(), error_cls) from exc


def validate_object_id(value: Any, field_name: str = "id") -> str:
    if not is_object_id(value):
        raise ValidationError(f"The `{field_name}` is not valid", field=field_name)
    return value.lower()


def validate_note(payload: Any) -> NoteIn:
    return _parse(NoteIn, payload)


def validate_folder(payload: Any) -> FolderIn:
    return _parse(FolderIn, payload)


def validate_tag(payload: Any) -> TagIn:
    return _parse(TagIn, payload)


def validate_new_user(payload: Any) -> UserIn:
    return _parse(UserIn, payload, AccountValidationError)
