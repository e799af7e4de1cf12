"""Shared validation helpers for settings and client input."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from pydantic_settings import EnvSettingsSource

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo

# ASCII control character boundaries
_SPACE_ORD = 0x20
_DEL_ORD = 0x7F


def parse_string_list(value: str | list[str]) -> list[str]:
    """Parse a non-empty string list from an environment variable or config value.

    Accepts a list of strings (returned as-is), a JSON array string
    ('["a","b"]') or a comma-separated string ('a,b').

    Raises ValueError for empty values or malformed JSON.
    """
    if isinstance(value, list):
        if not value:
            raise ValueError("String list value must not be empty")
        return value

    stripped = value.strip()
    if stripped.startswith("["):
        try:
            parsed = json.loads(stripped)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON array: {e}") from e
        if not isinstance(parsed, list) or not all(isinstance(item, str) for item in parsed):
            raise ValueError("JSON value must be an array of strings")
        result = parsed
    else:
        result = [item.strip() for item in stripped.split(",") if item.strip()]

    if not result:
        raise ValueError("String list value must not be empty")
    return result


def clean_display_name(value: str) -> str:
    """Strip surrounding whitespace and reject blank or control-character names."""
    value = value.strip()
    if not value:
        raise ValueError("name must not be blank")
    if any(ord(c) < _SPACE_ORD or ord(c) == _DEL_ORD for c in value):
        raise ValueError("name must not contain control characters")
    return value


_STRING_LIST_FIELDS = {"cors_origins"}


class StringListEnvSettingsSource(EnvSettingsSource):
    """Env settings source that hands string-list fields to validators unparsed.

    pydantic-settings JSON-decodes list-typed env vars before validators run,
    which rejects the comma-separated form. This source skips that step for
    string-list fields so parse_string_list sees the raw value.
    """

    def prepare_field_value(
        self,
        field_name: str,
        field: FieldInfo,
        value: Any,  # noqa: ANN401
        value_is_complex: bool,  # noqa: FBT001
    ) -> Any:  # noqa: ANN401
        if field_name in _STRING_LIST_FIELDS and isinstance(value, str):
            return value
        return super().prepare_field_value(field_name, field, value, value_is_complex)
