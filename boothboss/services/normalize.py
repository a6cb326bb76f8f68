"""Normalization between stored settings values and what clients see.

Database drivers hand booleans back as ``bool``, ``0``/``1`` or strings
depending on the backend and on how the row was written. Everything on the
allow-list below is collapsed into a real ``bool`` before it reaches a
client, and into ``0``/``1`` where a raw integer is needed.
"""

import json
import logging
import time
from collections.abc import Mapping
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

SMTP_PASSWORD_MASK = "********"

_BOOLEAN_FIELD_NAMES = (
    "custom_journey_enabled",
    "splash_page_enabled",
    "printer_enabled",
    "filters_enabled",
    "ai_image_correction",
    "show_booth_boss_logo",
    "blob_vercel_enabled",
    "is_default",
)


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


# snake_case (ORM/storage) and camelCase (wire) spellings
BOOLEAN_FIELDS: frozenset[str] = frozenset(
    _BOOLEAN_FIELD_NAMES + tuple(_to_camel(n) for n in _BOOLEAN_FIELD_NAMES)
)


def ensure_boolean(value: Any) -> bool:
    """Collapse a boolean-like value into a real ``bool``.

    ``True``, ``"true"``, ``"1"`` and non-zero numbers are true. Everything
    else, including ``None`` and unrecognised strings, is false.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1")
    return False


def boolean_to_db(value: Any) -> int:
    """Inverse of :func:`ensure_boolean` for integer-backed columns."""
    return 1 if ensure_boolean(value) else 0


def normalize_boolean_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with allow-listed fields coerced to ``bool``.

    Fields not on the allow-list pass through unchanged.
    """
    result = dict(data)
    for field in BOOLEAN_FIELDS.intersection(result):
        result[field] = ensure_boolean(result[field])
    return result


def safe_parse_json(value: Any, default: T) -> T:
    """Parse JSON defensively, returning ``default`` instead of raising.

    Already-decoded values are returned as-is when their shape matches
    ``default`` (dict for dict, list for list).
    """
    if value is None or value == "":
        return default
    if isinstance(value, dict):
        return value if default is None or isinstance(default, dict) else default  # type: ignore[return-value]
    if isinstance(value, list):
        return value if default is None or isinstance(default, list) else default  # type: ignore[return-value]
    if isinstance(value, bytes | bytearray):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            logger.warning("Could not parse JSON value: %.50s", value)
            return default
        if default is not None and not isinstance(parsed, type(default)):
            return default
        return parsed  # type: ignore[no-any-return]
    return default


def parse_journey_pages(value: Any) -> list[dict[str, Any]]:
    """Decode the stored journey config into a list of page dicts."""
    if isinstance(value, list):
        return [page for page in value if isinstance(page, dict)]
    if isinstance(value, dict):
        return [value]
    if isinstance(value, str):
        parsed: Any = safe_parse_json(value, None)
        if isinstance(parsed, dict):
            return [parsed]
        if isinstance(parsed, list):
            return [page for page in parsed if isinstance(page, dict)]
    return []


def parse_filter_list(value: Any) -> list[str]:
    """Decode ``enabled_filters``: a JSON list or a comma-separated string."""
    if isinstance(value, list):
        return [str(item) for item in value]
    if not isinstance(value, str) or not value.strip():
        return []
    stripped = value.strip()
    if stripped.startswith("["):
        parsed = safe_parse_json(stripped, [])
        return [str(item) for item in parsed]
    return [item.strip() for item in stripped.split(",") if item.strip()]


def process_settings_for_client(
    settings: Any,
    cache_version: int | None = None,
) -> dict[str, Any] | None:
    """Shape a settings row (ORM object or mapping) for a client response.

    Booleans are normalized, JSON list fields are decoded, the SMTP password
    is masked and a ``cache_version`` is attached.
    """
    if settings is None:
        return None

    raw = dict(settings) if isinstance(settings, Mapping) else settings.to_dict()
    result = normalize_boolean_fields(raw)

    result["journey_pages"] = parse_journey_pages(raw.get("journey_config"))
    result["enabled_filters"] = parse_filter_list(raw.get("enabled_filters"))
    result["smtp_password"] = SMTP_PASSWORD_MASK if raw.get("smtp_password") else ""
    result["cache_version"] = (
        cache_version if cache_version is not None else int(time.time() * 1000)
    )
    return result


def process_settings_for_storage(data: Mapping[str, Any]) -> dict[str, Any]:
    """Shape client input for an ORM write.

    The inverse of :func:`process_settings_for_client`: booleans normalized,
    list fields serialized, the masked password placeholder dropped.
    """
    result = normalize_boolean_fields(data)

    if "journey_pages" in result:
        result["journey_config"] = result.pop("journey_pages")

    filters = result.get("enabled_filters")
    if isinstance(filters, list | tuple):
        result["enabled_filters"] = json.dumps([str(f) for f in filters])

    if result.get("smtp_password") == SMTP_PASSWORD_MASK:
        del result["smtp_password"]

    for key in ("id", "user_id", "created_at", "updated_at", "cache_version"):
        result.pop(key, None)

    return result
