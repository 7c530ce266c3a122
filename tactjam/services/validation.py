# tactjam/services/validation.py
"""
Field-level checks shared by the services.
"""
import re
from typing import Any, Iterable, List, Mapping

from tactjam.core.config import settings
from tactjam.core.exceptions import ValidationError

# ASCII letters and digits plus space and hyphen
LABEL_PATTERN = re.compile(r"^[A-Za-z0-9 -]+$")


def clean_label(value: Any, field_name: str, min_length: int, max_length: int) -> str:
    """Trim and check a title or name; raises ValidationError."""
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {field_name}")
    cleaned = value.strip()
    if not (min_length <= len(cleaned) <= max_length) or not LABEL_PATTERN.match(cleaned):
        raise ValidationError(f"Invalid {field_name}")
    return cleaned


def clean_title(value: Any) -> str:
    return clean_label(value, "title", settings.tactons.title_min_length, settings.tactons.title_max_length)


def clean_name(value: Any) -> str:
    """Tag and body-tag names are case-folded so lookups are case-insensitive."""
    return clean_label(value, "name", settings.tactons.name_min_length, settings.tactons.name_max_length).casefold()


def names_from_entries(entries: Any, field_name: str) -> List[str]:
    """[{"name": "fun"}, ...] -> ["fun", ...]; the request shape for tag lists."""
    if not isinstance(entries, list):
        raise ValidationError(f"{field_name} must be an array")
    names = []
    for entry in entries:
        if not isinstance(entry, Mapping) or entry.get("name") is None:
            raise ValidationError(f"Every entry in {field_name} needs a name")
        names.append(entry["name"])
    return names


def unique_in_order(values: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result
