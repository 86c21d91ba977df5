"""Casing predicates and conversions for identifiers found in API descriptions.

Used by the naming rules in :mod:`specforge.validation` and by the split
engine to derive PascalCase group keys. All predicates return ``False`` for
empty or ``None`` input.
"""

from __future__ import annotations

import re
from typing import Optional

_SEPARATORS = ("-", "_", " ")
_WORD_SPLIT_RE = re.compile(r"[^0-9A-Za-z]+")


def is_camel_case(value: Optional[str]) -> bool:
    """Lowercase first letter, then letters and digits only (``getPetById``)."""
    if not value:
        return False
    if not value[0].islower():
        return False
    return all(c.isalnum() for c in value[1:])


def is_pascal_case(value: Optional[str]) -> bool:
    """Uppercase first letter, then letters and digits only (``PetStore``)."""
    if not value:
        return False
    if not value[0].isupper():
        return False
    return all(c.isalnum() for c in value[1:])


def _is_separated(value: Optional[str], separator: str, upper: bool) -> bool:
    if not value:
        return False
    first = value[0]
    if not (first.isupper() if upper else first.islower()):
        return False
    previous_was_separator = False
    for i, c in enumerate(value):
        if c == separator:
            if previous_was_separator or i == len(value) - 1:
                return False
            previous_was_separator = True
            continue
        previous_was_separator = False
        if c.isdigit():
            continue
        if upper and c.isupper():
            continue
        if not upper and c.islower():
            continue
        return False
    return True


def is_kebab_case(value: Optional[str]) -> bool:
    """Lowercase words joined by single hyphens (``pet-store``)."""
    return _is_separated(value, "-", upper=False)


def is_snake_case(value: Optional[str]) -> bool:
    return _is_separated(value, "_", upper=False)


def is_upper_snake_case(value: Optional[str]) -> bool:
    """Uppercase words joined by single underscores (``NOT_FOUND``)."""
    return _is_separated(value, "_", upper=True)


def is_valid_operation_id_casing(operation_id: Optional[str]) -> bool:
    return is_camel_case(operation_id) or is_kebab_case(operation_id)


def detect_casing_style(value: Optional[str]) -> str:
    """Return a human-readable name for the casing style of *value*."""
    if not value:
        return "empty"
    if is_camel_case(value):
        return "camelCase"
    if is_kebab_case(value):
        return "kebab-case"
    if is_pascal_case(value):
        return "PascalCase"
    if is_snake_case(value):
        return "snake_case"
    if is_upper_snake_case(value):
        return "UPPER_SNAKE_CASE"
    if "-" in value:
        return "mixed (contains hyphens)"
    if "_" in value:
        return "mixed (contains underscores)"
    return "mixed/unknown"


def suggest_camel_case(value: str) -> str:
    """Suggest a camelCase rewrite (``Get-Pet_by id`` -> ``getPetById``)."""
    if not value:
        return value
    if is_pascal_case(value):
        return value[0].lower() + value[1:]
    result: list[str] = []
    capitalize_next = False
    for i, c in enumerate(value):
        if c in _SEPARATORS:
            capitalize_next = True
            continue
        if i == 0:
            result.append(c.lower())
        elif capitalize_next:
            result.append(c.upper())
            capitalize_next = False
        else:
            result.append(c)
    return "".join(result)


def suggest_pascal_case(value: str) -> str:
    """Suggest a PascalCase rewrite (``pet_store`` -> ``PetStore``)."""
    if not value:
        return value
    if is_camel_case(value):
        return value[0].upper() + value[1:]
    result: list[str] = []
    capitalize_next = True
    for c in value:
        if c in _SEPARATORS:
            capitalize_next = True
            continue
        if capitalize_next:
            result.append(c.upper())
            capitalize_next = False
        else:
            result.append(c.lower())
    return "".join(result)


def suggest_kebab_case(value: str) -> str:
    """Suggest a kebab-case rewrite (``PetStore`` -> ``pet-store``)."""
    if not value:
        return value
    result: list[str] = []
    for c in value:
        if c in ("_", " "):
            if result and result[-1] != "-":
                result.append("-")
            continue
        if c.isupper() and result and result[-1] != "-":
            result.append("-")
        result.append(c.lower())
    return "".join(result)


def to_pascal_case(value: str) -> str:
    """Convert any identifier-ish string to PascalCase, keeping inner capitals.

    Non-alphanumeric characters act as word boundaries; the first letter of
    each word is upper-cased and the rest is left untouched.

    Example::

        >>> to_pascal_case("user-profiles")
        'UserProfiles'
        >>> to_pascal_case("orderItems")
        'OrderItems'
    """
    words = [w for w in _WORD_SPLIT_RE.split(value) if w]
    return "".join(w[0].upper() + w[1:] for w in words)
