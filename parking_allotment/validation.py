"""
Normalization and validation of vehicle entry input.
"""

import re

PLATE_RE = re.compile(r"^[A-Z]{2}\s?\d{2}\s?[A-Z]{1,2}\s?\d{3,4}$")


def normalize_plate(plate: str) -> str:
    """Trim, upper-case and collapse internal whitespace"""
    if not isinstance(plate, str):
        return ""
    return " ".join(plate.split()).upper()


def is_valid_plate(plate: str) -> bool:
    """Registration numbers like ``TN 38 AB 1234``"""
    return bool(PLATE_RE.fullmatch(normalize_plate(plate)))


def normalize_owner(name: str) -> str:
    """Trim and capitalize each word"""
    if not isinstance(name, str):
        return ""
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), name.strip())


def is_valid_owner(name: str) -> bool:
    return len(normalize_owner(name)) >= 2
