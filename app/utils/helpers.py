"""
Shared Utility Functions

Common helper functions used across multiple modules.
"""

import re
import logging
from typing import Any, List, Optional

logger = logging.getLogger(__name__)

REPO_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,100}$")


def validate_repo_identifier(value: str) -> str:
    """
    Validate a GitHub owner or repository name.

    Owner and repository names only ever contain alphanumerics, "-", "_" and
    "."; anything else is rejected before it reaches an API call.

    Args:
        value: Owner login or repository name

    Returns:
        The value unchanged

    Raises:
        ValueError: If the value is empty or contains other characters
    """
    if not isinstance(value, str) or not REPO_IDENTIFIER_PATTERN.match(value):
        raise ValueError(f"Invalid repository identifier: {value!r}")
    return value


def parse_number_array(value: Any) -> Optional[List[int]]:
    """
    Parse an ``excludes``-style list of PR numbers.

    Handles various formats:
    - Integers and numeric strings: [1, "2"] → [1, 2]
    - Duplicates are dropped, first occurrence wins: [3, 3, 1] → [3, 1]
    - Non-numeric entries are ignored: ["x", 4] → [4]
    - Anything that is not a list → None

    Args:
        value: Raw JSON value from the request body

    Returns:
        List of ints, or None when no list was supplied
    """
    if not isinstance(value, list):
        return None

    result: List[int] = []
    for item in value:
        if isinstance(item, bool):
            continue
        try:
            number = int(str(item).strip())
        except (TypeError, ValueError):
            continue
        if number not in result:
            result.append(number)
    return result


def strip_mention(text: str, mention: str) -> str:
    """Remove every (case-insensitive) occurrence of ``mention`` and trim."""
    if not text:
        return ""
    return re.sub(re.escape(mention), "", text, flags=re.IGNORECASE).strip()


def count_lines(text: str) -> int:
    if not text:
        return 0
    return len(text.split("\n"))
