"""
Utility package exports
"""

from app.utils.helpers import validate_repo_identifier, parse_number_array, strip_mention, count_lines

__all__ = ["validate_repo_identifier", "parse_number_array", "strip_mention", "count_lines"]
