"""
Unit Tests for Utility Functions

Tests shared helper functions.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import pytest

from app.utils.helpers import (
    count_lines,
    parse_number_array,
    strip_mention,
    validate_repo_identifier,
)


def test_validate_repo_identifier_accepts_github_names():
    """Test typical owner and repository names pass through."""
    assert validate_repo_identifier("DaleStudy") == "DaleStudy"
    assert validate_repo_identifier("leetcode-study") == "leetcode-study"
    assert validate_repo_identifier("my_repo.v2") == "my_repo.v2"


@pytest.mark.parametrize("value", ["", "a/b", "../etc", "name with space", "x" * 101, None])
def test_validate_repo_identifier_rejects(value):
    with pytest.raises(ValueError):
        validate_repo_identifier(value)


def test_parse_number_array_not_a_list():
    """Test non-list input yields None."""
    assert parse_number_array(None) is None
    assert parse_number_array("1,2") is None
    assert parse_number_array(5) is None


def test_parse_number_array_mixed():
    """Test numeric strings, duplicates and junk entries."""
    assert parse_number_array([1, "2", 2, "x", None, True, " 3 "]) == [1, 2, 3]
    assert parse_number_array([]) == []


def test_strip_mention_case_insensitive():
    assert strip_mention("@DaleStudy  explain this", "@dalestudy") == "explain this"
    assert strip_mention("@dalestudy", "@dalestudy") == ""
    assert strip_mention("", "@dalestudy") == ""


def test_count_lines():
    assert count_lines("") == 0
    assert count_lines("a") == 1
    assert count_lines("a\nb\nc") == 3
