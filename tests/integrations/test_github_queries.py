"""
Unit Tests for GraphQL response extraction
"""

from app.integrations.github.queries import extract_board_fields, extract_pull_request_ref


def _iteration(field, title):
    return {
        "__typename": "ProjectV2ItemFieldIterationValue",
        "title": title,
        "field": {"name": field},
    }


def _single_select(field, name):
    return {
        "__typename": "ProjectV2ItemFieldSingleSelectValue",
        "name": name,
        "field": {"name": field},
    }


def _response(*items):
    return {
        "repository": {
            "pullRequest": {
                "projectItems": {
                    "nodes": [{"fieldValues": {"nodes": list(values)}} for values in items]
                }
            }
        }
    }


def test_extract_board_fields_week_and_status():
    data = _response(
        [
            {"__typename": "ProjectV2ItemFieldTextValue", "text": "x", "field": {"name": "Notes"}},
            _iteration("Week", "Week 8(current)"),
            _single_select("Status", "Solving"),
        ]
    )

    fields = extract_board_fields(data)

    assert fields.week == "Week 8(current)"
    assert fields.status == "Solving"


def test_extract_board_fields_first_match_wins():
    """Test conflicting values across boards resolve to the first item."""
    data = _response(
        [_iteration("Week", "Week 3")],
        [_iteration("Week", "Week 4"), _single_select("Status", "Done")],
    )

    fields = extract_board_fields(data)

    assert fields.week == "Week 3"
    assert fields.status == "Done"


def test_extract_board_fields_ignores_same_name_wrong_type():
    data = _response([_single_select("Week", "Week 1")])
    assert extract_board_fields(data).week is None


def test_extract_board_fields_not_on_board():
    """Test a PR with no project items yields unset fields."""
    assert extract_board_fields(_response()).week is None
    assert extract_board_fields({"repository": {"pullRequest": None}}).status is None
    assert extract_board_fields({}).week is None


def test_extract_board_fields_custom_names():
    data = _response([_iteration("Sprint", "Sprint 2"), _single_select("State", "Review")])

    fields = extract_board_fields(data, week_field="Sprint", status_field="State")

    assert fields.week == "Sprint 2"
    assert fields.status == "Review"


def test_extract_pull_request_ref():
    data = {
        "node": {
            "number": 1970,
            "repository": {"owner": {"login": "DaleStudy"}, "name": "leetcode-study"},
        }
    }

    ref = extract_pull_request_ref(data)

    assert (ref.owner, ref.repo, ref.number) == ("DaleStudy", "leetcode-study", 1970)


def test_extract_pull_request_ref_non_pr_node():
    assert extract_pull_request_ref({"node": {}}) is None
    assert extract_pull_request_ref({"node": None}) is None
