"""
GraphQL documents used against the GitHub API.

All identifiers are passed as variables, never interpolated into the query text.
"""

from typing import Any, Dict, Optional

from app.integrations.github.models import BoardFields, PullRequestRef

ITERATION_VALUE_TYPE = "ProjectV2ItemFieldIterationValue"
SINGLE_SELECT_VALUE_TYPE = "ProjectV2ItemFieldSingleSelectValue"

PROJECT_FIELDS_QUERY = """
query($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    pullRequest(number: $number) {
      projectItems(first: 10) {
        nodes {
          fieldValues(first: 20) {
            nodes {
              __typename
              ... on ProjectV2ItemFieldIterationValue {
                title
                field {
                  ... on ProjectV2FieldCommon {
                    name
                  }
                }
              }
              ... on ProjectV2ItemFieldSingleSelectValue {
                name
                field {
                  ... on ProjectV2FieldCommon {
                    name
                  }
                }
              }
            }
          }
        }
      }
    }
  }
}
"""

PULL_REQUEST_BY_NODE_QUERY = """
query($nodeId: ID!) {
  node(id: $nodeId) {
    ... on PullRequest {
      number
      repository {
        owner {
          login
        }
        name
      }
    }
  }
}
"""

ENABLE_AUTO_MERGE_MUTATION = """
mutation($pullRequestId: ID!, $mergeMethod: PullRequestMergeMethod!, $expectedHeadOid: GitObjectID) {
  enablePullRequestAutoMerge(input: {
    pullRequestId: $pullRequestId
    mergeMethod: $mergeMethod
    expectedHeadOid: $expectedHeadOid
  }) {
    pullRequest {
      id
      number
      autoMergeRequest {
        enabledAt
        mergeMethod
      }
    }
  }
}
"""


def _field_name(value: Dict[str, Any]) -> Optional[str]:
    field = value.get("field") or {}
    return field.get("name")


def extract_board_fields(
    data: Dict[str, Any], week_field: str = "Week", status_field: str = "Status"
) -> BoardFields:
    """
    Pick the Week and Status values out of a PROJECT_FIELDS_QUERY response.

    The first iteration value named ``week_field`` and the first single-select
    value named ``status_field`` win, scanning board items in response order.
    A PR attached to several boards with conflicting values gets whichever
    comes first.

    Args:
        data: The ``data`` object of the GraphQL response

    Returns:
        BoardFields with None for any field that is not set
    """
    repository = (data or {}).get("repository") or {}
    pull_request = repository.get("pullRequest") or {}
    items = (pull_request.get("projectItems") or {}).get("nodes") or []

    week = None
    status = None
    for item in items:
        if not item:
            continue
        for value in (item.get("fieldValues") or {}).get("nodes") or []:
            if not value:
                continue
            typename = value.get("__typename")
            name = _field_name(value)
            if week is None and typename == ITERATION_VALUE_TYPE and name == week_field:
                week = value.get("title")
            elif (
                status is None
                and typename == SINGLE_SELECT_VALUE_TYPE
                and name == status_field
            ):
                status = value.get("name")

    return BoardFields(week=week, status=status)


def extract_pull_request_ref(data: Dict[str, Any]) -> Optional[PullRequestRef]:
    """Turn a PULL_REQUEST_BY_NODE_QUERY response into a PullRequestRef."""
    node = (data or {}).get("node") or {}
    number = node.get("number")
    repository = node.get("repository") or {}
    owner = (repository.get("owner") or {}).get("login")
    name = repository.get("name")
    if number is None or not owner or not name:
        return None
    return PullRequestRef(owner=owner, repo=name, number=int(number))
