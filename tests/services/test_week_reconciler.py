"""
Unit Tests for WeekReconciler

Tests the warn/clear state machine against the in-memory client.
"""

import pytest

from app.services.week_reconciler import (
    WARNING_COMMENT_BODY,
    WARNING_MARKER,
    ReconcileAction,
    WeekReconciler,
    decide_reconcile_action,
)

OWNER, REPO = "DaleStudy", "leetcode-study"


def _warnings(fake_client, number):
    return [c for c in fake_client.comments[number] if WARNING_MARKER in c.body]


def test_decide_reconcile_action_table():
    """Test the four (week, has_warning) combinations."""
    assert decide_reconcile_action(None, False) == ReconcileAction.CREATE_WARNING
    assert decide_reconcile_action("", False) == ReconcileAction.CREATE_WARNING
    assert decide_reconcile_action(None, True) == ReconcileAction.NOOP
    assert decide_reconcile_action("Week 3", True) == ReconcileAction.DELETE_WARNING
    assert decide_reconcile_action("Week 3", False) == ReconcileAction.NOOP


def test_is_warning_comment_requires_bot_author(fake_client, scope):
    """A human quoting the warning text is not a warning comment."""
    reconciler = WeekReconciler(fake_client, scope)
    fake_client.add_pr(1)

    human = fake_client.add_comment(1, WARNING_COMMENT_BODY, author_login="alice", author_type="User")
    other_bot = fake_client.add_comment(1, WARNING_COMMENT_BODY, author_login="other[bot]")
    ours = fake_client.add_comment(1, WARNING_COMMENT_BODY)

    assert not reconciler.is_warning_comment(human)
    assert not reconciler.is_warning_comment(other_bot)
    assert reconciler.is_warning_comment(ours)


async def test_reconcile_creates_warning_when_week_missing(fake_client, scope):
    """Test a PR without Week gets exactly one warning."""
    fake_client.add_pr(1970)
    reconciler = WeekReconciler(fake_client, scope)

    outcome = await reconciler.reconcile(OWNER, REPO, 1970)

    assert outcome.week is None
    assert outcome.commented is True
    assert outcome.deleted is False
    assert len(_warnings(fake_client, 1970)) == 1


async def test_reconcile_deletes_warning_when_week_set(fake_client, scope):
    """Test the warning is removed once Week is set."""
    fake_client.add_pr(1969, week="Week 5")
    warning = fake_client.add_comment(1969, WARNING_COMMENT_BODY)
    reconciler = WeekReconciler(fake_client, scope)

    outcome = await reconciler.reconcile(OWNER, REPO, 1969)

    assert outcome.week == "Week 5"
    assert outcome.deleted is True
    assert fake_client.deleted_comments == [(1969, warning.id)]
    assert _warnings(fake_client, 1969) == []


async def test_reconcile_is_idempotent(fake_client, scope):
    """Test running reconcile twice makes no further changes."""
    fake_client.add_pr(1, week=None)
    fake_client.add_pr(2, week="Week 2")
    fake_client.add_comment(2, WARNING_COMMENT_BODY)
    reconciler = WeekReconciler(fake_client, scope)

    for number in (1, 2):
        await reconciler.reconcile(OWNER, REPO, number)
    writes = (len(fake_client.created_comments), len(fake_client.deleted_comments))

    for number in (1, 2):
        outcome = await reconciler.reconcile(OWNER, REPO, number)
        assert outcome.commented is False
        assert outcome.deleted is False

    assert (len(fake_client.created_comments), len(fake_client.deleted_comments)) == writes


async def test_reconcile_keeps_warning_iff_week_unset(fake_client, scope):
    """Test the warning tracks Week across set/unset transitions."""
    fake_client.add_pr(7)
    reconciler = WeekReconciler(fake_client, scope)

    for week in [None, "Week 1", None, None, "Week 2(current)", "Week 2(current)"]:
        fake_client.fields[7].week = week
        await reconciler.reconcile(OWNER, REPO, 7)
        assert (len(_warnings(fake_client, 7)) == 1) == (week is None)


async def test_ensure_warning_skips_existing(fake_client, scope):
    """Test ensure_warning does not post a duplicate."""
    fake_client.add_pr(3)
    reconciler = WeekReconciler(fake_client, scope)

    assert await reconciler.ensure_warning(OWNER, REPO, 3) is True
    assert await reconciler.ensure_warning(OWNER, REPO, 3) is False
    assert len(fake_client.created_comments) == 1


async def test_remove_warning_deletes_first_match_only(fake_client, scope):
    """Test remove_warning leaves human comments alone."""
    fake_client.add_pr(4)
    human = fake_client.add_comment(4, "LGTM", author_login="bob", author_type="User")
    first = fake_client.add_comment(4, WARNING_COMMENT_BODY)
    fake_client.add_comment(4, WARNING_COMMENT_BODY)
    reconciler = WeekReconciler(fake_client, scope)

    assert await reconciler.remove_warning(OWNER, REPO, 4) is True
    assert fake_client.deleted_comments == [(4, first.id)]
    assert human in fake_client.comments[4]


async def test_remove_warning_without_warning(fake_client, scope):
    fake_client.add_pr(5)
    reconciler = WeekReconciler(fake_client, scope)

    assert await reconciler.remove_warning(OWNER, REPO, 5) is False
    assert fake_client.deleted_comments == []


async def test_reconcile_shares_warning_primitives(fake_client, scope, monkeypatch):
    """Test reconcile posts the same comment as ensure_warning and lists comments once."""
    fake_client.add_pr(8)
    fake_client.add_pr(9)
    reconciler = WeekReconciler(fake_client, scope)

    listings = []
    list_comments = fake_client.list_issue_comments

    async def counting_list(owner, repo, number):
        listings.append(number)
        return await list_comments(owner, repo, number)

    monkeypatch.setattr(fake_client, "list_issue_comments", counting_list)

    await reconciler.ensure_warning(OWNER, REPO, 8)
    outcome = await reconciler.reconcile(OWNER, REPO, 9)

    assert outcome.commented is True
    assert fake_client.created_comments == [(8, WARNING_COMMENT_BODY), (9, WARNING_COMMENT_BODY)]
    assert listings == [8, 9]

    fake_client.fields[9] = fake_client.fields[9].model_copy(update={"week": "Week 4"})
    warning = _warnings(fake_client, 9)[0]
    outcome = await reconciler.reconcile(OWNER, REPO, 9)

    assert outcome.deleted is True
    assert fake_client.deleted_comments == [(9, warning.id)]
    assert listings == [8, 9, 9]
