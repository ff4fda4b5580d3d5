"""
Mergeability polling.

GitHub computes ``mergeable`` asynchronously after a push or base change, so a
fresh read can say "unknown" for a few seconds. Those states are retried; a
definite conflict is not.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple

from app.integrations.github.client import GitHubClient
from app.integrations.github.models import PullRequestInfo

logger = logging.getLogger(__name__)

RETRYABLE_STATES = {"unknown", "behind"}


@dataclass
class MergeabilityCheck:
    """One observation of a PR's mergeability."""

    mergeable: bool
    reason: Optional[str] = None
    retryable: bool = False
    sha: Optional[str] = None  # head sha at the time of a clean check


def evaluate_mergeability(pr: PullRequestInfo) -> MergeabilityCheck:
    """
    Classify a PR's mergeable/mergeable_state pair.

    - mergeable is None → "mergeability unknown", retryable
    - mergeable is False → "not mergeable", terminal
    - mergeable but state is not "clean" → the state as reason, retryable only
      for "unknown" and "behind"
    - mergeable and clean → mergeable, with the head sha captured
    """
    if pr.mergeable is None:
        return MergeabilityCheck(mergeable=False, reason="mergeability unknown", retryable=True)

    if pr.mergeable is False:
        return MergeabilityCheck(mergeable=False, reason="not mergeable", retryable=False)

    state = pr.mergeable_state or "unknown"
    if state != "clean":
        return MergeabilityCheck(
            mergeable=False, reason=state, retryable=state in RETRYABLE_STATES
        )

    return MergeabilityCheck(mergeable=True, sha=pr.head_sha)


async def wait_for_mergeability(
    client: GitHubClient,
    owner: str,
    repo: str,
    number: int,
    max_retries: int = 3,
    delay: float = 2.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Tuple[MergeabilityCheck, int]:
    """
    Poll a PR until it is cleanly mergeable, terminally unmergeable, or the
    retry budget runs out.

    Args:
        max_retries: Extra polls after the first read
        delay: Seconds to wait before each extra poll

    Returns:
        (last check, number of retries performed)
    """
    check = evaluate_mergeability(await client.get_pull_request(owner, repo, number))
    retries = 0

    while not check.mergeable and check.retryable and retries < max_retries:
        logger.info(
            f"PR #{number} not yet mergeable ({check.reason}), "
            f"retrying in {delay}s ({retries + 1}/{max_retries})"
        )
        await sleep(delay)
        check = evaluate_mergeability(await client.get_pull_request(owner, repo, number))
        retries += 1

    return check, retries
