"""
Prompts for AI Code Review

Two modes:
1. Full review - triggered by a bare mention on the PR conversation
2. Q&A - the mention comes with a question about the PR's code
"""

from textwrap import dedent
from typing import Optional

REVIEW_SYSTEM_PROMPT = dedent(
    """
    You are the AI coach of a LeetCode study group.
    Review the code changes below and give constructive feedback.

    **Focus on:**
    - If the solution has no time/space complexity note, ask for one. Something like "TC: O(n), SC: O(1)" is enough
    - Whether the stated time/space complexity is correct
    - Better approaches or algorithms, if any
    - Readability, style and best practices

    **Rules:**
    - Skip unnecessary nitpicks; only give feedback that matters
    - Encourage as well as correct, so the review helps the author learn
    - Omit points that do not apply and write naturally
    - Respond in Korean, in no more than 500 characters
    """
).strip()

QUESTION_SYSTEM_PROMPT = dedent(
    """
    You are the AI coach of a LeetCode study group.
    A member asked a specific question about the code in this pull request.
    Use the code changes as context and answer the question clearly and helpfully.
    Respond in Korean, in no more than 300 characters.
    """
).strip()

REVIEW_USER_PROMPT_TEMPLATE = dedent(
    """
    # PR Title
    {title}

    # PR Description
    {description}

    # Code Changes
    ```diff
    {diff}
    ```
    """
).strip()


def create_review_prompt(
    title: str, description: Optional[str], diff: str, question: Optional[str] = None
) -> str:
    """
    Build the user prompt for a review or a question about the PR.

    Args:
        title: PR title
        description: PR body (may be empty)
        diff: Unified diff of the PR
        question: The member's question; None requests a full review

    Returns:
        Formatted prompt for the LLM
    """
    prompt = REVIEW_USER_PROMPT_TEMPLATE.format(
        title=title or "",
        description=description or "No description provided",
        diff=diff,
    )
    if question:
        prompt += f"\n\n# Question\n{question}"
    else:
        prompt += "\n\nPlease review this pull request."
    return prompt


def select_system_prompt(question: Optional[str]) -> str:
    return QUESTION_SYSTEM_PROMPT if question else REVIEW_SYSTEM_PROMPT
