"""
AI Code Review

Posts an LLM-written review (or an answer to a member's question) on a PR
when the bot is mentioned in the PR conversation.
"""

import logging
from typing import Any, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from app.ai_core.prompts.review import create_review_prompt, select_system_prompt
from app.config import Settings
from app.integrations.github.client import GitHubClient
from app.utils.helpers import count_lines

logger = logging.getLogger(__name__)

REVIEW_HEADER = "## 🤖 AI Code Review"
FALLBACK_REVIEW = "Failed to generate review"


class ReviewGenerationError(Exception):
    """
    Raised when the LLM call fails.
    This is a system error (500) - surfaced as "AI review failed".
    """

    pass


class PRReviewer:
    """Generates and posts AI reviews for pull requests."""

    def __init__(self, client: GitHubClient, settings: Settings, llm: Optional[Any] = None):
        """
        Args:
            client: GitHub client for the installation
            settings: Application settings (model, temperature, limits)
            llm: Optional chat model; a ChatOpenAI is built when omitted
        """
        self.client = client
        self.settings = settings
        self.llm = llm or ChatOpenAI(
            model=settings.openai_model,
            api_key=settings.openai_api_key,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )

    async def generate_review(
        self, title: str, description: Optional[str], diff: str, question: Optional[str] = None
    ) -> str:
        messages = [
            SystemMessage(content=select_system_prompt(question)),
            HumanMessage(content=create_review_prompt(title, description, diff, question)),
        ]
        try:
            response = await self.llm.ainvoke(messages)
        except Exception as e:
            raise ReviewGenerationError(f"LLM request failed: {e}") from e

        content = (getattr(response, "content", "") or "").strip()
        return content or FALLBACK_REVIEW

    async def review(
        self,
        owner: str,
        repo: str,
        number: int,
        title: str,
        description: Optional[str],
        question: Optional[str] = None,
    ) -> bool:
        """
        Review the PR and post the result as an issue comment.

        Returns:
            True if a review was posted, False if the diff was too large
        """
        logger.info(f"Starting AI review for PR #{number}")

        diff = await self.client.get_pull_request_diff(owner, repo, number)
        diff_lines = count_lines(diff)
        if diff_lines > self.settings.review_max_diff_lines:
            logger.info(f"Skipping AI review: diff too large ({diff_lines} lines)")
            return False

        content = await self.generate_review(title, description, diff, question)
        await self.client.create_issue_comment(
            owner, repo, number, f"{REVIEW_HEADER}\n\n{content}"
        )

        logger.info(f"AI review posted for PR #{number}")
        return True
