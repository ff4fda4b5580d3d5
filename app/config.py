from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "DaleStudy GitHub App"
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 8000

    # GitHub App
    github_app_id: str = ""
    github_private_key: str = ""
    github_private_key_path: str = ""
    github_api_url: str = "https://api.github.com"
    github_user_agent: str = "DaleStudy-GitHub-App"
    webhook_secret: str = ""

    # Organization / repository scope
    allowed_org: str = "DaleStudy"
    allowed_repo: str = "leetcode-study"
    maintenance_label: str = "maintenance"
    bot_login: str = ""  # e.g. "dalestudy[bot]"; empty accepts any Bot author

    # Timing
    pr_opened_delay_seconds: float = 3.0  # Board attachment lags PR creation
    merge_max_retries: int = 3
    merge_retry_delay_seconds: float = 2.0
    merge_use_auto_merge: bool = False  # Defer to the merge queue instead of merging

    # OpenAI (AI review on @mention)
    openai_api_key: str = ""
    openai_model: str = "gpt-4.1-nano"
    temperature: float = 0.7
    max_tokens: int = 2000
    review_mention: str = "@dalestudy"
    review_max_diff_lines: int = 1000

    model_config = ConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    def resolve_private_key(self) -> str:
        """Return the App private key PEM from the env value or key file."""
        if self.github_private_key:
            return self.github_private_key
        if self.github_private_key_path:
            return Path(self.github_private_key_path).read_text()
        return ""


@dataclass(frozen=True)
class StudyScope:
    """Immutable organization/repository/board scope shared by services."""

    org: str = "DaleStudy"
    repo: str = "leetcode-study"
    maintenance_label: str = "maintenance"
    bot_login: str = ""
    week_field: str = "Week"
    status_field: str = "Status"
    solving_status: str = "Solving"

    @classmethod
    def from_settings(cls, settings: Settings) -> "StudyScope":
        return cls(
            org=settings.allowed_org,
            repo=settings.allowed_repo,
            maintenance_label=settings.maintenance_label,
            bot_login=settings.bot_login,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
