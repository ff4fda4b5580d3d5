"""
GitHub App Authentication

Exchanges the App's private key for a short-lived installation access token:
1. Sign an RS256 JWT identifying the App (valid for 10 minutes)
2. Find the installation belonging to the allowed organization
3. Request an installation access token for it

Tokens are not cached; each request authenticates again.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

import jwt
import requests
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

logger = logging.getLogger(__name__)

PKCS1_MARKER = "BEGIN RSA PRIVATE KEY"
PKCS8_MARKER = "BEGIN PRIVATE KEY"

JWT_BACKDATE_SECONDS = 60  # Tolerate clock drift with GitHub
JWT_LIFETIME_SECONDS = 10 * 60  # GitHub's maximum


class AuthError(Exception):
    """
    Raised when the App cannot authenticate.
    Covers unreadable keys, a missing installation and a failed token exchange.
    """

    pass


def detect_key_format(pem: str) -> str:
    """Return "pkcs1" or "pkcs8" based on the PEM header marker."""
    if PKCS8_MARKER in pem:
        return "pkcs8"
    if PKCS1_MARKER in pem:
        return "pkcs1"
    raise AuthError("Unsupported private key format: expected a PKCS#1 or PKCS#8 PEM")


def load_private_key(pem: str) -> RSAPrivateKey:
    """
    Load an RSA private key from PEM text.

    Keys stored in environment variables often carry literal "\\n" sequences
    instead of line breaks; those are normalised first.
    """
    if not pem or not pem.strip():
        raise AuthError("GitHub App private key is not configured")

    normalized = pem.strip().replace("\\n", "\n")
    key_format = detect_key_format(normalized)

    try:
        key = serialization.load_pem_private_key(normalized.encode("utf-8"), password=None)
    except (ValueError, TypeError) as e:
        raise AuthError(f"Invalid {key_format} private key: {e}") from e

    if not isinstance(key, RSAPrivateKey):
        raise AuthError("GitHub App private key must be an RSA key")

    logger.debug(f"Loaded {key_format} GitHub App private key")
    return key


class GitHubAppAuth:
    """Credential provider for one GitHub App installation."""

    def __init__(
        self,
        app_id: str,
        private_key: str,
        org: str,
        api_url: str = "https://api.github.com",
        user_agent: str = "DaleStudy-GitHub-App",
        timeout: float = 30.0,
    ):
        self.app_id = app_id
        self.private_key = private_key
        self.org = org
        self.api_url = api_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout

    def create_app_jwt(self, now: Optional[int] = None) -> str:
        """
        Build the signed App assertion.

        Args:
            now: Unix timestamp to issue the token at (defaults to current time)

        Returns:
            Encoded RS256 JWT
        """
        if not self.app_id:
            raise AuthError("GitHub App ID is not configured")

        issued = int(time.time()) if now is None else now
        claims = {
            "iat": issued - JWT_BACKDATE_SECONDS,
            "exp": issued + JWT_LIFETIME_SECONDS,
            "iss": str(self.app_id),
        }
        key = load_private_key(self.private_key)
        return jwt.encode(claims, key, algorithm="RS256")

    def _headers(self, bearer: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {bearer}",
            "Accept": "application/vnd.github+json",
            "User-Agent": self.user_agent,
        }

    def _request_json(self, method: str, path: str, app_jwt: str) -> Any:
        try:
            response = requests.request(
                method,
                f"{self.api_url}{path}",
                headers=self._headers(app_jwt),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthError(f"GitHub App authentication request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            message = data.get("message") if isinstance(data, dict) else None
            raise AuthError(
                f"GitHub App authentication failed: {response.status_code} "
                f"{message or response.reason}"
            )
        return data

    def _find_installation(self, installations: List[Dict[str, Any]]) -> Dict[str, Any]:
        for installation in installations or []:
            account = installation.get("account") or {}
            if account.get("login") == self.org:
                return installation
        raise AuthError(f"{self.org} installation not found")

    def fetch_installation_token(self) -> str:
        """Blocking token exchange; see obtain_token."""
        app_jwt = self.create_app_jwt()

        installations = self._request_json("GET", "/app/installations?per_page=100", app_jwt)
        installation = self._find_installation(installations)

        token_data = self._request_json(
            "POST", f"/app/installations/{installation['id']}/access_tokens", app_jwt
        )
        token = token_data.get("token") if isinstance(token_data, dict) else None
        if not token:
            raise AuthError(f"Failed to get token: {token_data}")

        logger.info(f"Obtained installation token for {self.org}")
        return token

    async def obtain_token(self) -> str:
        """
        Obtain an installation access token for the allowed organization.

        Returns:
            Bearer token scoped to the installation

        Raises:
            AuthError: If the key is unusable, the installation is missing,
                or the exchange response has no token
        """
        return await asyncio.to_thread(self.fetch_installation_token)
