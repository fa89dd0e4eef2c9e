"""Async HTTP client for the GitHub REST API (releases, assets, contents)."""

from typing import Optional
from urllib.parse import quote

import httpx

from common.logging_config import get_logger
from server import config
from server.exceptions import ConfigurationError

logger = get_logger(__name__)


class GitHubClient:
    """
    Thin httpx wrapper holding the credentials and repository coordinates.
    Handles connection management; callers interpret status codes.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        owner: Optional[str] = None,
        repo: Optional[str] = None,
        branch: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize client with lazy connection."""
        self.token = token if token is not None else config.GITHUB_TOKEN
        self.owner = owner if owner is not None else config.GITHUB_OWNER
        self.repo = repo if repo is not None else config.GITHUB_REPO
        self.branch = branch or config.GITHUB_BRANCH
        self.api_url = (api_url or config.GITHUB_API_URL).rstrip('/')
        self.timeout = timeout if timeout is not None else config.GITHUB_TIMEOUT_SECONDS
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def check_configured(self) -> None:
        """
        Raises:
            ConfigurationError: If token, owner or repo is missing
        """
        missing = [
            name for name, value in (
                ("GITHUB_TOKEN", self.token),
                ("GITHUB_OWNER", self.owner),
                ("GITHUB_REPO", self.repo),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"{', '.join(missing)} not configured")

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={
                    "Authorization": f"token {self.token}",
                    "Accept": "application/vnd.github+json",
                    "User-Agent": config.GITHUB_USER_AGENT,
                },
            )
            logger.info(f"Opened GitHub client for {self.owner}/{self.repo} [api={self.api_url}]")
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def repo_path(self, suffix: str) -> str:
        """Build ``/repos/{owner}/{repo}{suffix}``."""
        return f"/repos/{self.owner}/{self.repo}{suffix}"

    def contents_path(self, path_in_repo: str) -> str:
        return self.repo_path(f"/contents/{quote(path_in_repo)}")

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Send a request to the API, or to an absolute URL such as an asset upload URL.

        Raises:
            ConfigurationError: If credentials are missing
            httpx.HTTPError: On transport failures and timeouts
        """
        self.check_configured()
        client = self._ensure_client()
        response = await client.request(method, url, **kwargs)
        logger.debug(f"GitHub {method} {url.split('?')[0]} -> {response.status_code}")
        return response
