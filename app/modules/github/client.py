import logging
from typing import Optional

import httpx

from app.core.errors import RepositoryLookupError

logger = logging.getLogger(__name__)


class GitHubClient:
    """Read-only lookup of public repository metadata."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_base: str = "https://api.github.com",
        repo_id_override: Optional[str] = None,
    ):
        self.http = http_client
        self.api_base = api_base.rstrip("/")
        self.repo_id_override = repo_id_override

    async def get_repo_id(self, repo_path: str) -> str:
        """Numeric repository id as a string, used by Vercel's repoId git source."""
        if self.repo_id_override:
            logger.info(f"Using configured GitHub repo ID {self.repo_id_override}")
            return self.repo_id_override

        try:
            response = await self.http.get(
                f"{self.api_base}/repos/{repo_path}",
                headers={
                    "Accept": "application/vnd.github.v3+json",
                    "User-Agent": "Vercel-Integration-Server",
                },
            )
            response.raise_for_status()
            repo_id = str(response.json()["id"])
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.error(f"Failed to get GitHub repo ID for {repo_path}: {e}")
            raise RepositoryLookupError(f"Failed to get GitHub repository ID for {repo_path}") from e

        logger.info(f"GitHub repo ID for {repo_path}: {repo_id}")
        return repo_id
