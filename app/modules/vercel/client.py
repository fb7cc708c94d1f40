import asyncio
import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from app.core.errors import (
    EnvironmentVariableConflictError,
    EnvironmentVariableError,
    NoProjectsError,
    PlatformAPIError,
    UpstreamError,
    UpstreamErrorKind,
    parse_upstream_error,
)
from app.modules.github.client import GitHubClient
from app.modules.vercel.schemas import (
    Deployment,
    DeploymentResult,
    IntegrationConfiguration,
    OAuthToken,
    Project,
)

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.vercel.com"
ENV_TARGETS = ["production", "preview", "development"]
GITHUB_URL_PREFIX = "https://github.com/"
MAX_DISTINCT_ERROR_MESSAGES = 3

ModelT = TypeVar("ModelT", bound=BaseModel)


def _invalid_response(message: str, status_code: Optional[int] = None) -> PlatformAPIError:
    return PlatformAPIError(UpstreamError(
        kind=UpstreamErrorKind.UPSTREAM,
        message=f"Invalid response from Vercel API: {message}",
        status_code=status_code,
    ))


async def exchange_oauth_code(
    http_client: httpx.AsyncClient,
    code: str,
    *,
    client_id: str,
    client_secret: str,
    redirect_uri: str,
    api_base: str = DEFAULT_API_BASE,
) -> OAuthToken:
    """Exchange an OAuth authorization code for an access token."""
    logger.info("Vercel OAuth: exchanging authorization code")
    response = await http_client.post(
        f"{api_base}/v2/oauth/access_token",
        data={
            "client_id": client_id,
            "client_secret": client_secret,
            "code": code,
            "redirect_uri": redirect_uri,
        },
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    logger.info(f"Vercel OAuth response: {response.status_code}")
    response.raise_for_status()
    return OAuthToken(**response.json())


def normalize_repo_path(repo: str) -> str:
    """Accept either owner/repo or a full https://github.com/owner/repo URL."""
    if repo.startswith(GITHUB_URL_PREFIX):
        repo = repo[len(GITHUB_URL_PREFIX):]
    return repo.rstrip("/")


class VercelClient:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        access_token: str,
        team_id: Optional[str] = None,
        api_base: str = DEFAULT_API_BASE,
    ):
        self.http = http_client
        self.api_base = api_base.rstrip("/")
        self.team_id = team_id
        self._headers = {"Authorization": f"Bearer {access_token}"}

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        params = {"teamId": self.team_id} if self.team_id else None
        logger.debug(f"Vercel API request: {method} {path}")
        response = await self.http.request(
            method,
            f"{self.api_base}{path}",
            headers=self._headers,
            params=params,
            json=json,
        )
        logger.debug(f"Vercel API response: {response.status_code} {method} {path}")
        if response.is_error:
            logger.warning(f"Vercel API error: {response.status_code} {method} {path}")
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            raise _invalid_response(f"{method} {path} returned a non-JSON body", response.status_code) from e

    @staticmethod
    def _parse(model: Type[ModelT], data: Any, source: str) -> ModelT:
        try:
            return model(**data)
        except (TypeError, ValidationError) as e:
            raise _invalid_response(f"{source} returned an unexpected {model.__name__} payload") from e

    async def get_integration_configuration(self, configuration_id: str) -> IntegrationConfiguration:
        """Integration configuration, including the projects the user selected."""
        data = await self._request("GET", f"/v1/integrations/configuration/{configuration_id}")
        return self._parse(IntegrationConfiguration, data, "configuration lookup")

    async def get_projects(self) -> List[Project]:
        data = await self._request("GET", "/v9/projects")
        projects = data.get("projects", []) if isinstance(data, dict) else None
        if not isinstance(projects, list):
            raise _invalid_response("project listing returned an unexpected payload")
        return [self._parse(Project, project, "project listing") for project in projects]

    async def get_deployment(self, deployment_id: str) -> Deployment:
        data = await self._request("GET", f"/v13/deployments/{deployment_id}")
        return self._parse(Deployment, data, "deployment lookup")

    async def create_deployment(self, payload: Dict[str, Any]) -> Deployment:
        data = await self._request("POST", "/v13/deployments", json=payload)
        return self._parse(Deployment, data, "deployment creation")

    async def import_github_repo(self, repo_path: str, project_name: str) -> Dict[str, Any]:
        logger.info(f"Importing GitHub repo {repo_path} as project {project_name}")
        return await self._request("POST", "/v10/projects/import", json={
            "name": project_name,
            "gitRepository": {"type": "github", "repo": repo_path},
        })

    async def resolve_project_id(self, configuration_id: str) -> str:
        """First selected project of the configuration, else the first project of the account."""
        config = await self.get_integration_configuration(configuration_id)
        if config.projects:
            logger.info(f"Using first selected project {config.projects[0]}")
            return config.projects[0]

        projects = await self.get_projects()
        if not projects:
            raise NoProjectsError("No projects found in the account")
        logger.info(f"Using first available project {projects[0].name} ({projects[0].id})")
        return projects[0].id

    async def _create_env(self, project_id: str, key: str, value: str) -> None:
        await self._request("POST", f"/v10/projects/{project_id}/env", json={
            "key": key,
            "value": value,
            "type": "encrypted",
            "target": list(ENV_TARGETS),
        })

    async def set_environment_variables(self, project_id: str, variables: Dict[str, str]) -> None:
        """
        Create every variable on the project concurrently.

        All requests run to completion. Conflicts (variable already exists) are
        reported ahead of any other failure; otherwise the failed keys are
        reported with up to three distinct upstream messages.
        """
        keys = list(variables)
        if not keys:
            return

        outcomes = await asyncio.gather(
            *(self._create_env(project_id, key, variables[key]) for key in keys),
            return_exceptions=True,
        )

        conflicts: List[str] = []
        failures: List[Tuple[str, UpstreamError]] = []
        for key, outcome in zip(keys, outcomes):
            if not isinstance(outcome, BaseException):
                continue
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            error = parse_upstream_error(outcome)
            if error.is_conflict:
                conflicts.append(key)
            else:
                failures.append((key, error))

        if conflicts:
            logger.warning(f"Environment variable conflicts on project {project_id}: {conflicts}")
            raise EnvironmentVariableConflictError(
                f"Environment variables already exist on the project: {', '.join(conflicts)}. "
                "Remove the existing variables from the project or rename them, then deploy again.",
                conflicts,
            )

        if failures:
            failed_keys = [key for key, _ in failures]
            messages = [error.message for _, error in failures]
            distinct = list(dict.fromkeys(messages))
            if len(distinct) <= MAX_DISTINCT_ERROR_MESSAGES:
                detail = "; ".join(distinct)
            else:
                detail = Counter(messages).most_common(1)[0][0]
            logger.error(f"Failed to set environment variables on project {project_id}: {failed_keys}")
            raise EnvironmentVariableError(
                f"Failed to set environment variables {', '.join(failed_keys)}: {detail}",
                failed_keys,
            )

        logger.info(f"Set {len(keys)} environment variables on project {project_id}")

    async def deploy_from_github(
        self,
        configuration_id: str,
        repo: str,
        github: GitHubClient,
        branch: str = "main",
        env_variables: Optional[Dict[str, str]] = None,
        target: str = "production",
        name: str = "assistant-server",
    ) -> DeploymentResult:
        """Resolve the project, push env vars, then trigger a git-based deployment.

        Steps run in order and the first failure aborts; variables already set are left in place.
        """
        repo_path = normalize_repo_path(repo)
        logger.info(f"Starting deployment: configuration={configuration_id} repo={repo_path} branch={branch} target={target}")

        project_id = await self.resolve_project_id(configuration_id)

        if env_variables:
            await self.set_environment_variables(project_id, env_variables)

        repo_id = await github.get_repo_id(repo_path)
        deployment = await self.create_deployment({
            "name": name,
            "project": project_id,
            "target": target,
            "gitSource": {
                "type": "github",
                "repoId": repo_id,
                "ref": f"refs/heads/{branch}",
            },
        })
        logger.info(f"Deployment created: {deployment.id}")
        return DeploymentResult(project_id=project_id, project_name=name, deployment=deployment)
