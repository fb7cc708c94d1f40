import uuid
from typing import Dict

import httpx
from fastapi import HTTPException
from app.config import settings
from app.modules.accounts.service import AccountService
from app.modules.deployments.schemas import (
    DeploymentConfig, DeploymentData, DeploymentRequest, DeploymentResponse
)
from app.modules.github.client import GitHubClient
from app.modules.installations.schemas import InstallationStatus, InstallationUpdate
from app.modules.installations.service import InstallationService
from app.modules.vercel.client import VercelClient
import logging

logger = logging.getLogger(__name__)

AI_DEFAULTS = {
    "AI_MODEL": "gpt-4o-mini",
    "AI_TEMPERATURE": "0.7",
    "AI_MAX_TOKENS": "1000",
}

ORGANIZATION_DEFAULTS = {
    "ORGANIZATION_NAME": "Vezlo",
    "ASSISTANT_NAME": "Vezlo Assistant",
}

ADMIN_DEFAULTS = {
    "DEFAULT_ADMIN_EMAIL": "admin@vezlo.org",
    "DEFAULT_ADMIN_PASSWORD": "admin123",
}


def build_env_variables(config: DeploymentConfig, migration_secret_key: str, jwt_secret: str) -> Dict[str, str]:
    """Environment of the deployed assistant server"""
    return {
        "SUPABASE_URL": config.supabase.url,
        "SUPABASE_SERVICE_KEY": config.supabase.service_role_key,
        "SUPABASE_DB_HOST": config.database.host,
        "SUPABASE_DB_NAME": config.database.name,
        "SUPABASE_DB_USER": config.database.user,
        "SUPABASE_DB_PASSWORD": config.database.password,
        "OPENAI_API_KEY": config.openai.api_key,
        **AI_DEFAULTS,
        **ORGANIZATION_DEFAULTS,
        "MIGRATION_SECRET_KEY": migration_secret_key,
        "JWT_SECRET": jwt_secret,
        **ADMIN_DEFAULTS,
    }


class DeploymentService:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        account_service: AccountService,
        installation_service: InstallationService,
        github: GitHubClient,
    ):
        self.http_client = http_client
        self.account_service = account_service
        self.installation_service = installation_service
        self.github = github

    async def deploy(self, request: DeploymentRequest) -> DeploymentResponse:
        """Deploy the assistant server into the Vercel account behind a configuration ID.

        Not-found cases raise HTTPException(404). Vercel/GitHub failures propagate as
        IntegrationError or httpx errors; nothing already sent to Vercel is rolled back.
        """
        installation = self.installation_service.get_installation_by_configuration_id(request.configuration_id)
        if not installation:
            raise HTTPException(status_code=404, detail="Installation not found")

        account = self.account_service.get_account_by_id(installation.account_id)
        if not account:
            raise HTTPException(status_code=404, detail="Account not found")

        access_token = self.account_service.get_decrypted_token(installation.account_id)
        if not access_token:
            raise HTTPException(status_code=404, detail="Access token not found")

        self.installation_service.update_installation(
            installation.uuid, InstallationUpdate(status=InstallationStatus.PENDING)
        )

        vercel = VercelClient(
            self.http_client,
            access_token,
            team_id=account.vercel_team_id,
            api_base=settings.vercel_api_base,
        )

        migration_secret_key = str(uuid.uuid4())
        env_variables = build_env_variables(request.config, migration_secret_key, jwt_secret=str(uuid.uuid4()))

        result = await vercel.deploy_from_github(
            installation.installation_id,
            settings.assistant_server_repo,
            self.github,
            branch=settings.assistant_server_branch,
            env_variables=env_variables,
            target=settings.deployment_target,
            name=request.project_name or settings.assistant_server_project_name,
        )

        self.installation_service.update_installation(installation.uuid, InstallationUpdate(
            vercel_project_id=result.project_id,
            vercel_project_name=result.project_name,
            deployment_url=result.deployment.url,
            status=InstallationStatus.INSTALLED,
        ))
        logger.info(f"Installation {installation.installation_id} deployed: {result.deployment.id}")

        return DeploymentResponse(data=DeploymentData(
            deployment_id=result.deployment.id,
            deployment_url=result.deployment.url,
            project_name=result.project_name,
            migration_secret_key=migration_secret_key,
        ))
