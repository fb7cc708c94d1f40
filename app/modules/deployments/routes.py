import httpx
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from app.core.dependencies import get_github_client, get_http_client
from app.core.errors import IntegrationError, parse_upstream_error
from app.database.supabase_client import get_supabase
from app.modules.accounts.service import AccountService
from app.modules.deployments.schemas import DeploymentRequest, DeploymentResponse
from app.modules.deployments.service import DeploymentService
from app.modules.github.client import GitHubClient
from app.modules.installations.service import InstallationService
from supabase import Client
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deploy", tags=["deployments"])


def get_deployment_service(
    http_client: httpx.AsyncClient = Depends(get_http_client),
    github: GitHubClient = Depends(get_github_client),
    supabase: Client = Depends(get_supabase)
) -> DeploymentService:
    return DeploymentService(http_client, AccountService(supabase), InstallationService(supabase), github)


def deployment_failed(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": "Deployment failed", "message": message})


@router.post("", response_model=DeploymentResponse)
async def deploy(
    deployment_request: DeploymentRequest,
    service: DeploymentService = Depends(get_deployment_service)
):
    """Deploy the assistant server to the user's Vercel account with the provided credentials"""
    try:
        return await service.deploy(deployment_request)
    except HTTPException:
        raise
    except (IntegrationError, httpx.HTTPError) as e:
        error = parse_upstream_error(e)
        logger.error(f"Deployment failed ({error.kind.value}, status={error.status_code}): {error.message}")
        return deployment_failed(error.message)
    except Exception as e:
        logger.exception(f"Deployment failed with unexpected error: {e}")
        return deployment_failed(str(e) or "Unknown error")
