from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from app.config import settings
from app.core.dependencies import get_http_client
from app.database.supabase_client import get_supabase
from app.modules.accounts.service import AccountService
from app.modules.installations.service import InstallationService
from app.modules.oauth.service import OAuthService
from supabase import Client
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/oauth", tags=["oauth"])


def get_oauth_service(
    http_client: httpx.AsyncClient = Depends(get_http_client),
    supabase: Client = Depends(get_supabase)
) -> OAuthService:
    return OAuthService(http_client, AccountService(supabase), InstallationService(supabase))


def build_configure_url(base_url: str, configuration_id: str, next_url: Optional[str] = None) -> str:
    params = {"configurationId": configuration_id}
    if next_url:
        params["next"] = next_url
    return f"{base_url.rstrip('/')}/configure?{urlencode(params)}"


@router.get("/callback")
async def oauth_callback(
    request: Request,
    code: Optional[str] = None,
    next: Optional[str] = None,
    service: OAuthService = Depends(get_oauth_service)
):
    """Vercel OAuth callback: store the account and installation, then send the user to the configure page"""
    if not code:
        raise HTTPException(status_code=400, detail="Missing authorization code")

    try:
        installation = await service.complete_installation(code)
    except Exception as e:
        logger.exception(f"OAuth callback error: {e}")
        raise HTTPException(status_code=500, detail="Failed to complete OAuth flow")

    base_url = settings.app_url or str(request.base_url)
    return RedirectResponse(build_configure_url(base_url, installation.installation_id, next))
