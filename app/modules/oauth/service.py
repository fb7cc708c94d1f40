import httpx
from app.config import settings
from app.modules.accounts.service import AccountService
from app.modules.installations.schemas import InstallationResponse
from app.modules.installations.service import InstallationService
from app.modules.vercel.client import exchange_oauth_code
import logging

logger = logging.getLogger(__name__)


class OAuthService:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        account_service: AccountService,
        installation_service: InstallationService,
    ):
        self.http_client = http_client
        self.account_service = account_service
        self.installation_service = installation_service

    async def complete_installation(self, code: str) -> InstallationResponse:
        """Exchange the code, store the encrypted token and open a pending installation"""
        token = await exchange_oauth_code(
            self.http_client,
            code,
            client_id=settings.vercel_client_id,
            client_secret=settings.vercel_client_secret,
            redirect_uri=settings.vercel_redirect_uri,
            api_base=settings.vercel_api_base,
        )
        account = self.account_service.upsert_account(token)
        installation = self.installation_service.create_installation(token.installation_id, account.id)
        logger.info(f"Installation {installation.installation_id} created for account {account.id}")
        return installation
