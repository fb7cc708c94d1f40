from datetime import datetime, timezone
from supabase import Client
from app.core.encryption import TokenDecryptionError, decrypt, encrypt
from app.modules.accounts.schemas import AccountResponse
from app.modules.vercel.schemas import OAuthToken
from typing import Any, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def upsert_account(self, token: OAuthToken) -> AccountResponse:
        """Store the Vercel account, overwriting the token of an existing vercel_user_id"""
        try:
            result = self.supabase.table("accounts").upsert({
                "vercel_user_id": token.user_id,
                "vercel_team_id": token.team_id or None,
                "access_token": encrypt(token.access_token),
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }, on_conflict="vercel_user_id").execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to store account")

            return AccountResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error storing account: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def _get_one(self, column: str, value: Any) -> Optional[AccountResponse]:
        try:
            result = self.supabase.table("accounts")\
                .select("*")\
                .eq(column, value)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error(f"Error getting account by {column}: {str(e)}")
            return None

        if result is None or not result.data:
            return None
        return AccountResponse(**result.data)

    def get_account_by_id(self, account_id: int) -> Optional[AccountResponse]:
        return self._get_one("id", account_id)

    def get_account_by_uuid(self, uuid: str) -> Optional[AccountResponse]:
        return self._get_one("uuid", uuid)

    def get_account_by_vercel_user_id(self, vercel_user_id: str) -> Optional[AccountResponse]:
        return self._get_one("vercel_user_id", vercel_user_id)

    def get_decrypted_token(self, account_id: int) -> Optional[str]:
        """Plaintext access token, or None when the account is missing or the token cannot be decrypted"""
        account = self.get_account_by_id(account_id)
        if account is None:
            return None
        try:
            return decrypt(account.access_token)
        except TokenDecryptionError:
            logger.warning(f"Stored access token for account {account_id} could not be decrypted")
            return None
