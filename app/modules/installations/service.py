from datetime import datetime, timezone
from supabase import Client
from app.modules.installations.schemas import (
    InstallationResponse, InstallationStatus, InstallationUpdate
)
from typing import Any, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class InstallationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_installation(
        self,
        installation_id: str,
        account_id: int,
        app_name: str = "assistant-server"
    ) -> InstallationResponse:
        """Create a pending installation for a Vercel integration configuration"""
        try:
            result = self.supabase.table("installations").insert({
                "installation_id": installation_id,
                "account_id": account_id,
                "app_name": app_name,
                "status": InstallationStatus.PENDING.value,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create installation")

            return InstallationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating installation: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def _get_one(self, column: str, value: Any) -> Optional[InstallationResponse]:
        try:
            result = self.supabase.table("installations")\
                .select("*")\
                .eq(column, value)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error(f"Error getting installation by {column}: {str(e)}")
            return None

        if result is None or not result.data:
            return None
        return InstallationResponse(**result.data)

    def get_installation_by_uuid(self, uuid: str) -> Optional[InstallationResponse]:
        return self._get_one("uuid", uuid)

    def get_installation_by_configuration_id(self, installation_id: str) -> Optional[InstallationResponse]:
        """Lookup by Vercel's configuration ID (installations.installation_id)"""
        return self._get_one("installation_id", installation_id)

    def update_installation(self, uuid: str, updates: InstallationUpdate) -> Optional[InstallationResponse]:
        """Apply the non-null fields of `updates`. Returns None when nothing was updated."""
        update_data = updates.model_dump(exclude_none=True, mode="json")
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("installations")\
                .update(update_data)\
                .eq("uuid", uuid)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating installation {uuid}: {str(e)}")
            return None

        if not result.data:
            return None
        return InstallationResponse(**result.data[0])
