from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class InstallationStatus(str, Enum):
    PENDING = "pending"
    INSTALLED = "installed"
    FAILED = "failed"


class InstallationUpdate(BaseModel):
    vercel_project_id: Optional[str] = None
    vercel_project_name: Optional[str] = None
    deployment_url: Optional[str] = None
    status: Optional[InstallationStatus] = None


class InstallationResponse(BaseModel):
    id: int
    uuid: str
    installation_id: str
    account_id: int
    app_name: str = "assistant-server"
    vercel_project_id: Optional[str] = None
    vercel_project_name: Optional[str] = None
    deployment_url: Optional[str] = None
    status: InstallationStatus = InstallationStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
