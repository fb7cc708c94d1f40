from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AccountResponse(BaseModel):
    id: int
    uuid: str
    vercel_user_id: str
    vercel_team_id: Optional[str] = None
    access_token: str  # Encrypted
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
