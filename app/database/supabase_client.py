from fastapi import Request
from supabase import create_client, Client
from app.config import Settings


def create_supabase_client(config: Settings) -> Client:
    """Build the service-role client. Owned by the process entry point, see app.main."""
    if not config.supabase_url or not config.supabase_service_role_key:
        raise RuntimeError(
            "Supabase credentials not configured. Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."
        )
    return create_client(config.supabase_url, config.supabase_service_role_key)


def get_supabase(request: Request) -> Client:
    return request.app.state.supabase
