from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    # Vercel integration (OAuth client registered on the integration console)
    vercel_client_id: str = ""
    vercel_client_secret: str = ""
    vercel_redirect_uri: str = ""
    vercel_api_base: str = "https://api.vercel.com"

    # GitHub (public repository metadata lookup)
    github_api_base: str = "https://api.github.com"

    # Public URL of this server; falls back to the request base URL when empty
    app_url: str = ""

    # Static secret for access tokens stored in the accounts table
    encryption_key: str = "default-key-change-in-production"

    # Assistant server source deployed into the user's Vercel account
    assistant_server_repo: str = "your-org/assistant-server"
    assistant_server_repo_id: Optional[str] = None  # Skips the GitHub API lookup when set
    assistant_server_branch: str = "main"
    assistant_server_project_name: str = "assistant-server"
    deployment_target: str = "production"  # production | preview

    # Outbound HTTP
    http_timeout: float = 30.0

    # App
    app_name: str = "vercel-integration-server"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
