from urllib.parse import urlparse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional


class SupabaseCredentials(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    service_role_key: str = Field(..., alias="serviceRoleKey", min_length=1)

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("must be a valid http(s) URL")
        return value


class DatabaseCredentials(BaseModel):
    host: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    user: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class OpenAICredentials(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(..., alias="apiKey", min_length=1)


class DeploymentConfig(BaseModel):
    """Credentials for the deployed assistant server. Sent to Vercel as env vars, never stored."""
    supabase: SupabaseCredentials
    database: DatabaseCredentials
    openai: OpenAICredentials


class DeploymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    configuration_id: str = Field(..., alias="configurationId", min_length=1)
    config: DeploymentConfig
    project_name: Optional[str] = Field(None, alias="projectName")


class DeploymentData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    deployment_id: str = Field(..., alias="deploymentId")
    deployment_url: Optional[str] = Field(None, alias="deploymentUrl")
    project_name: str = Field(..., alias="projectName")
    migration_secret_key: str = Field(..., alias="migrationSecretKey")


class DeploymentResponse(BaseModel):
    success: bool = True
    data: DeploymentData
