from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List


class OAuthToken(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str
    token_type: Optional[str] = None
    installation_id: str
    user_id: str
    team_id: Optional[str] = None


class IntegrationConfiguration(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    project_selection: Optional[str] = Field(None, alias="projectSelection")  # all | selected
    projects: Optional[List[str]] = None
    scopes: List[str] = []
    team_id: Optional[str] = Field(None, alias="teamId")
    user_id: Optional[str] = Field(None, alias="userId")


class Project(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    framework: Optional[str] = None


class Deployment(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    url: Optional[str] = None
    name: Optional[str] = None
    ready_state: Optional[str] = Field(None, alias="readyState")


class DeploymentResult(BaseModel):
    project_id: str
    project_name: str
    deployment: Deployment
