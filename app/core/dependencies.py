"""
Core dependencies shared by module routes.

Clients are created once in app.main and handed to routes through app.state.
"""

import httpx
from fastapi import Depends, Request
from app.config import settings
from app.modules.github.client import GitHubClient


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_github_client(http_client: httpx.AsyncClient = Depends(get_http_client)) -> GitHubClient:
    return GitHubClient(
        http_client,
        api_base=settings.github_api_base,
        repo_id_override=settings.assistant_server_repo_id,
    )
