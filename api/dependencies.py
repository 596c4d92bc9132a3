"""FastAPI dependency injection for settings, design system and HTTP client."""
from typing import Annotated

import httpx
from fastapi import Depends, Request

from models.design import DesignSystem
from settings import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_design(request: Request) -> DesignSystem:
    return request.app.state.design


def get_http_client(request: Request) -> httpx.Client:
    """The process-wide client used to download illustrations."""
    return request.app.state.http_client


# Type aliases for cleaner route signatures
AppSettings = Annotated[Settings, Depends(get_settings)]
Design = Annotated[DesignSystem, Depends(get_design)]
HttpClient = Annotated[httpx.Client, Depends(get_http_client)]
