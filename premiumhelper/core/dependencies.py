"""FastAPI dependencies for the host.

All services live on ``app.state.host`` so each app (and each test) gets
its own set instead of sharing module globals.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from fastapi import Depends, HTTPException, Request

from .directory import Directory, DirectoryError
from .hooks import HookManager
from .models import Venue, Visitor
from .plugins import PluginManager
from .request import RequestContext
from .templates import TemplateRenderer

if TYPE_CHECKING:
    from ..santaane.client import AbstractAnalyzer
    from .config import AppConfig


VISITOR_COOKIE = "visitor_id"


@dataclass
class HostState:
    """Application state container stored in ``app.state.host``."""

    config: "AppConfig"
    directory: Directory
    hooks: HookManager
    renderer: TemplateRenderer
    plugin_manager: PluginManager
    analyzer: "AbstractAnalyzer"


def get_host_state(request: Request) -> HostState:
    """Get application state from request.

    Raises:
        HTTPException: If app state not initialized.
    """
    if not hasattr(request.app.state, "host"):
        raise HTTPException(status_code=503, detail="Application not initialized")
    return request.app.state.host


def get_venue(venue_path: str, host: HostState = Depends(get_host_state)) -> Venue:
    """Resolve the venue named in the URL."""
    try:
        venue = host.directory.get_venue(venue_path)
    except DirectoryError:
        raise HTTPException(status_code=503, detail="Directory unavailable")
    if venue is None:
        raise HTTPException(status_code=404, detail="Venue not found")
    return venue


def get_visitor(request: Request, host: HostState = Depends(get_host_state)) -> Visitor:
    """Resolve the visitor from the session cookie."""
    raw_id = request.cookies.get(VISITOR_COOKIE, "")
    try:
        visitor = host.directory.get_visitor(int(raw_id))
    except (ValueError, DirectoryError):
        visitor = None
    if visitor is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return visitor


def request_context_for(page: str):
    """Dependency factory building a fresh RequestContext per request."""

    def build(
        venue: Venue = Depends(get_venue),
        visitor: Visitor = Depends(get_visitor),
        host: HostState = Depends(get_host_state),
    ) -> RequestContext:
        return RequestContext(
            requested_page=page,
            base_url=host.config.base_url,
            venue=venue,
            visitor=visitor,
        )

    return build
