"""Shared router dependencies."""
import secrets
from typing import Optional

from fastapi import Header, HTTPException, Request
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..config import Settings
from ..services.email_sender import EmailConfig
from ..services.notifier import Notifier
from ..services.orchestrator import CheckOrchestrator, build_orchestrator
from ..stores import AlertStore, HistoryStore, TargetStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_factory(request: Request) -> async_sessionmaker:
    return request.app.state.session_factory


def get_orchestrator(request: Request) -> CheckOrchestrator:
    """A fresh orchestrator sharing the application's per-target locks."""
    state = request.app.state
    return build_orchestrator(
        state.session_factory,
        state.settings,
        state.single_flight,
        probe_transport=state.probe_transport,
        mail_transport=state.mail_transport,
    )


def get_notifier(request: Request) -> Notifier:
    state = request.app.state
    return Notifier(EmailConfig.from_settings(state.settings), transport=state.mail_transport)


def get_target_store(request: Request) -> TargetStore:
    return TargetStore(request.app.state.session_factory)


def get_history_store(request: Request) -> HistoryStore:
    return HistoryStore(request.app.state.session_factory)


def get_alert_store(request: Request) -> AlertStore:
    return AlertStore(request.app.state.session_factory)


def require_admin(
    request: Request,
    authorization: Optional[str] = Header(None),
):
    """Require 'Authorization: Bearer <ADMIN_TOKEN>'."""
    expected = request.app.state.settings.admin_token
    if not expected:
        raise HTTPException(status_code=403, detail="Admin access is not configured")

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not secrets.compare_digest(token.strip(), expected):
        raise HTTPException(status_code=403, detail="Access denied")
