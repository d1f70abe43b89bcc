"""Session identity helpers."""
from __future__ import annotations
from typing import Optional

from flask import session

from .models import LoginResult
from .usuario_service import SYSTEM_USER

SESSION_USER_KEY = "usuario"
SESSION_TOKEN_KEY = "sesion"
SESSION_BRANCH_KEY = "id_sucursal"


def is_authenticated() -> bool:
    """Check if a user logged in through this session."""
    return bool(session.get(SESSION_USER_KEY))


def current_username() -> str:
    """Acting user for audit attribution, ``system`` when unauthenticated."""
    username = session.get(SESSION_USER_KEY)
    if isinstance(username, str) and username.strip():
        return username
    return SYSTEM_USER


def remember_login(result: Optional[LoginResult]) -> None:
    """Store the authenticated user in the server-side session."""
    if result is None or not result.user_id:
        return
    session[SESSION_USER_KEY] = result.user_id
    session[SESSION_TOKEN_KEY] = result.session
    session[SESSION_BRANCH_KEY] = result.branch_id


def forget_login() -> None:
    """Drop every identity key from the session."""
    session.clear()
