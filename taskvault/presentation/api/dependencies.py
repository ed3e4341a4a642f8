from fastapi import Depends, HTTPException, Request, status

from ...application.services.auth_guard import AuthGuard
from ...core.config import Settings
from ...core.dependencies import get_auth_guard, get_settings
from ...domain.errors import AuthenticationError


def get_session_token(request: Request, settings: Settings = Depends(get_settings)):
    return request.cookies.get(settings.session_cookie_name)


def require_user_id(
    request: Request,
    token=Depends(get_session_token),
    guard: AuthGuard = Depends(get_auth_guard),
) -> str:
    try:
        user_id = guard.require_user_id(token)
    except AuthenticationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    request.state.user_id = user_id
    return user_id
