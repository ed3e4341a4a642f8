from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ....application.services.auth_service import AuthService
from ....core.config import Settings
from ....core.dependencies import get_auth_service, get_settings
from ....domain.errors import AuthenticationError, ConflictError, ValidationError
from ...api.dependencies import get_session_token
from ...api.schemas.users import LoginRequest

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("")
def check_session(
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    if not auth_service.check(token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User is not authenticated")
    return {"message": "User is authenticated"}


@router.post("/login")
def login(
    payload: LoginRequest,
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    try:
        result = auth_service.login(payload.username, payload.password, current_token=token)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except AuthenticationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    response.set_cookie(
        key=settings.session_cookie_name,
        value=result.session.token,
        max_age=int(auth_service.session_ttl.total_seconds()),
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )
    if result.created:
        response.status_code = status.HTTP_201_CREATED
        return {"message": "User created and logged in successfully"}
    return {"message": "Login successful"}


@router.post("/logout")
def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    auth_service.logout(token)
    response.delete_cookie(key=settings.session_cookie_name, path="/")
    return {"message": "Logout successful"}
