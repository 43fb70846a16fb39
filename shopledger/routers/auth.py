from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from shopledger.config import Settings
from shopledger.core.exceptions import AuthenticationError
from shopledger.core.security import SESSION_USER_KEY
from shopledger.dependencies import get_app_settings, get_db
from shopledger.schemas.auth import LoginRequest, UserRead
from shopledger.services.auth_service import authenticate, ensure_admin_user

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login")
def login(
    payload: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    user = authenticate(db, payload.username, payload.password, settings)
    if user is None:
        raise AuthenticationError("Invalid credentials")
    request.session[SESSION_USER_KEY] = user.username
    return {"auth": True, "message": "Login successful", "user": UserRead.model_validate(user)}


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"message": "Logout successful"}


@router.post("/init")
def init_admin(db: Session = Depends(get_db), settings: Settings = Depends(get_app_settings)):
    user, created = ensure_admin_user(db, settings)
    message = "Admin user created" if created else "Admin user already exists"
    return {"message": message, "user": UserRead.model_validate(user)}


@router.get("/me")
def me(request: Request):
    username = request.session.get(SESSION_USER_KEY)
    if not username:
        raise AuthenticationError()
    return {"username": username}


__all__ = ["router"]
