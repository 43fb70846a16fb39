from fastapi import Request

from shopledger.config import Settings
from shopledger.core.security import authenticate_request
from shopledger.database.session import get_db


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_login(request: Request):
    return authenticate_request(request, request.app.state.settings)


__all__ = ["get_app_settings", "get_db", "require_login"]
