from typing import Optional

from fastapi import Header, Request

from orderledger.config import get_settings
from orderledger.core.security import authenticate_request
from orderledger.database.session import get_db


def require_auth(request: Request, authorization: Optional[str] = Header(None)):
    settings = get_settings()
    api_key = request.headers.get(settings.API_KEY_HEADER) or request.headers.get("api-key")
    return authenticate_request(
        api_key=api_key,
        authorization=authorization,
        require_auth=True,
    )


__all__ = ["get_db", "require_auth"]
