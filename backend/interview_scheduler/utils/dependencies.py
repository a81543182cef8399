from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .error_handlers import UnauthorizedError, get_error_message
from .jwt import decode_access_token

_bearer = HTTPBearer(auto_error=False)


def get_current_user(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> dict:
    """
    Resolve the caller from a bearer token: {"sub": user id, "role": role name, ...}.

    Identity is owned by the account service; this only checks the signature.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(get_error_message("unauthorized"))

    payload = decode_access_token(credentials.credentials)
    if not payload or payload.get("sub") is None or not payload.get("role"):
        raise UnauthorizedError("Invalid or expired token")

    try:
        payload["sub"] = int(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid or expired token")
    payload["role"] = str(payload["role"]).upper()
    return payload
