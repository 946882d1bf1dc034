# user_registration/api/v1/deps.py
from fastapi import Depends, Header, HTTPException, Request, status

from user_registration.core.errors import AuthenticationError
from user_registration.models.role import ADMIN, canonical_role_name
from user_registration.models.user import User
from user_registration.services import Services

ADMIN_KEY = canonical_role_name(ADMIN)


def get_services(request: Request) -> Services:
    """The service container built at startup (see ``main.py``)."""
    return request.app.state.services


async def get_current_user(
    authorization: str | None = Header(default=None),
    services: Services = Depends(get_services),
) -> User:
    """
    FastAPI dependency to get the current authenticated user.

    Extracts the JWT from ``Authorization: Bearer <token>``, validates it and
    loads the user it names, roles included.

    Raises:
        HTTPException (401): If no token is provided (AUTH_REQUIRED)
        HTTPException (401): If token is invalid, expired, or its user is gone (AUTH_INVALID_TOKEN)

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()

    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_REQUIRED")

    try:
        return await services.auth.user_from_token(token)
    except AuthenticationError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_INVALID_TOKEN")


async def require_admin(current: User = Depends(get_current_user)) -> User:
    """
    FastAPI dependency to ensure the current user holds the Admin role.

    Builds on top of `get_current_user` and checks the roles loaded from the
    database, not the (possibly stale) roles embedded in the token.

    Raises:
        HTTPException (403): If user is not an admin (FORBIDDEN_ADMIN_ONLY)
        HTTPException (401): If user is not authenticated (from get_current_user)
    """
    if not any(role.name_key == ADMIN_KEY for role in current.roles):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="FORBIDDEN_ADMIN_ONLY")
    return current
