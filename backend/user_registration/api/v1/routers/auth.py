# user_registration/api/v1/routers/auth.py
from fastapi import APIRouter, Depends, Query, status

from user_registration.api.v1.deps import get_current_user, get_services
from user_registration.api.v1.errors import envelope
from user_registration.models.user import User
from user_registration.schemas.auth import EmailAvailabilityOut, LoginRequest
from user_registration.schemas.user import RegistrationIn
from user_registration.services import Services
from user_registration.services.validation import normalize_email

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegistrationIn, services: Services = Depends(get_services)):
    """
    Register a new user account.

    Validates the request, checks that the email and phone number are not
    taken and that every requested role exists, then stores the user with a
    hashed password.

    Returns:
        201 with the created user (no password hash).

    Errors:
        - 400: field validation, password policy, password mismatch, unknown roles
        - 409: email or phone number already registered
    """
    user = await services.users.register(body)
    return envelope(True, "User registered successfully", user)


@router.get("/check-email")
async def check_email(email: str = Query(..., min_length=3), services: Services = Depends(get_services)):
    """Report whether an email address is still free to register."""
    available = await services.users.email_available(email)
    message = "Email is available" if available else "Email is already registered"
    return envelope(True, message, EmailAvailabilityOut(email=normalize_email(email), available=available))


@router.post("/login")
async def login(payload: LoginRequest, services: Services = Depends(get_services)):
    """
    Authenticate user and create access token.

    Returns:
        200 with the token, token type ("Bearer"), user id, email, names and roles.

    Errors:
        - 401: unknown email or wrong password (same message for both)
    """
    result = await services.auth.authenticate(payload.email, payload.password)
    return envelope(True, "Login successful", result)


@router.get("/me")
async def me(user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    """
    Get current authenticated user information.

    Returns the identity and roles of the user named by the bearer token,
    without issuing a new token.
    """
    identity = await services.auth.get_current_user(user.email)
    return envelope(True, "Current user retrieved successfully", identity)
