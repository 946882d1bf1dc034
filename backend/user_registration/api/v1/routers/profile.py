# user_registration/api/v1/routers/profile.py
from fastapi import APIRouter, Depends

from user_registration.api.v1.deps import get_current_user, get_services
from user_registration.api.v1.errors import envelope
from user_registration.models.user import User
from user_registration.schemas.user import PasswordChangeIn, ProfileUpdateIn, UserRead
from user_registration.services import Services

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("")
async def get_profile(user: User = Depends(get_current_user)):
    """Current user's profile."""
    return envelope(True, "Profile retrieved successfully", UserRead.from_user(user))


@router.put("")
async def update_profile(
    body: ProfileUpdateIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """
    Update the current user's first name, last name, phone number and country.

    Email, password and roles cannot be changed through this endpoint.
    """
    updated = await services.users.update_profile(user.email, body)
    return envelope(True, "Profile updated successfully", updated)


@router.post("/change-password")
async def change_password(
    body: PasswordChangeIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """
    Change the current user's password.

    Requires the current password. The new password must match its
    confirmation and satisfy the password policy.
    """
    await services.users.change_password(
        user.email, body.currentPassword, body.newPassword, body.confirmNewPassword
    )
    return envelope(True, "Password changed successfully")
