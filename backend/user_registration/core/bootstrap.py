# user_registration/core/bootstrap.py
"""
Bootstrap module for application initialization.
Handles startup tasks: seeding the default roles and creating a default
admin account on first startup.
"""
import logging

from user_registration.config import Settings
from user_registration.core.errors import ServiceError
from user_registration.models.role import ADMIN, GENERAL_USER
from user_registration.schemas.user import RegistrationIn
from user_registration.services import Services

logger = logging.getLogger("uvicorn.error")


async def ensure_default_admin(services: Services, settings: Settings) -> None:
    """
    If no admin exists in the database, register a default admin based on settings.
    Only takes effect under the following conditions:
      - Currently no user holds the Admin role
      - And ADMIN_PASSWORD is set (to avoid using a default weak password)
    Environment variables:
      ADMIN_EMAIL    (default: "admin@example.com")
      ADMIN_PASSWORD (required, otherwise won't create)
    """
    # Check if any admin user already exists
    if await services.users.any_with_role(ADMIN):
        return

    if not settings.admin_password:
        logger.warning("[bootstrap] No admin present, but ADMIN_PASSWORD not set -> skip creating default admin.")
        return

    # Goes through the normal pipeline so the password policy applies
    try:
        admin = await services.users.register(RegistrationIn(
            firstName="System",
            lastName="Administrator",
            email=settings.admin_email,
            password=settings.admin_password,
            confirmPassword=settings.admin_password,
            roles=[GENERAL_USER, ADMIN],
        ))
    except ServiceError as exc:
        logger.error("[bootstrap] Could not create default admin (%s): %s", settings.admin_email, exc.message)
        return
    logger.warning("[bootstrap] Created default admin -> email=%s id=%s", admin.email, admin.id)


async def run_startup(services: Services, settings: Settings) -> None:
    """Seed default roles, then make sure an admin account exists."""
    logger.info("Starting application initialization...")
    await services.roles.seed_default_roles()
    await ensure_default_admin(services, settings)
    logger.info("Application initialization completed successfully")
