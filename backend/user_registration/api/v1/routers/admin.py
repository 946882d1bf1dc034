# user_registration/api/v1/routers/admin.py
from fastapi import APIRouter, Depends, Query, status

from user_registration.api.v1.deps import get_services, require_admin
from user_registration.api.v1.errors import envelope
from user_registration.schemas.role import RoleCreateIn, RoleRead, RoleUpdateIn
from user_registration.services import Services

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# ==============================================================================
# I. User Management Interface
#     Prefix: /api/v1/admin/users
# ==============================================================================
@router.get("/users")
async def list_users(
    country: str | None = Query(default=None, min_length=2, max_length=2, description="ISO alpha-2 filter"),
    services: Services = Depends(get_services),
):
    """
    Get all registered users (admin only), oldest first.

    Args:
        country: Optional ISO 3166-1 alpha-2 code to filter by
    """
    if country:
        users = await services.users.find_by_country(country)
    else:
        users = await services.users.list_all()
    return envelope(True, "Users retrieved successfully", users)


@router.get("/users/{user_id}")
async def get_user_detail(user_id: int, services: Services = Depends(get_services)):
    """
    Get detailed information about a specific user (admin only).

    Raises:
        404: If user not found
    """
    user = await services.users.get_user(user_id)
    return envelope(True, "User found", user)


@router.delete("/users/{user_id}")
async def delete_user(user_id: int, services: Services = Depends(get_services)):
    """
    Delete a user account (admin only).

    Deletion is unconditional; the user's role assignments go with it.

    Raises:
        404: If user not found
    """
    await services.users.delete_user(user_id)
    return envelope(True, "User deleted successfully")


# ==============================================================================
# II. Role Management Interface
#     Prefix: /api/v1/admin/roles
# ==============================================================================
@router.post("/roles", status_code=status.HTTP_201_CREATED)
async def create_role(body: RoleCreateIn, services: Services = Depends(get_services)):
    """
    Create a new role (admin only).

    Raises:
        409: A role with the same name (case-insensitive) already exists
    """
    role = await services.roles.create_role(body.name, body.description)
    return envelope(True, "Role created successfully", RoleRead.from_role(role))


@router.put("/roles/{role_id}")
async def update_role(role_id: int, body: RoleUpdateIn, services: Services = Depends(get_services)):
    """
    Update a role's name and/or description (admin only).

    Raises:
        404: If role not found
        409: New name already taken, or the role is a protected default being renamed
    """
    role = await services.roles.update_role(role_id, body.name, body.description)
    return envelope(True, "Role updated successfully", RoleRead.from_role(role))


@router.delete("/roles/{role_id}")
async def delete_role(role_id: int, services: Services = Depends(get_services)):
    """
    Delete a role (admin only).

    Raises:
        404: If role not found
        409: Role is still assigned to users, or is a protected default role
    """
    await services.roles.delete_role(role_id)
    return envelope(True, "Role deleted successfully")
