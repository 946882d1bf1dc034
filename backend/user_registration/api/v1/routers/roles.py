# user_registration/api/v1/routers/roles.py
from fastapi import APIRouter, Depends

from user_registration.api.v1.deps import get_services
from user_registration.api.v1.errors import envelope
from user_registration.schemas.role import RoleRead
from user_registration.services import Services

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("")
async def list_roles(services: Services = Depends(get_services)):
    """All roles, for the registration form."""
    roles = await services.roles.list_roles()
    return envelope(True, "Roles retrieved successfully", [RoleRead.from_role(r) for r in roles])


@router.get("/names")
async def list_role_names(services: Services = Depends(get_services)):
    names = await services.roles.list_role_names()
    return envelope(True, "Role names retrieved successfully", names)


@router.get("/{role_id}")
async def get_role(role_id: int, services: Services = Depends(get_services)):
    role = await services.roles.get_role(role_id)
    return envelope(True, "Role found", RoleRead.from_role(role))
