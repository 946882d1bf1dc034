import pytest

from user_registration.core.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from user_registration.core.security import PASSWORD_POLICY_MESSAGE
from user_registration.models.role import Role
from user_registration.models.user import User
from user_registration.schemas.user import ProfileUpdateIn

pytestmark = pytest.mark.asyncio


async def _always_free(*args, **kwargs) -> bool:
    return False


# ---------------------------------------------------------------- registration
async def test_register_stores_normalized_user(services, make_registration):
    data = make_registration(
        firstName="  Jane ",
        email="  Jane.Roe@ACME.io ",
        phoneNumber="+15551234567",
        country="gb",
        roles=["general_user", "PROFESSIONAL"],
    )
    user = await services.users.register(data)

    assert user.id > 0
    assert user.firstName == "Jane"
    assert user.email == "jane.roe@acme.io"
    assert user.country == "GB"
    assert user.phoneNumber == "+15551234567"
    assert user.roles == ["General User", "Professional"]
    assert user.createdAt is not None
    assert "password" not in user.model_dump()
    assert "passwordHash" not in user.model_dump()

    stored = await User.get(id=user.id)
    assert stored.password_hash != data.password
    assert services.credentials.verify(data.password, stored.password_hash)


async def test_register_dedupes_equivalent_role_names(services, make_registration):
    user = await services.users.register(make_registration(roles=["Admin", "admin", "ADMIN"]))
    assert user.roles == ["Admin"]


async def test_register_reports_all_shape_errors(services, make_registration):
    with pytest.raises(ValidationError) as exc_info:
        await services.users.register(make_registration(firstName="", email="bad", roles=[]))
    fields = {e.field for e in exc_info.value.errors}
    assert fields == {"firstName", "email", "roles"}
    assert await User.all().count() == 0


async def test_register_rejects_weak_password(services, make_registration):
    with pytest.raises(ValidationError) as exc_info:
        await services.users.register(make_registration(password="weakpass", confirmPassword="weakpass"))
    err = exc_info.value.errors[0]
    assert err.field == "password"
    assert err.message == PASSWORD_POLICY_MESSAGE
    assert err.rejected_value is None


async def test_register_rejects_mismatched_confirmation(services, make_registration):
    with pytest.raises(ValidationError) as exc_info:
        await services.users.register(make_registration(confirmPassword="Other1Pass!"))
    err = exc_info.value.errors[0]
    assert err.field == "confirmPassword"
    assert err.message == "Passwords do not match"


async def test_register_rejects_unknown_roles(services, make_registration):
    await Role.filter(name_key="ADMIN").delete()

    with pytest.raises(ValidationError) as exc_info:
        await services.users.register(make_registration(roles=["General User", "Admin"]))
    err = exc_info.value.errors[0]
    assert err.field == "roles"
    assert err.message == "Invalid role(s): Admin"
    assert err.rejected_value == ["Admin"]
    assert await User.all().count() == 0


async def test_register_duplicate_email_is_case_insensitive(services, make_registration):
    await services.users.register(make_registration(email="taken@acme.io"))
    with pytest.raises(ConflictError, match="User with this email already exists"):
        await services.users.register(make_registration(email="TAKEN@acme.io"))
    assert await User.filter(email="taken@acme.io").count() == 1


async def test_register_duplicate_phone(services, make_registration):
    await services.users.register(make_registration(phoneNumber="+15551234567"))
    with pytest.raises(ConflictError, match="User with this phone number already exists"):
        await services.users.register(make_registration(phoneNumber="+15551234567"))


async def test_users_without_phone_do_not_collide(services, make_registration):
    await services.users.register(make_registration(phoneNumber=None))
    await services.users.register(make_registration(phoneNumber="  "))
    assert await User.filter(phone_number=None).count() == 2


async def test_email_race_is_reported_as_conflict(services, make_registration, monkeypatch):
    await services.users.register(make_registration(email="race@acme.io"))
    # Simulate a concurrent registration that passed the pre-check
    monkeypatch.setattr(services.users.users, "email_exists", _always_free)

    with pytest.raises(ConflictError, match="User with this email already exists"):
        await services.users.register(make_registration(email="race@acme.io"))
    assert await User.filter(email="race@acme.io").count() == 1


async def test_phone_race_is_reported_as_conflict(services, make_registration, monkeypatch):
    await services.users.register(make_registration(phoneNumber="+15550000001"))
    monkeypatch.setattr(services.users.users, "phone_exists", _always_free)

    with pytest.raises(ConflictError, match="User with this phone number already exists"):
        await services.users.register(make_registration(phoneNumber="+15550000001"))
    assert await User.all().count() == 1


# --------------------------------------------------------------------- queries
async def test_queries(services, create_user):
    first, _ = await create_user(country="US", email="first@acme.io")
    second, _ = await create_user(country="CA", roles=("Admin",))

    assert (await services.users.find_by_id(first.id)).email == "first@acme.io"
    assert await services.users.find_by_id(999) is None
    assert (await services.users.find_by_email("FIRST@acme.io")).id == first.id
    assert await services.users.find_by_email("nobody@acme.io") is None

    assert [u.id for u in await services.users.list_all()] == [first.id, second.id]
    assert [u.id for u in await services.users.find_by_country("ca")] == [second.id]
    assert await services.users.find_by_country("FR") == []

    assert await services.users.any_with_role("admin")
    assert not await services.users.any_with_role("Business Owner")

    assert not await services.users.email_available(" First@ACME.io ")
    assert await services.users.email_available("new@acme.io")

    with pytest.raises(NotFoundError, match="User not found with ID: 999"):
        await services.users.get_user(999)


# ------------------------------------------------------------------- mutations
async def test_update_profile(services, create_user):
    user, _ = await create_user(phoneNumber="+15551112222", country="US")
    updated = await services.users.update_profile(
        user.email, ProfileUpdateIn(firstName="Janet", country="de", phoneNumber="")
    )
    assert updated.firstName == "Janet"
    assert updated.lastName == user.lastName
    assert updated.country == "DE"
    assert updated.phoneNumber is None
    assert updated.email == user.email
    assert updated.roles == user.roles


async def test_update_profile_phone_taken(services, create_user):
    await create_user(phoneNumber="+15553334444")
    user, _ = await create_user()
    with pytest.raises(ConflictError, match="phone number"):
        await services.users.update_profile(user.email, ProfileUpdateIn(phoneNumber="+15553334444"))


async def test_update_profile_keeps_own_phone(services, create_user):
    user, _ = await create_user(phoneNumber="+15553334444")
    updated = await services.users.update_profile(user.email, ProfileUpdateIn(phoneNumber="+15553334444"))
    assert updated.phoneNumber == "+15553334444"


async def test_update_profile_validation(services, create_user):
    user, _ = await create_user()
    with pytest.raises(ValidationError):
        await services.users.update_profile(user.email, ProfileUpdateIn(lastName="N4me"))


async def test_update_profile_unknown_user(services):
    with pytest.raises(NotFoundError):
        await services.users.update_profile("ghost@acme.io", ProfileUpdateIn(firstName="Ghost"))


async def test_change_password(services, create_user):
    user, password = await create_user()
    await services.users.change_password(user.email, password, "Fresh2Pass!", "Fresh2Pass!")

    result = await services.auth.authenticate(user.email, "Fresh2Pass!")
    assert result.userId == user.id
    with pytest.raises(AuthenticationError):
        await services.auth.authenticate(user.email, password)


async def test_change_password_failures(services, create_user):
    user, password = await create_user()

    with pytest.raises(AuthenticationError, match="Current password is incorrect"):
        await services.users.change_password(user.email, "Wrong1Pass!", "Fresh2Pass!", "Fresh2Pass!")

    with pytest.raises(ValidationError) as mismatch:
        await services.users.change_password(user.email, password, "Fresh2Pass!", "Fresh3Pass!")
    assert mismatch.value.errors[0].field == "confirmNewPassword"

    with pytest.raises(ValidationError) as weak:
        await services.users.change_password(user.email, password, "weak", "weak")
    assert weak.value.errors[0].field == "newPassword"


async def test_delete_user_keeps_roles(services, create_user):
    user, _ = await create_user(roles=("Professional",))
    await services.users.delete_user(user.id)

    assert await services.users.find_by_id(user.id) is None
    professional = await services.roles.get_role_by_name("Professional")
    assert await services.roles.count_holders(professional.id) == 0

    with pytest.raises(NotFoundError):
        await services.users.delete_user(user.id)
