import pytest

from group_membership_api.app.core.db import get_connection
from group_membership_api.app.core.errors import DatabaseOperationError, ForbiddenError, ParameterError
from group_membership_api.app.dao import GROUPS, GROUPS_USERS, EntityStore
from group_membership_api.app.services.group_service import GroupService, is_group_owner
from group_membership_api.app.services.user_service import UserService


@pytest.fixture
def service(conn):
    return GroupService(conn)


@pytest.fixture
def owner(add_user):
    return add_user("owner")


@pytest.fixture
def group_id(conn, owner):
    group = {"owner_id": owner, "name": "Contest Prep", "description": "Weekly practice"}
    EntityStore(conn, GROUPS).save(group)
    return group["group_id"]


def _memberships(conn):
    return EntityStore(conn, GROUPS_USERS).get_all()


def test_is_group_owner():
    assert is_group_owner(42, {"owner_id": 42})
    assert not is_group_owner(7, {"owner_id": 42})


@pytest.mark.asyncio
async def test_create_group_is_listed_only_for_its_owner(service, owner, add_user):
    other = add_user("other")

    assert await service.create_group(owner, "Contest Prep") == {"status": "ok"}

    listed = await service.list_groups(owner)
    assert listed["status"] == "ok"
    assert [g["name"] for g in listed["groups"]] == ["Contest Prep"]
    assert listed["groups"][0]["owner_id"] == owner
    assert listed["groups"][0]["description"] is None
    assert await service.list_groups(other) == {"status": "ok", "groups": []}


@pytest.mark.asyncio
async def test_create_group_with_empty_name_writes_nothing(conn, service, owner):
    with pytest.raises(ParameterError) as excinfo:
        await service.create_group(owner, "")
    assert excinfo.value.parameter == "name"

    with pytest.raises(ParameterError) as excinfo:
        await service.create_group(owner, None)
    assert excinfo.value.parameter == "name"
    assert EntityStore(conn, GROUPS).get_all() == []


@pytest.mark.asyncio
async def test_create_group_validates_before_touching_the_database(db_path, owner):
    closed = get_connection(db_path)
    closed.close()
    with pytest.raises(ParameterError) as excinfo:
        await GroupService(closed).create_group(owner, "   ")
    assert excinfo.value.parameter == "name"


@pytest.mark.asyncio
async def test_create_group_rejects_blank_description(service, owner):
    with pytest.raises(ParameterError) as excinfo:
        await service.create_group(owner, "Contest Prep", "")
    assert excinfo.value.parameter == "description"


@pytest.mark.asyncio
async def test_add_member_shows_up_in_details(service, owner, group_id, add_user):
    member = add_user("ana", name="Ana López")

    assert await service.add_member(owner, group_id, "ana") == {"status": "ok"}

    details = await service.get_group_details(owner, group_id)
    assert details["status"] == "ok"
    assert details["group"] == {
        "group_id": group_id,
        "owner_id": owner,
        "name": "Contest Prep",
        "description": "Weekly practice",
    }
    assert details["users"] == [{"user_id": member, "username": "ana", "name": "Ana López"}]


@pytest.mark.asyncio
async def test_add_member_accepts_numeric_string_group_id(conn, service, owner, group_id, add_user):
    add_user("ana")
    await service.add_member(owner, str(group_id), "ana")
    assert len(_memberships(conn)) == 1


@pytest.mark.asyncio
async def test_add_member_twice_is_a_no_op(conn, service, owner, group_id, add_user):
    add_user("ana")
    await service.add_member(owner, group_id, "ana")
    assert await service.add_member(owner, group_id, "ana") == {"status": "ok"}
    assert len(_memberships(conn)) == 1


@pytest.mark.asyncio
async def test_add_member_by_non_owner_is_forbidden(conn, service, group_id, add_user):
    intruder = add_user("intruder")
    add_user("ana")

    with pytest.raises(ForbiddenError):
        await service.add_member(intruder, group_id, "ana")
    assert _memberships(conn) == []


@pytest.mark.asyncio
async def test_group_validation_errors(service, owner, group_id):
    with pytest.raises(ParameterError) as excinfo:
        await service.add_member(owner, "abc", "ana")
    assert excinfo.value.message == "parameterNotANumber"
    assert excinfo.value.parameter == "group_id"

    with pytest.raises(ParameterError) as excinfo:
        await service.get_group_details(owner, group_id + 100)
    assert excinfo.value.message == "parameterNotFound"
    assert excinfo.value.parameter == "Group"


@pytest.mark.asyncio
async def test_add_unknown_user_is_parameter_error(conn, service, owner, group_id):
    with pytest.raises(ParameterError) as excinfo:
        await service.add_member(owner, group_id, "nobody")
    assert excinfo.value.parameter == "User"

    with pytest.raises(ParameterError) as excinfo:
        await service.add_member(owner, group_id, "")
    assert excinfo.value.parameter == "username"
    assert _memberships(conn) == []


@pytest.mark.asyncio
async def test_remove_member(conn, service, owner, group_id, add_user):
    add_user("ana")
    add_user("beto")
    await service.add_member(owner, group_id, "ana")
    await service.add_member(owner, group_id, "beto")

    assert await service.remove_member(owner, group_id, "ana") == {"status": "ok"}

    details = await service.get_group_details(owner, group_id)
    assert [u["username"] for u in details["users"]] == ["beto"]


@pytest.mark.asyncio
async def test_remove_non_member_is_parameter_error(conn, service, owner, group_id, add_user):
    add_user("ana")
    add_user("beto")
    await service.add_member(owner, group_id, "ana")

    with pytest.raises(ParameterError) as excinfo:
        await service.remove_member(owner, group_id, "beto")
    assert excinfo.value.message == "parameterNotFound"
    assert excinfo.value.parameter == "User"
    assert len(_memberships(conn)) == 1


@pytest.mark.asyncio
async def test_remove_and_details_by_non_owner_are_forbidden(service, group_id, add_user):
    intruder = add_user("intruder")
    with pytest.raises(ForbiddenError):
        await service.remove_member(intruder, group_id, "intruder")
    with pytest.raises(ForbiddenError):
        await service.get_group_details(intruder, group_id)


@pytest.mark.asyncio
async def test_persistence_failures_are_wrapped(db_path, owner):
    closed = get_connection(db_path)
    closed.close()
    with pytest.raises(DatabaseOperationError):
        await GroupService(closed).list_groups(owner)


class _BrokenProfiles(UserService):
    def __init__(self, conn, error):
        super().__init__(conn)
        self.error = error

    async def get_profile(self, user_id):
        raise self.error


@pytest.mark.asyncio
async def test_collaborator_errors_are_wrapped_unless_already_api_errors(conn, service, owner, group_id, add_user):
    add_user("ana")
    await service.add_member(owner, group_id, "ana")

    broken = GroupService(conn, users=_BrokenProfiles(conn, RuntimeError("disk on fire")))
    with pytest.raises(DatabaseOperationError) as excinfo:
        await broken.get_group_details(owner, group_id)
    assert "disk on fire" not in str(excinfo.value)

    passthrough = GroupService(conn, users=_BrokenProfiles(conn, ParameterError("parameterNotFound", "User")))
    with pytest.raises(ParameterError):
        await passthrough.get_group_details(owner, group_id)
