import pytest
from fastapi.testclient import TestClient

from group_membership_api.app.core.db import get_connection, get_db, init_db
from group_membership_api.app.dao import USERS, EntityStore
from group_membership_api.app.main import app


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "groups-test.db")
    init_db(path)
    return path


@pytest.fixture
def conn(db_path):
    connection = get_connection(db_path)
    yield connection
    connection.close()


@pytest.fixture
def add_user(conn):
    """Insert a user row directly and return its id."""
    store = EntityStore(conn, USERS)

    def _add_user(username, name=None):
        user = {"username": username, "name": name or username.title()}
        store.save(user)
        return user["user_id"]

    return _add_user


@pytest.fixture
def client(db_path):
    def _test_db():
        connection = get_connection(db_path)
        try:
            yield connection
        finally:
            connection.close()

    app.dependency_overrides[get_db] = _test_db
    yield TestClient(app)
    app.dependency_overrides.clear()
