import pytest

from group_membership_api.app.core.errors import (
    DatabaseOperationError,
    ForbiddenError,
    ParameterError,
    database_operation,
)
from group_membership_api.app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from group_membership_api.app.core.validators import require_non_empty_string, require_number


def test_require_non_empty_string():
    assert require_non_empty_string("Contest Prep", "name") == "Contest Prep"
    assert require_non_empty_string(None, "description", required=False) is None

    for value in (None, "", "   "):
        with pytest.raises(ParameterError) as excinfo:
            require_non_empty_string(value, "name")
        assert excinfo.value.message == "parameterEmpty"
        assert excinfo.value.parameter == "name"

    with pytest.raises(ParameterError) as excinfo:
        require_non_empty_string(5, "name")
    assert excinfo.value.message == "parameterInvalid"


def test_require_number():
    assert require_number(5, "group_id") == 5
    assert require_number(" 12 ", "group_id") == 12
    assert require_number(str(2 ** 63 - 1), "group_id") == 2 ** 63 - 1
    for value in (None, "", "1.5", "-3", "abc", True, 2.0, "²", "١٢", "99999999999999999999", 2 ** 63):
        with pytest.raises(ParameterError) as excinfo:
            require_number(value, "group_id")
        assert excinfo.value.message == "parameterNotANumber"
        assert excinfo.value.parameter == "group_id"


def test_database_operation_wraps_foreign_errors():
    with pytest.raises(DatabaseOperationError) as excinfo:
        with database_operation("testing"):
            raise KeyError("owner_id")
    assert isinstance(excinfo.value.__cause__, KeyError)

    with pytest.raises(ForbiddenError):
        with database_operation("testing"):
            raise ForbiddenError()


def test_access_token_round_trip():
    token = create_access_token({"sub": "ana"})
    payload = decode_access_token(token)
    assert payload["sub"] == "ana"
    assert "exp" in payload


def test_tampered_and_expired_tokens_are_rejected():
    header, payload, signature = create_access_token({"sub": "ana"}).split(".")
    forged = create_access_token({"sub": "admin"}).split(".")[1]
    assert decode_access_token(f"{header}.{forged}.{signature}") is None
    assert decode_access_token("garbage") is None
    assert decode_access_token(create_access_token({"sub": "ana"}, expires_delta=-10)) is None


def test_password_hashing():
    hashed = hash_password("secret-pass")
    assert verify_password("secret-pass", hashed)
    assert not verify_password("other", hashed)
    assert not verify_password("secret-pass", None)
    assert not verify_password("secret-pass", "zz$zz")
