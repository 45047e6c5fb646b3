from __future__ import annotations

import pytest

from app.validation import (
    EMAIL_MESSAGE,
    ID_MESSAGE,
    MAX_USER_ID,
    UNKNOWN_FIELD_MESSAGE,
    USERNAME_MESSAGE,
    Invalid,
    OperationKind,
    Valid,
    validate,
)

VALID_BODY = {"username": "ryan", "email": "ryan@ryan.com"}


def test_read_always_succeeds() -> None:
    result = validate(OperationKind.READ, {"id": "not-used"}, {"unexpected": True})

    assert isinstance(result, Valid)
    assert result.user_id is None
    assert result.payload is None


@pytest.mark.parametrize("kind", [OperationKind.READ_ONE, OperationKind.DELETE])
@pytest.mark.parametrize("raw_id", ["null", "", "-1", "1.5", "abc", " 1", "1\n", None, str(MAX_USER_ID + 1)])
def test_id_must_be_a_non_negative_integer(kind: OperationKind, raw_id: object) -> None:
    result = validate(kind, {"id": raw_id})

    assert isinstance(result, Invalid)
    assert [(error.param, error.msg) for error in result.errors] == [("id", ID_MESSAGE)]


@pytest.mark.parametrize("kind", [OperationKind.READ_ONE, OperationKind.DELETE])
def test_id_is_parsed_when_valid(kind: OperationKind) -> None:
    result = validate(kind, {"id": "42"})

    assert isinstance(result, Valid)
    assert result.user_id == 42


def test_missing_id_is_reported() -> None:
    result = validate(OperationKind.READ_ONE, {})

    assert isinstance(result, Invalid)
    assert result.failures() == [{"param": "id", "msg": ID_MESSAGE, "value": None}]


def test_create_builds_typed_payload() -> None:
    result = validate(OperationKind.CREATE, body_fields=VALID_BODY)

    assert isinstance(result, Valid)
    assert result.payload is not None
    assert result.payload.username == "ryan"
    assert result.payload.email == "ryan@ryan.com"


def test_create_accumulates_username_and_email_failures() -> None:
    result = validate(OperationKind.CREATE, body_fields={"username": None, "email": "111111"})

    assert isinstance(result, Invalid)
    assert [(error.param, error.msg) for error in result.errors] == [
        ("username", USERNAME_MESSAGE),
        ("email", EMAIL_MESSAGE),
    ]
    assert result.errors[1].value == "111111"


def test_create_with_missing_fields_reports_both() -> None:
    result = validate(OperationKind.CREATE, body_fields={})

    assert isinstance(result, Invalid)
    assert [error.param for error in result.errors] == ["username", "email"]


@pytest.mark.parametrize("email", ["", "ryan", "ryan@", "@ryan.com", "ryan smith@ryan.com", None, 12])
def test_create_rejects_invalid_email(email: object) -> None:
    result = validate(OperationKind.CREATE, body_fields={"username": "ryan", "email": email})

    assert isinstance(result, Invalid)
    assert [(error.param, error.msg) for error in result.errors] == [("email", EMAIL_MESSAGE)]


@pytest.mark.parametrize("email", ["ryan@ryan.test", "ryan@host.local", '"ryan smith"@ryan.com'])
def test_create_accepts_syntactically_valid_email(email: str) -> None:
    result = validate(OperationKind.CREATE, body_fields={"username": "ryan", "email": email})

    assert isinstance(result, Valid)
    assert result.payload is not None
    assert result.payload.email == email


def test_create_rejects_empty_username() -> None:
    result = validate(OperationKind.CREATE, body_fields={"username": "", "email": "ryan@ryan.com"})

    assert isinstance(result, Invalid)
    assert [(error.param, error.msg) for error in result.errors] == [("username", USERNAME_MESSAGE)]


def test_numeric_username_is_accepted_as_text() -> None:
    result = validate(OperationKind.CREATE, body_fields={"username": 1234, "email": "ryan@ryan.com"})

    assert isinstance(result, Valid)
    assert result.payload is not None
    assert result.payload.username == "1234"


def test_unknown_body_fields_are_rejected_after_known_checks() -> None:
    result = validate(
        OperationKind.CREATE,
        body_fields={"admin": True, "username": "", "email": "ryan@ryan.com"},
    )

    assert isinstance(result, Invalid)
    assert [(error.param, error.msg) for error in result.errors] == [
        ("username", USERNAME_MESSAGE),
        ("admin", UNKNOWN_FIELD_MESSAGE),
    ]


def test_update_checks_id_before_body() -> None:
    result = validate(OperationKind.UPDATE, {"id": "null"}, {"username": None, "email": "nope"})

    assert isinstance(result, Invalid)
    assert [error.param for error in result.errors] == ["id", "username", "email"]


def test_update_with_valid_input() -> None:
    result = validate(OperationKind.UPDATE, {"id": "7"}, VALID_BODY)

    assert isinstance(result, Valid)
    assert result.user_id == 7
    assert result.payload is not None
    assert result.payload.email == "ryan@ryan.com"


def test_non_mapping_body_is_treated_as_empty() -> None:
    result = validate(OperationKind.CREATE, body_fields=["ryan", "ryan@ryan.com"])  # type: ignore[arg-type]

    assert isinstance(result, Invalid)
    assert len(result.errors) == 2


def test_operation_kind_accepts_string_values() -> None:
    assert isinstance(validate("read"), Valid)
    with pytest.raises(ValueError):
        validate("patch")
