"""Tests for the error taxonomy."""

import pytest

from talecraft.core.errors import (
    AppError,
    ConflictError,
    ErrorKind,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    UnauthenticatedError,
    UnexpectedError,
    status_for,
)


class TestErrorKinds:
    @pytest.mark.parametrize(
        ("error_class", "kind", "status"),
        [
            (UnauthenticatedError, ErrorKind.UNAUTHENTICATED, 401),
            (InvalidInputError, ErrorKind.INVALID_INPUT, 400),
            (NotFoundError, ErrorKind.NOT_FOUND, 404),
            (ForbiddenError, ErrorKind.FORBIDDEN, 403),
            (ConflictError, ErrorKind.CONFLICT, 409),
            (UnexpectedError, ErrorKind.UNEXPECTED, 500),
        ],
    )
    def test_each_kind_has_one_class_and_status(self, error_class, kind, status) -> None:
        error = error_class()
        assert isinstance(error, AppError)
        assert error.kind is kind
        assert error.status_code == status

    def test_every_kind_maps_to_a_status(self) -> None:
        assert {kind: status_for(kind) for kind in ErrorKind} == {
            ErrorKind.UNAUTHENTICATED: 401,
            ErrorKind.INVALID_INPUT: 400,
            ErrorKind.NOT_FOUND: 404,
            ErrorKind.FORBIDDEN: 403,
            ErrorKind.CONFLICT: 409,
            ErrorKind.UNEXPECTED: 500,
        }

    def test_custom_message(self) -> None:
        error = NotFoundError("Story not found.")
        assert error.message == "Story not found."
        assert str(error) == "Story not found."

    def test_forbidden_default_message_is_generic(self) -> None:
        assert ForbiddenError().message == "You do not have permission to perform this action."
