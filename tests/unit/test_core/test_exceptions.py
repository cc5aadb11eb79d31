"""Tests for core exceptions."""

import pytest

from problem_service.core import exceptions as exc
from problem_service.core.schemas.problem_details import ProblemDetail


def test_problem_exception_normalizes_status() -> None:
    error = exc.ProblemException(ProblemDetail(title="Oops"))
    assert error.problem.status == 500


def test_problem_exception_keeps_explicit_status(out_of_credit: ProblemDetail) -> None:
    error = exc.ProblemException(out_of_credit)
    assert error.problem is out_of_credit
    assert error.problem.status == 403


@pytest.mark.parametrize("status", [0, -1])
def test_normalize_status_replaces_non_positive(status: int) -> None:
    problem = ProblemDetail(status=status)
    assert exc.normalize_status(problem) is problem
    assert problem.status == 500


def test_message_prefers_detail(out_of_credit: ProblemDetail) -> None:
    error = exc.ProblemException(out_of_credit)
    assert error.message == "Your current balance is 30, but that costs 50."
    assert str(error) == error.message


def test_message_falls_back_to_title() -> None:
    error = exc.ProblemException(ProblemDetail(status=403, title="Forbidden"))
    assert error.message == "Forbidden"


def test_message_empty_without_detail_or_title() -> None:
    error = exc.ProblemException.from_status(418)
    assert error.message == ""
    assert error.problem.to_wire() == {"status": 418}


def test_default_title_for_known_and_unknown_codes() -> None:
    assert exc.default_title(404) == "Not Found"
    assert exc.default_title(799) is None


@pytest.mark.parametrize(
    ("exception_cls", "status", "title"),
    [
        (exc.BadRequestProblem, 400, "Bad Request"),
        (exc.UnauthorizedProblem, 401, "Unauthorized"),
        (exc.ForbiddenProblem, 403, "Forbidden"),
        (exc.NotFoundProblem, 404, "Not Found"),
        (exc.ConflictProblem, 409, "Conflict"),
        (exc.TooManyRequestsProblem, 429, "Too Many Requests"),
        (exc.ServiceUnavailableProblem, 503, "Service Unavailable"),
    ],
)
def test_preset_problems(exception_cls: type[exc.ProblemException], status: int, title: str) -> None:
    error = exception_cls("missing")
    assert isinstance(error, exc.ProblemException)
    assert error.problem.status == status
    assert error.problem.title == title
    assert error.problem.detail == "missing"


def test_preset_problem_fields() -> None:
    error = exc.NotFoundProblem(
        "User with ID abc123 not found",
        type="https://example.com/probs/user-not-found",
        title="User not found",
        instance="/users/abc123",
        extensions={"user_id": "abc123"},
    )
    assert error.problem.to_wire() == {
        "type": "https://example.com/probs/user-not-found",
        "title": "User not found",
        "status": 404,
        "detail": "User with ID abc123 not found",
        "instance": "/users/abc123",
        "user_id": "abc123",
    }


def test_too_many_requests_merges_retry_after() -> None:
    error = exc.TooManyRequestsProblem("slow down", extensions={"limit": 10}, retry_after=30)
    assert error.problem.extensions == {"limit": 10, "retry_after": 30}


def test_too_many_requests_without_retry_after() -> None:
    error = exc.TooManyRequestsProblem("slow down")
    assert "retry_after" not in error.problem.extensions
