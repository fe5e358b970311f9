# tests/test_group_lifecycle.py
import pytest

from app.core.exceptions import AuthorizationError, ConflictError
from app.services import group_lifecycle as lifecycle
from app.services.group_lifecycle import Transition


def test_join_keeps_status_and_announces():
    assert lifecycle.join("scheduled", "alice") == Transition("scheduled", ("alice joined the session",))
    assert lifecycle.join("in_progress", "bob").status == "in_progress"


@pytest.mark.parametrize("status", ["completed", "cancelled"])
def test_join_closed_session(status):
    with pytest.raises(ConflictError):
        lifecycle.join(status, "alice")


def test_start_requires_host_and_scheduled():
    assert lifecycle.start("scheduled", True) == Transition("in_progress", ("Session started",))
    with pytest.raises(AuthorizationError, match="Only the host can start the session"):
        lifecycle.start("scheduled", False)
    with pytest.raises(ConflictError):
        lifecycle.start("in_progress", True)


def test_complete_waits_for_every_active_participant():
    partial = lifecycle.complete_participant("in_progress", ["completed", "joined"])
    assert partial == Transition("in_progress")

    done = lifecycle.complete_participant("in_progress", ["completed", "completed", "left"])
    assert done == Transition("completed", ("Session ended",))


def test_complete_requires_in_progress():
    with pytest.raises(ConflictError):
        lifecycle.complete_participant("scheduled", ["completed"])
    with pytest.raises(ConflictError, match="Session is already completed"):
        lifecycle.complete_participant("completed", ["completed"])


def test_leave_can_finish_the_session():
    t = lifecycle.leave("in_progress", "carol", ["completed", "left"])
    assert t.status == "completed"
    assert t.messages == ("carol left the session", "Session ended")


def test_leave_before_start_only_announces():
    t = lifecycle.leave("scheduled", "carol", ["left"])
    assert t == Transition("scheduled", ("carol left the session",))


def test_everyone_left_is_not_completion():
    assert lifecycle.leave("in_progress", "dave", ["left", "left"]).status == "in_progress"
    assert not lifecycle.everyone_completed([])


def test_end_by_host():
    assert lifecycle.end("in_progress", True) == Transition("completed", ("Session ended by the host",))
    with pytest.raises(AuthorizationError):
        lifecycle.end("in_progress", False)
    with pytest.raises(ConflictError):
        lifecycle.end("scheduled", True)


@pytest.mark.parametrize("status", ["scheduled", "in_progress"])
def test_cancel_allowed_before_completion(status):
    t = lifecycle.cancel(status, True)
    assert t.status == "cancelled"
    assert t.messages == ("Session has been cancelled by the host",)


@pytest.mark.parametrize("status", ["completed", "cancelled"])
def test_cancel_rejected_when_finished(status):
    with pytest.raises(ConflictError, match="Session cannot be cancelled"):
        lifecycle.cancel(status, True)


def test_cancel_requires_host():
    with pytest.raises(AuthorizationError, match="Only the host can cancel the session"):
        lifecycle.cancel("scheduled", False)
