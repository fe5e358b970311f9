# app/services/group_lifecycle.py
"""
Переходы групповой сессии без побочных эффектов.

scheduled -> in_progress -> completed, scheduled|in_progress -> cancelled.
Каждая функция проверяет допустимость перехода и возвращает Transition:
новый статус и системные сообщения, которые сервис должен записать в чат.
"""
from dataclasses import dataclass
from typing import Iterable, Tuple
from app.core.exceptions import AuthorizationError, ConflictError
from app.models.group import GroupSessionStatus, ParticipantStatus

SCHEDULED = GroupSessionStatus.SCHEDULED.value
IN_PROGRESS = GroupSessionStatus.IN_PROGRESS.value
COMPLETED = GroupSessionStatus.COMPLETED.value
CANCELLED = GroupSessionStatus.CANCELLED.value

JOINABLE = (SCHEDULED, IN_PROGRESS)
TERMINAL = (COMPLETED, CANCELLED)

SESSION_STARTED = "Session started"
SESSION_ENDED = "Session ended"
SESSION_ENDED_BY_HOST = "Session ended by the host"
SESSION_CANCELLED = "Session has been cancelled by the host"


@dataclass(frozen=True)
class Transition:
    status: str
    messages: Tuple[str, ...] = ()


def everyone_completed(participant_statuses: Iterable[str]) -> bool:
    """Все, кто не вышел, завершили; пустая группа не считается завершенной"""
    active = [s for s in participant_statuses if s != ParticipantStatus.LEFT.value]
    return bool(active) and all(s == ParticipantStatus.COMPLETED.value for s in active)


def join(status: str, username: str) -> Transition:
    if status not in JOINABLE:
        raise ConflictError("Session is not open for joining")
    return Transition(status, (f"{username} joined the session",))


def leave(status: str, username: str, remaining_statuses: Iterable[str]) -> Transition:
    """remaining_statuses - статусы участников уже после выхода"""
    if status in TERMINAL:
        raise ConflictError("Session is already finished")
    messages = (f"{username} left the session",)
    if status == IN_PROGRESS and everyone_completed(remaining_statuses):
        return Transition(COMPLETED, messages + (SESSION_ENDED,))
    return Transition(status, messages)


def start(status: str, is_host: bool) -> Transition:
    if not is_host:
        raise AuthorizationError("Only the host can start the session")
    if status != SCHEDULED:
        raise ConflictError("Session cannot be started")
    return Transition(IN_PROGRESS, (SESSION_STARTED,))


def complete_participant(status: str, participant_statuses: Iterable[str]) -> Transition:
    """participant_statuses - статусы уже с учетом завершившего участника"""
    if status == COMPLETED:
        raise ConflictError("Session is already completed")
    if status != IN_PROGRESS:
        raise ConflictError("Session is not in progress")
    if everyone_completed(participant_statuses):
        return Transition(COMPLETED, (SESSION_ENDED,))
    return Transition(status)


def end(status: str, is_host: bool) -> Transition:
    if not is_host:
        raise AuthorizationError("Only the host can end the session")
    if status != IN_PROGRESS:
        raise ConflictError("Session is not in progress")
    return Transition(COMPLETED, (SESSION_ENDED_BY_HOST,))


def cancel(status: str, is_host: bool) -> Transition:
    if not is_host:
        raise AuthorizationError("Only the host can cancel the session")
    if status in TERMINAL:
        raise ConflictError("Session cannot be cancelled")
    return Transition(CANCELLED, (SESSION_CANCELLED,))
