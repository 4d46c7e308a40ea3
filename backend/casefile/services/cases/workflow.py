"""Case lifecycle state machine.

Case states: registered → fabricated → (accepting) → assigned → result_checked

The transition table below is the only place status guards live. Service
operations ask it for the next status and then apply the change with a
compare-and-set so two requests can't both pass the same guard.
"""

from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from casefile import db
from casefile.models import Case
from .errors import CaseServiceError, ConflictError, StorageFailureError


REGISTERED = 'registered'
FABRICATED = 'fabricated'
ACCEPTING = 'accepting'
ASSIGNED = 'assigned'
RESULT_CHECKED = 'result_checked'

STATUS_ORDER = (REGISTERED, FABRICATED, ACCEPTING, ASSIGNED, RESULT_CHECKED)

CLIENT_REQUEST = 'client_request'
CULPRIT_JOIN = 'culprit_join'
FABRICATE = 'fabricate'
POLICE_ACCEPT = 'police_accept'
POLICE_ASSIGN = 'police_assign'
DETECTIVE_GUESS = 'detective_guess'

VALID_TRANSITIONS: dict[tuple[str, str], str] = {
    (REGISTERED, CLIENT_REQUEST): REGISTERED,
    (REGISTERED, CULPRIT_JOIN): REGISTERED,
    (REGISTERED, FABRICATE): FABRICATED,
    # Culprit may swap the fake before the police pick the case up
    (FABRICATED, FABRICATE): FABRICATED,
    (FABRICATED, POLICE_ACCEPT): ACCEPTING,
    (FABRICATED, POLICE_ASSIGN): ASSIGNED,
    (ACCEPTING, POLICE_ASSIGN): ASSIGNED,
    (ASSIGNED, DETECTIVE_GUESS): RESULT_CHECKED,
}


def allowed_from(operation: str) -> list[str]:
    return [s for (s, op) in VALID_TRANSITIONS if op == operation]


def can_transition(current: str, operation: str) -> bool:
    return (current, operation) in VALID_TRANSITIONS


def next_status(current: str, operation: str) -> str:
    """Return the status `operation` leads to from `current`, or raise ConflictError."""
    try:
        return VALID_TRANSITIONS[(current, operation)]
    except KeyError:
        raise ConflictError(
            f"Cannot {operation} a case in status '{current}'. "
            f"Allowed from: {allowed_from(operation)}",
            guard=f"{operation}_requires_status",
        ) from None


def advance(case: Case, operation: str) -> str:
    """Move `case` along the table for `operation`.

    The UPDATE is conditioned on the status we validated against; if another
    transaction moved the case first, zero rows match and we report a conflict.
    """
    current = case.status
    target = next_status(current, operation)
    if target == current:
        return target
    updated = (
        Case.query
        .filter_by(id=case.id, status=current)
        .update({'status': target}, synchronize_session='fetch')
    )
    if updated != 1:
        raise ConflictError(
            f"Case {case.id} left status '{current}' before {operation} completed",
            guard=f"{operation}_requires_status",
        )
    return target


@contextmanager
def unit_of_work(operation: str):
    """Run one workflow operation as a single transaction.

    Commits on success; rolls back on any error so no partial effect is
    visible. Driver/ORM failures are reported as StorageFailureError.
    """
    try:
        yield db.session
        db.session.commit()
    except CaseServiceError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[storage-failure] op={operation} error={exc}")
        raise StorageFailureError(operation) from exc
    except Exception:
        db.session.rollback()
        raise
