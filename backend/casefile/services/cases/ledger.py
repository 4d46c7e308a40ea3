"""Score ledger.

Every score change is a ScoreLog row plus an in-place increment of the
user's cached score, issued in the caller's transaction so both land or
neither does.
"""

from flask import current_app
from sqlalchemy import func, select

from casefile import db
from casefile.models import User, ScoreLog
from .errors import NotFoundError


def award(user_id: int, case_id: int | None, delta: int, reason: str) -> ScoreLog:
    """Append a ledger entry and add `delta` to the user's cached score.

    Does not commit. The increment is a single ``score = score + delta``
    UPDATE, so concurrent awards to one user never lose an update.
    """
    updated = (
        User.query
        .filter_by(id=user_id)
        .update({User.score: User.score + delta}, synchronize_session='fetch')
    )
    if updated != 1:
        raise NotFoundError('user', user_id)
    entry = ScoreLog(user_id=user_id, case_id=case_id, delta=delta, reason=reason)
    db.session.add(entry)
    current_app.logger.info(f"[award] user={user_id} case={case_id} delta={delta:+d} reason={reason}")
    return entry


def history(user_id: int) -> list[ScoreLog]:
    if db.session.get(User, user_id) is None:
        raise NotFoundError('user', user_id)
    return (
        ScoreLog.query
        .filter_by(user_id=user_id)
        .order_by(ScoreLog.log_time.desc(), ScoreLog.id.desc())
        .all()
    )


def ledger_total(user_id: int) -> int:
    total = db.session.query(func.coalesce(func.sum(ScoreLog.delta), 0)).filter(ScoreLog.user_id == user_id).scalar()
    return int(total or 0)


def _ledger_sum():
    # Correlated per-user sum, evaluated by the statement that embeds it
    return (
        select(func.coalesce(func.sum(ScoreLog.delta), 0))
        .where(ScoreLog.user_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )


def _find_mismatches() -> list[dict]:
    ledger_sum = _ledger_sum()
    rows = (
        db.session.query(User.id, User.nickname, User.score, ledger_sum)
        .filter(User.score != ledger_sum)
        .order_by(User.id)
        .all()
    )
    return [
        {'user_id': user_id, 'nickname': nickname, 'cached': cached, 'ledger': int(total)}
        for user_id, nickname, cached, total in rows
    ]


def repair_scores(user_ids) -> int:
    """Rewrite cached scores from the ledger in one UPDATE.

    The sum is computed inside the UPDATE itself, so awards committed after
    the mismatch scan are included. Does not commit.
    """
    if not user_ids:
        return 0
    return (
        User.query
        .filter(User.id.in_(user_ids))
        .update({User.score: _ledger_sum()}, synchronize_session=False)
    )


def reconcile(fix: bool = False) -> list[dict]:
    """Compare each cached score with the sum of its ledger entries.

    Returns one record per mismatching user. With ``fix=True`` the cached
    scores are rewritten from the ledger and committed.
    """
    mismatches = _find_mismatches()
    if mismatches:
        current_app.logger.warning(f"[reconcile] {len(mismatches)} score mismatch(es) fix={fix}")
        if fix:
            repair_scores([m['user_id'] for m in mismatches])
            db.session.commit()
    return mismatches
