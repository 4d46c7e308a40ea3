"""Read-only, role-specific case listings.

Each listing reads case and participation columns in one joined SELECT, so
a row never mixes fields from before and after a concurrent transition.
Nicknames are looked up in one batch afterwards; an id that no longer
resolves degrades to a sentinel label instead of failing the listing.
"""

from sqlalchemy import and_, or_

from casefile import db
from casefile.models import User, Case, Participation, CaseSuspect
from . import fabrication
from .errors import NotFoundError
from .workflow import REGISTERED, FABRICATED, ACCEPTING, ASSIGNED, RESULT_CHECKED

UNKNOWN = 'unknown'
UNASSIGNED = 'unassigned'


def _nicknames(ids) -> dict[int, str]:
    wanted = {i for i in ids if i is not None}
    if not wanted:
        return {}
    rows = db.session.query(User.id, User.nickname).filter(User.id.in_(wanted)).all()
    return {uid: nick for uid, nick in rows}


def _label(names: dict, user_id, sentinel: str) -> str:
    if user_id is None:
        return sentinel
    return names.get(user_id, sentinel)


def _result_label(is_solved):
    if is_solved is None:
        return None
    return 'solved' if is_solved else 'unsolved'


def _joined(*criteria):
    """(Case, Participation) pairs matching `criteria`, ordered by case id."""
    return (
        db.session.query(Case, Participation)
        .join(Participation, Participation.case_id == Case.id)
        .filter(*criteria)
        .order_by(Case.id)
        .all()
    )


def _suspects_by_case(case_ids) -> dict[int, list[str]]:
    out: dict[int, list[str]] = {cid: [] for cid in case_ids}
    if not case_ids:
        return out
    rows = (
        CaseSuspect.query
        .filter(CaseSuspect.case_id.in_(case_ids))
        .order_by(CaseSuspect.id)
        .all()
    )
    for s in rows:
        out[s.case_id].append(s.suspect_name)
    return out


def _base_row(case: Case, part: Participation) -> dict:
    return {
        'active_id': part.id if part else None,
        'case_id': case.id,
        'case_title': case.title,
        'case_description': case.content,
        'difficulty': case.difficulty,
        'status': case.status,
    }


def available_cases() -> list[dict]:
    return [c.to_dict() for c in Case.query.filter_by(status=REGISTERED).order_by(Case.id).all()]


def culprit_available_cases() -> list[dict]:
    rows = _joined(Case.status == REGISTERED, Participation.culprit_id.is_(None))
    names = _nicknames(p.client_id for _, p in rows)
    listing = []
    for case, part in rows:
        row = _base_row(case, part)
        row['client_nickname'] = _label(names, part.client_id, UNKNOWN)
        listing.append(row)
    return listing


def culprit_cases(culprit_id: int) -> list[dict]:
    rows = _joined(Participation.culprit_id == culprit_id)
    names = _nicknames(p.client_id for _, p in rows)
    listing = []
    for case, part in rows:
        row = _base_row(case, part)
        row['client_nickname'] = _label(names, part.client_id, UNKNOWN)
        row['fake_evidence_selected'] = case.status == FABRICATED
        listing.append(row)
    return listing


def _police_rows(rows) -> list[dict]:
    names = _nicknames([p.client_id for _, p in rows] + [p.culprit_id for _, p in rows])
    listing = []
    for case, part in rows:
        row = _base_row(case, part)
        row['client_nickname'] = _label(names, part.client_id, UNKNOWN)
        row['culprit_nickname'] = _label(names, part.culprit_id, UNASSIGNED)
        listing.append(row)
    return listing


def police_pending_cases(police_id: int | None = None) -> list[dict]:
    """Cases waiting for a detective: fabricated ones, plus ones this officer accepted."""
    criteria = Case.status == FABRICATED
    if police_id is not None:
        criteria = or_(criteria, and_(Case.status == ACCEPTING, Participation.police_id == police_id))
    return _police_rows(_joined(criteria))


def police_cases(police_id: int) -> list[dict]:
    # Low volume: scan participations and filter here
    mine = [p for p in Participation.query.order_by(Participation.case_id).all() if p.police_id == police_id]
    if not mine:
        return []
    return _police_rows(_joined(Participation.id.in_([p.id for p in mine])))


def client_cases(client_id: int) -> list[dict]:
    rows = _joined(Participation.client_id == client_id)
    names = _nicknames(p.detective_id for _, p in rows)
    listing = []
    for case, part in rows:
        row = _base_row(case, part)
        row['detective_nickname'] = _label(names, part.detective_id, UNASSIGNED)
        row['result'] = _result_label(part.is_solved) if case.status == RESULT_CHECKED else None
        listing.append(row)
    return listing


def _detective_rows(detective_id: int, status: str, with_outcome: bool) -> list[dict]:
    rows = _joined(Participation.detective_id == detective_id, Case.status == status)
    ids = []
    for case, part in rows:
        ids.extend([part.client_id, part.police_id, part.detective_guess_id, case.true_culprit_id])
    names = _nicknames(ids)
    suspects = _suspects_by_case([case.id for case, _ in rows])
    listing = []
    for case, part in rows:
        row = _base_row(case, part)
        row['client_nickname'] = _label(names, part.client_id, UNKNOWN)
        row['police_nickname'] = _label(names, part.police_id, UNASSIGNED)
        row['suspects'] = suspects.get(case.id, [])
        if with_outcome:
            row['culprit_guess'] = _label(names, part.detective_guess_id, UNASSIGNED)
            row['actual_culprit'] = _label(names, case.true_culprit_id, UNKNOWN)
            row['result'] = _result_label(part.is_solved)
        else:
            row['culprit_guess'] = None
            row['actual_culprit'] = None
            row['result'] = None
        listing.append(row)
    return listing


def detective_assigned_cases(detective_id: int) -> list[dict]:
    return _detective_rows(detective_id, ASSIGNED, with_outcome=False)


def detective_completed_cases(detective_id: int) -> list[dict]:
    return _detective_rows(detective_id, RESULT_CHECKED, with_outcome=True)


def case_details(case_id: int) -> dict:
    case = db.session.get(Case, case_id)
    if case is None:
        raise NotFoundError('case', case_id)
    part = Participation.query.filter_by(case_id=case_id).first()
    culprit_id = part.culprit_id if part else None
    names = _nicknames([culprit_id])
    return {
        'case': case.to_dict(),
        'culprit_name': _label(names, culprit_id, UNASSIGNED),
        'evidence': [e.to_dict() for e in fabrication.submitted_evidence(case_id)],
    }
