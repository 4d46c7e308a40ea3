"""Evidence fabrication.

The culprit picks one fake statement from the case's candidate pool. What
players then see is every true statement plus that fake, with the name
placeholder swapped for the culprit's nickname.
"""

from flask import current_app

from casefile import db
from casefile.models import Case, OriginalEvidence, SubmittedEvidence
from .errors import InvalidInputError, NotFoundError

DEFAULT_PLACEHOLDER = '{name}'


def normalize_selection(selection) -> str:
    """Accept a single string or a list of strings; return the chosen fake text."""
    if isinstance(selection, (list, tuple)):
        selection = selection[0] if selection else None
    if not isinstance(selection, str) or not selection.strip():
        raise InvalidInputError('No fake evidence was selected', field='fake_evidence')
    return selection


def build_submitted_evidence(true_statements, fake_statement: str, culprit_name: str,
                             placeholder: str = DEFAULT_PLACEHOLDER) -> list[tuple[str, bool]]:
    """Pure transformation: (true statements, chosen fake, culprit) -> rows to show.

    Order is the true statements as given, then the substituted fake.
    """
    rows = [(text, True) for text in true_statements]
    rows.append((fake_statement.replace(placeholder, culprit_name), False))
    return rows


def select_fake(case_id: int, fake_text: str) -> OriginalEvidence:
    fake = (
        OriginalEvidence.query
        .filter_by(case_id=case_id, is_fake_candidate=True, description=fake_text)
        .order_by(OriginalEvidence.id)
        .first()
    )
    if fake is None:
        raise NotFoundError('fake_evidence', fake_text)
    return fake


def materialize(case_id: int, fake_text: str, culprit_name: str) -> list[SubmittedEvidence]:
    """Replace the submitted evidence for a case. Does not commit."""
    fake = select_fake(case_id, fake_text)
    true_rows = (
        OriginalEvidence.query
        .filter_by(case_id=case_id, is_true=True)
        .order_by(OriginalEvidence.id)
        .all()
    )
    placeholder = current_app.config.get('NAME_PLACEHOLDER', DEFAULT_PLACEHOLDER)
    pairs = build_submitted_evidence([e.description for e in true_rows], fake.description, culprit_name, placeholder)

    SubmittedEvidence.query.filter_by(case_id=case_id).delete(synchronize_session='fetch')
    submitted = [SubmittedEvidence(case_id=case_id, description=text, is_true_evidence=flag) for text, flag in pairs]
    db.session.add_all(submitted)
    return submitted


def fabrication_details(case_id: int) -> dict:
    """Case text plus every original statement, for the culprit's picker."""
    case = db.session.get(Case, case_id)
    if case is None:
        raise NotFoundError('case', case_id)
    evidence = OriginalEvidence.query.filter_by(case_id=case_id).order_by(OriginalEvidence.id).all()
    return {
        'case_id': case.id,
        'case_title': case.title,
        'case_description': case.content,
        'original_evidences': [e.to_dict() for e in evidence],
    }


def submitted_evidence(case_id: int) -> list[SubmittedEvidence]:
    return SubmittedEvidence.query.filter_by(case_id=case_id).order_by(SubmittedEvidence.id).all()
