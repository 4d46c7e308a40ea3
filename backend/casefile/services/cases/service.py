from flask import current_app
from sqlalchemy.exc import IntegrityError

from casefile import db
from casefile.models import ROLES, User, Case, Participation, CaseSuspect, OriginalEvidence
from . import fabrication, ledger, workflow
from .errors import InvalidInputError, NotFoundError, ConflictError


def _points(key: str, default: int) -> int:
    try:
        return int(current_app.config.get(key, default))
    except (TypeError, ValueError):
        return default


def _get_case(case_id) -> Case:
    case = db.session.get(Case, case_id) if case_id is not None else None
    if case is None:
        raise NotFoundError('case', case_id)
    return case


def _get_user(user_id) -> User:
    user = db.session.get(User, user_id) if user_id is not None else None
    if user is None:
        raise NotFoundError('user', user_id)
    return user


def _get_participation(case_id) -> Participation:
    participation = Participation.query.filter_by(case_id=case_id).first()
    if participation is None:
        raise NotFoundError('participation', case_id)
    return participation


def create_user(nickname: str, role: str) -> User:
    if not nickname or not nickname.strip():
        raise InvalidInputError('nickname is required', field='nickname')
    if role not in ROLES:
        raise InvalidInputError(f"role must be one of {list(ROLES)}", field='role')
    with workflow.unit_of_work('create_user'):
        if User.query.filter_by(nickname=nickname).first():
            raise ConflictError(f"Nickname '{nickname}' already exists", guard='nickname_unique')
        user = User(nickname=nickname, role=role, score=0)
        db.session.add(user)
    return user


def create_case(title: str, content: str, difficulty, suspects=None, evidence=None) -> Case:
    """Register a new case with its suspects and original evidence pool.

    `evidence` items are dicts with ``description``, ``is_true`` and
    ``is_fake_candidate``.
    """
    if not title or not content:
        raise InvalidInputError('title and content are required', field='title')
    try:
        difficulty = int(difficulty)
    except (TypeError, ValueError):
        raise InvalidInputError('difficulty must be an integer', field='difficulty') from None
    if not 1 <= difficulty <= 5:
        raise InvalidInputError('difficulty must be between 1 and 5', field='difficulty')

    with workflow.unit_of_work('create_case'):
        case = Case(title=title, content=content, difficulty=difficulty, status=workflow.REGISTERED)
        db.session.add(case)
        db.session.flush()
        for name in suspects or []:
            db.session.add(CaseSuspect(case_id=case.id, suspect_name=name))
        for item in evidence or []:
            db.session.add(OriginalEvidence(
                case_id=case.id,
                description=item['description'],
                is_true=bool(item.get('is_true', True)),
                is_fake_candidate=bool(item.get('is_fake_candidate', False)),
            ))
    current_app.logger.info(f"[create-case] case={case.id} difficulty={difficulty}")
    return case


def client_request(case_id: int, client_id: int) -> Participation:
    """Client opens a case: creates its single participation record."""
    with workflow.unit_of_work(workflow.CLIENT_REQUEST):
        case = _get_case(case_id)
        _get_user(client_id)
        workflow.advance(case, workflow.CLIENT_REQUEST)
        if Participation.query.filter_by(case_id=case_id).first() is not None:
            raise ConflictError(f"Case {case_id} has already been requested", guard='one_participation_per_case')
        participation = Participation(case_id=case_id, client_id=client_id)
        db.session.add(participation)
        try:
            db.session.flush()
        except IntegrityError:
            raise ConflictError(f"Case {case_id} has already been requested", guard='one_participation_per_case') from None
        ledger.award(client_id, case_id, _points('CLIENT_REQUEST_POINTS', 1), 'client_request')
    current_app.logger.info(f"[client-request] case={case_id} client={client_id}")
    return participation


def culprit_join(case_id: int, culprit_id: int) -> Participation:
    with workflow.unit_of_work(workflow.CULPRIT_JOIN):
        case = _get_case(case_id)
        participation = _get_participation(case_id)
        _get_user(culprit_id)
        workflow.advance(case, workflow.CULPRIT_JOIN)
        if participation.culprit_id is not None:
            raise ConflictError(f"Case {case_id} already has a culprit", guard='culprit_already_set')
        # Compare-and-set: only one joiner can flip culprit_id from NULL
        updated = (
            Participation.query
            .filter(Participation.id == participation.id, Participation.culprit_id.is_(None))
            .update({'culprit_id': culprit_id}, synchronize_session='fetch')
        )
        if updated != 1:
            raise ConflictError(f"Case {case_id} already has a culprit", guard='culprit_already_set')
        ledger.award(culprit_id, case_id, _points('CULPRIT_JOIN_POINTS', 1), 'culprit_join')
    current_app.logger.info(f"[culprit-join] case={case_id} culprit={culprit_id}")
    return participation


def fabricate(case_id: int, culprit_id: int, fake_selection) -> Case:
    """Materialize the submitted evidence and mark the case fabricated.

    The first fabrication fixes ``true_culprit_id``. A later one keeps it even
    when a different culprit id is supplied; that case is logged as a warning.
    """
    fake_text = fabrication.normalize_selection(fake_selection)
    with workflow.unit_of_work(workflow.FABRICATE):
        case = _get_case(case_id)
        participation = _get_participation(case_id)
        culprit = _get_user(culprit_id)
        workflow.next_status(case.status, workflow.FABRICATE)
        if participation.culprit_id is None:
            raise ConflictError(f"Case {case_id} has no culprit yet", guard='culprit_not_joined')
        fabrication.materialize(case_id, fake_text, culprit.nickname)
        set_now = (
            Case.query
            .filter(Case.id == case_id, Case.true_culprit_id.is_(None))
            .update({'true_culprit_id': culprit_id}, synchronize_session='fetch')
        )
        if not set_now and case.true_culprit_id != culprit_id:
            current_app.logger.warning(
                f"[fabricate] case={case_id} keeps true_culprit={case.true_culprit_id}; "
                f"evidence rebuilt with name of culprit={culprit_id}"
            )
        new_status = workflow.advance(case, workflow.FABRICATE)
    current_app.logger.info(f"[fabricate] case={case_id} culprit={culprit_id} status={new_status}")
    return case


def police_accept(case_id: int, police_id: int) -> Case:
    with workflow.unit_of_work(workflow.POLICE_ACCEPT):
        case = _get_case(case_id)
        participation = _get_participation(case_id)
        _get_user(police_id)
        new_status = workflow.advance(case, workflow.POLICE_ACCEPT)
        participation.police_id = police_id
    current_app.logger.info(f"[police-accept] case={case_id} police={police_id} status={new_status}")
    return case


def police_assign(case_id: int, police_id: int, detective_id: int) -> Case:
    if police_id is None or detective_id is None:
        raise InvalidInputError('police_id and detective_id are both required', field='detective_id')
    with workflow.unit_of_work(workflow.POLICE_ASSIGN):
        case = _get_case(case_id)
        participation = _get_participation(case_id)
        _get_user(police_id)
        _get_user(detective_id)
        new_status = workflow.advance(case, workflow.POLICE_ASSIGN)
        participation.police_id = police_id
        participation.detective_id = detective_id
        ledger.award(police_id, case_id, _points('POLICE_ASSIGN_POINTS', 2), 'police_assign')
        ledger.award(detective_id, case_id, _points('DETECTIVE_ASSIGN_POINTS', 1), 'detective_assign')
    current_app.logger.info(
        f"[police-assign] case={case_id} police={police_id} detective={detective_id} status={new_status}"
    )
    return case


def detective_guess(case_id: int, detective_id: int, guess_nickname: str) -> dict:
    """Resolve the detective's guess and settle the case.

    Winner-take-all: the detective gets ``difficulty * 10`` on a correct guess,
    otherwise the culprit does. Both sides get exactly one ledger entry.
    """
    if not guess_nickname or not str(guess_nickname).strip():
        raise InvalidInputError('A suspect nickname is required', field='culprit_guess_nickname')
    with workflow.unit_of_work(workflow.DETECTIVE_GUESS):
        case = _get_case(case_id)
        participation = _get_participation(case_id)
        _get_user(detective_id)
        guessed = User.query.filter_by(nickname=guess_nickname).first()
        if guessed is None:
            raise NotFoundError('user', guess_nickname)
        workflow.next_status(case.status, workflow.DETECTIVE_GUESS)

        is_solved = case.true_culprit_id is not None and case.true_culprit_id == guessed.id
        participation.detective_guess_id = guessed.id
        participation.is_solved = is_solved

        base = case.difficulty * _points('SOLVE_POINTS_PER_DIFFICULTY', 10)
        detective_change = base if is_solved else 0
        culprit_change = 0
        ledger.award(detective_id, case_id, detective_change,
                     'detective_solved' if is_solved else 'detective_failed')
        if participation.culprit_id is not None:
            culprit_change = 0 if is_solved else base
            ledger.award(participation.culprit_id, case_id, culprit_change,
                         'culprit_caught' if is_solved else 'culprit_escaped')
        new_status = workflow.advance(case, workflow.DETECTIVE_GUESS)

        actual = db.session.get(User, case.true_culprit_id) if case.true_culprit_id else None
        result = {
            'case_id': case_id,
            'is_solved': is_solved,
            'detective_score_change': detective_change,
            'culprit_score_change': culprit_change,
            'actual_culprit_name': actual.nickname if actual else 'unknown',
            'new_status': new_status,
        }
    current_app.logger.info(
        f"[detective-guess] case={case_id} detective={detective_id} guess={guessed.id} solved={is_solved}"
    )
    return result
