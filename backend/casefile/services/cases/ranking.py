from casefile.models import ROLES, User, Participation
from .errors import InvalidInputError

# Participation column a role plays through, and whether is_solved=True is a win for it
_ROLE_COLUMNS = {
    'client': ('client_id', True),
    'culprit': ('culprit_id', False),
    'police': ('police_id', True),
    'detective': ('detective_id', True),
}

_PLURALS = {'clients': 'client', 'culprits': 'culprit', 'detectives': 'detective'}


def normalize_role(role: str) -> str:
    role = _PLURALS.get(role, role)
    if role not in ROLES:
        raise InvalidInputError(f"Unknown role '{role}'", field='role')
    return role


def role_ranking(role: str) -> list[dict]:
    """Users of `role` by score, highest first, with case counts and win rate."""
    role = normalize_role(role)
    column_name, win_when_solved = _ROLE_COLUMNS[role]
    column = getattr(Participation, column_name)

    users = User.query.filter_by(role=role).order_by(User.score.desc(), User.id).all()
    parts = Participation.query.filter(column.in_([u.id for u in users])).all() if users else []

    totals: dict[int, int] = {}
    wins: dict[int, int] = {}
    for p in parts:
        uid = getattr(p, column_name)
        totals[uid] = totals.get(uid, 0) + 1
        if p.is_solved is not None and p.is_solved == win_when_solved:
            wins[uid] = wins.get(uid, 0) + 1

    ranking = []
    for rank, user in enumerate(users, start=1):
        total = totals.get(user.id, 0)
        ranking.append({
            'rank': rank,
            'user_id': user.id,
            'nickname': user.nickname,
            'role': user.role,
            'score': user.score,
            'total_cases': total,
            'success_rate': round(100.0 * wins.get(user.id, 0) / total, 1) if total else 0.0,
        })
    return ranking
