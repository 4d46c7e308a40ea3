"""Demo data for `flask db-reset`."""

from casefile.services.cases.service import create_user, create_case


DEMO_USERS = [
    ('Watson', 'client'),
    ('Moriarty', 'culprit'),
    ('Adler', 'culprit'),
    ('Lestrade', 'police'),
    ('Holmes', 'detective'),
]

DEMO_CASES = [
    {
        'title': 'The Missing Diamond',
        'content': 'A diamond vanished from a locked study during a dinner party.',
        'difficulty': 3,
        'suspects': ['Moriarty', 'Adler'],
        'evidence': [
            {'description': 'The study window was latched from the inside.', 'is_true': True},
            {'description': 'A guest left the table at 9pm.', 'is_true': True},
            {'description': 'A witness saw {name} near the safe.', 'is_true': False, 'is_fake_candidate': True},
            {'description': 'The butler says {name} asked about the lock.', 'is_true': False, 'is_fake_candidate': True},
        ],
    },
    {
        'title': 'The Silent Bell',
        'content': 'The church bell stopped ringing the night the vicar disappeared.',
        'difficulty': 2,
        'suspects': ['Moriarty', 'Adler'],
        'evidence': [
            {'description': 'The bell rope was cut cleanly.', 'is_true': True},
            {'description': 'Muddy footprints lead to {name}\'s door.', 'is_true': False, 'is_fake_candidate': True},
        ],
    },
]


def seed_demo_data():
    for nickname, role in DEMO_USERS:
        create_user(nickname, role)
    for demo in DEMO_CASES:
        create_case(**demo)
