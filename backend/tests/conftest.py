import os
import sys
import pytest

# Ensure the backend root (containing the `casefile` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from casefile import create_app, db, socketio
from casefile.services.cases import service


FAKE_NEAR_SAFE = 'A witness saw {name} near the safe.'
FAKE_ASKED_LOCK = 'The butler says {name} asked about the lock.'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import casefile.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def people(flask_app):
    """One user per role plus a second culprit; returns nickname -> id."""
    ids = {}
    for nickname, role in [
        ('Watson', 'client'),
        ('Moriarty', 'culprit'),
        ('Adler', 'culprit'),
        ('Lestrade', 'police'),
        ('Gregson', 'police'),
        ('Holmes', 'detective'),
    ]:
        ids[nickname] = service.create_user(nickname, role).id
    return ids


@pytest.fixture()
def case_id(people):
    case = service.create_case(
        'The Missing Diamond',
        'A diamond vanished from a locked study.',
        3,
        suspects=['Moriarty', 'Adler'],
        evidence=[
            {'description': 'The window was latched from the inside.', 'is_true': True},
            {'description': 'A guest left the table at 9pm.', 'is_true': True},
            {'description': FAKE_NEAR_SAFE, 'is_true': False, 'is_fake_candidate': True},
            {'description': FAKE_ASKED_LOCK, 'is_true': False, 'is_fake_candidate': True},
            {'description': 'An old rumour about the family.', 'is_true': False, 'is_fake_candidate': False},
        ],
    )
    return case.id


@pytest.fixture()
def requested_case(case_id, people):
    """Case requested by the client with Moriarty joined as culprit."""
    service.client_request(case_id, people['Watson'])
    service.culprit_join(case_id, people['Moriarty'])
    return case_id


@pytest.fixture()
def fabricated_case(requested_case, people):
    service.fabricate(requested_case, people['Moriarty'], [FAKE_NEAR_SAFE])
    return requested_case


@pytest.fixture()
def assigned_case(fabricated_case, people):
    service.police_assign(fabricated_case, people['Lestrade'], people['Holmes'])
    return fabricated_case
