from flask import Blueprint, request, jsonify
from casefile import db
from casefile.models import User
from casefile.api import int_field
from casefile.services.cases import ledger, service, workflow
from casefile.services.cases.errors import InvalidInputError, NotFoundError
from casefile.socketio_events import broadcast_case_update

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the case file server!'})

@main.route('/api/login', methods=['POST'])
def login():
    # Players pick an existing nickname; there are no credentials
    data = request.get_json(silent=True) or {}
    nickname = data.get('nickname')
    if not nickname:
        raise InvalidInputError('nickname is required', field='nickname')
    user = User.query.filter_by(nickname=nickname).first()
    if not user:
        raise NotFoundError('user', nickname)
    return jsonify(user.to_dict())

@main.route('/api/users', methods=['POST'])
def add_user():
    data = request.get_json(silent=True) or {}
    user = service.create_user(data.get('nickname'), data.get('role'))
    return jsonify(user.to_dict()), 201

@main.route('/api/users/<int:user_id>/score-log', methods=['GET'])
def score_log(user_id):
    return jsonify([entry.to_dict() for entry in ledger.history(user_id)])

@main.route('/api/case/start', methods=['POST'])
def start_case():
    data = request.get_json(silent=True) or {}
    client_id = int_field(data, 'client_id')
    case_id = int_field(data, 'case_id')
    participation = service.client_request(case_id, client_id)
    broadcast_case_update(case_id, workflow.REGISTERED, workflow.CLIENT_REQUEST)
    client = db.session.get(User, client_id)
    return jsonify({
        'message': 'Case requested',
        'participation': participation.to_dict(),
        'new_score': client.score,
    }), 201
