from flask import Blueprint, jsonify, request
from casefile.api import int_field
from casefile.services.cases import fabrication, projections, service, workflow
from casefile.socketio_events import broadcast_case_update


cases = Blueprint('cases', __name__)


@cases.route('', methods=['POST'])
def create_case():
    data = request.get_json(silent=True) or {}
    case = service.create_case(
        data.get('title'),
        data.get('content'),
        data.get('difficulty'),
        suspects=data.get('suspects') or [],
        evidence=data.get('evidence') or [],
    )
    broadcast_case_update(case.id, case.status, 'create_case')
    return jsonify(case.to_dict()), 201


@cases.route('/available', methods=['GET'])
def available_cases():
    return jsonify(projections.available_cases())


# ---- Culprit ----

@cases.route('/culprit/available', methods=['GET'])
def culprit_available_cases():
    return jsonify(projections.culprit_available_cases())


@cases.route('/culprit/<int:user_id>', methods=['GET'])
def culprit_cases(user_id):
    return jsonify(projections.culprit_cases(user_id))


@cases.route('/culprit/join', methods=['POST'])
def culprit_join():
    data = request.get_json(silent=True) or {}
    case_id = int_field(data, 'case_id')
    culprit_id = int_field(data, 'culprit_id')
    participation = service.culprit_join(case_id, culprit_id)
    broadcast_case_update(case_id, workflow.REGISTERED, workflow.CULPRIT_JOIN)
    return jsonify({'message': 'Joined the case as culprit', 'participation': participation.to_dict()})


@cases.route('/culprit/fabricate/details/<int:case_id>', methods=['GET'])
def fabrication_details(case_id):
    return jsonify(fabrication.fabrication_details(case_id))


@cases.route('/fabricate', methods=['POST'])
def fabricate():
    data = request.get_json(silent=True) or {}
    case_id = int_field(data, 'case_id')
    culprit_id = int_field(data, 'culprit_id')
    case = service.fabricate(case_id, culprit_id, data.get('fake_evidence'))
    broadcast_case_update(case.id, case.status, 'fabricate')
    return jsonify({'message': 'Evidence fabricated', 'new_status': case.status})


# ---- Police ----

@cases.route('/police/pending/<int:police_id>', methods=['GET'])
def police_pending_cases(police_id):
    return jsonify(projections.police_pending_cases(police_id))


@cases.route('/police/my/<int:police_id>', methods=['GET'])
def police_cases(police_id):
    return jsonify(projections.police_cases(police_id))


@cases.route('/police/accept', methods=['POST'])
def police_accept():
    data = request.get_json(silent=True) or {}
    case_id = int_field(data, 'case_id')
    police_id = int_field(data, 'police_id')
    case = service.police_accept(case_id, police_id)
    broadcast_case_update(case.id, case.status, 'police_accept')
    return jsonify({'new_status': case.status})


@cases.route('/assign', methods=['POST'])
def police_assign():
    data = request.get_json(silent=True) or {}
    case_id = int_field(data, 'case_id')
    police_id = int_field(data, 'police_id')
    detective_id = int_field(data, 'detective_id')
    case = service.police_assign(case_id, police_id, detective_id)
    broadcast_case_update(case.id, case.status, 'police_assign')
    return jsonify({'new_status': case.status})


# ---- Client ----

@cases.route('/client/<int:user_id>', methods=['GET'])
def client_cases(user_id):
    return jsonify(projections.client_cases(user_id))


# ---- Detective ----

@cases.route('/detective/<int:user_id>', methods=['GET'])
def detective_assigned_cases(user_id):
    return jsonify(projections.detective_assigned_cases(user_id))


@cases.route('/detective/result/<int:user_id>', methods=['GET'])
def detective_completed_cases(user_id):
    return jsonify(projections.detective_completed_cases(user_id))


@cases.route('/detective/guess/<int:case_id>', methods=['POST'])
def detective_guess(case_id):
    data = request.get_json(silent=True) or {}
    detective_id = int_field(data, 'detective_id')
    result = service.detective_guess(case_id, detective_id, data.get('culprit_guess_nickname'))
    broadcast_case_update(case_id, result['new_status'], 'detective_guess')
    return jsonify(result)


@cases.route('/<int:case_id>/details', methods=['GET'])
def case_details(case_id):
    return jsonify(projections.case_details(case_id))
