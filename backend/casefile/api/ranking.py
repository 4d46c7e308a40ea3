from flask import Blueprint, jsonify
from casefile.services.cases.ranking import role_ranking


ranking = Blueprint('ranking', __name__)


@ranking.route('/<string:role>', methods=['GET'])
def get_ranking(role):
    """Leaderboard for one role, e.g. /api/ranking/detectives."""
    return jsonify(role_ranking(role))
