from casefile import db
from datetime import datetime, timezone


ROLES = ('client', 'culprit', 'police', 'detective')


class User(db.Model):
    __tablename__ = 'app_user'
    id = db.Column(db.Integer, primary_key=True)
    nickname = db.Column(db.String(64), unique=True, nullable=False, index=True)
    role = db.Column(db.String(16), nullable=False)  # client, culprit, police, detective
    # Cached running total of score_log deltas; only the ledger writes it
    score = db.Column(db.Integer, default=0, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'nickname': self.nickname,
            'role': self.role,
            'score': self.score,
        }


class Case(db.Model):
    __tablename__ = 'case_info'
    __table_args__ = (
        db.CheckConstraint('difficulty BETWEEN 1 AND 5', name='ck_case_difficulty'),
    )
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(128), nullable=False)
    content = db.Column(db.Text, nullable=False)
    difficulty = db.Column(db.Integer, nullable=False, default=1)
    true_culprit_id = db.Column(db.Integer, db.ForeignKey('app_user.id'), nullable=True)
    status = db.Column(db.String(32), nullable=False, default='registered', index=True)

    participation = db.relationship('Participation', back_populates='case', uselist=False)
    suspects = db.relationship('CaseSuspect', backref='case', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'difficulty': self.difficulty,
            'true_culprit_id': self.true_culprit_id,
            'status': self.status,
        }


class Participation(db.Model):
    __tablename__ = 'case_participation'
    id = db.Column(db.Integer, primary_key=True)
    # One participation per case
    case_id = db.Column(db.Integer, db.ForeignKey('case_info.id'), nullable=False, unique=True)
    client_id = db.Column(db.Integer, db.ForeignKey('app_user.id'), nullable=True)
    culprit_id = db.Column(db.Integer, db.ForeignKey('app_user.id'), nullable=True)
    police_id = db.Column(db.Integer, db.ForeignKey('app_user.id'), nullable=True)
    detective_id = db.Column(db.Integer, db.ForeignKey('app_user.id'), nullable=True)
    detective_guess_id = db.Column(db.Integer, db.ForeignKey('app_user.id'), nullable=True)
    is_solved = db.Column(db.Boolean, nullable=True)

    case = db.relationship('Case', back_populates='participation')

    def to_dict(self):
        return {
            'id': self.id,
            'case_id': self.case_id,
            'client_id': self.client_id,
            'culprit_id': self.culprit_id,
            'police_id': self.police_id,
            'detective_id': self.detective_id,
            'detective_guess_id': self.detective_guess_id,
            'is_solved': self.is_solved,
        }


class CaseSuspect(db.Model):
    __tablename__ = 'case_suspect'
    id = db.Column(db.Integer, primary_key=True)
    case_id = db.Column(db.Integer, db.ForeignKey('case_info.id'), nullable=False, index=True)
    suspect_name = db.Column(db.String(64), nullable=False)


class OriginalEvidence(db.Model):
    __tablename__ = 'original_evidence'
    id = db.Column(db.Integer, primary_key=True)
    case_id = db.Column(db.Integer, db.ForeignKey('case_info.id'), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)
    is_true = db.Column(db.Boolean, nullable=False, default=True)
    is_fake_candidate = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self):
        return {
            'id': self.id,
            'case_id': self.case_id,
            'description': self.description,
            'is_true': self.is_true,
            'is_fake_candidate': self.is_fake_candidate,
        }


class SubmittedEvidence(db.Model):
    __tablename__ = 'submitted_evidence'
    id = db.Column(db.Integer, primary_key=True)
    case_id = db.Column(db.Integer, db.ForeignKey('case_info.id'), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)
    is_true_evidence = db.Column(db.Boolean, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'case_id': self.case_id,
            'description': self.description,
            'is_true_evidence': self.is_true_evidence,
        }


def _utcnow():
    return datetime.now(timezone.utc)


class ScoreLog(db.Model):
    __tablename__ = 'score_log'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('app_user.id'), nullable=False, index=True)
    case_id = db.Column(db.Integer, db.ForeignKey('case_info.id'), nullable=True)
    delta = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(64), nullable=False)
    log_time = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'case_id': self.case_id,
            'delta': self.delta,
            'reason': self.reason,
            'log_time': self.log_time.isoformat() if self.log_time else None,
        }
