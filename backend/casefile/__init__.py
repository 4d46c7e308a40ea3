from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from casefile.main import main
    flask_app.register_blueprint(main)

    from casefile.api.cases import cases
    flask_app.register_blueprint(cases, url_prefix='/api/cases')

    from casefile.api.ranking import ranking
    flask_app.register_blueprint(ranking, url_prefix='/api/ranking')

    from casefile.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Every workflow failure is scoped to its request and rendered as JSON
    from casefile.services.cases.errors import CaseServiceError

    @flask_app.errorhandler(CaseServiceError)
    def handle_case_error(exc):
        if exc.status_code >= 500:
            flask_app.logger.error(f"[error] {exc.error_type}: {exc.message}")
        else:
            flask_app.logger.info(f"[rejected] {exc.error_type}: {exc.message}")
        return jsonify(exc.to_dict()), exc.status_code

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from casefile.seed import seed_demo_data
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            seed_demo_data()
            print('Database has been reset and seeded!')

    @click.command('reconcile-scores')
    @click.option('--fix', is_flag=True, help='Rewrite cached scores from the ledger.')
    def reconcile_scores_command(fix):
        """Checks every cached user score against the score log."""
        from casefile.services.cases.ledger import reconcile
        with flask_app.app_context():
            mismatches = reconcile(fix=fix)
            for m in mismatches:
                print(f"{m['nickname']} (id={m['user_id']}): cached={m['cached']} ledger={m['ledger']}")
            print(f"{len(mismatches)} mismatch(es){' fixed' if fix and mismatches else ''}")

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(reconcile_scores_command)

    return flask_app
