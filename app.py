from flask import Flask, jsonify
from flask_cors import CORS
from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import DeclarativeBase
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix
import logging
import os

from config import Config
from errors import RosterError

# Configure logging - use INFO level for production
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


db = SQLAlchemy(model_class=Base)
login_manager = LoginManager()


@login_manager.user_loader
def load_user(user_id):
    from models import Actor
    return Actor.from_id(user_id)


@login_manager.request_loader
def load_user_from_request(request):
    """Clients without a session identify themselves with an X-University-Id header"""
    from models import Actor
    university_id = request.headers.get('X-University-Id')
    if university_id:
        return Actor.from_id(university_id)
    return None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify(error='Login required', kind='UNAUTHORIZED'), 401


def build_store(app):
    """Roster store selected by ROSTER_BACKEND"""
    backend = app.config['ROSTER_BACKEND']
    if backend == 'database':
        from database_store import DatabaseRosterStore
        return DatabaseRosterStore(db)
    if backend != 'file':
        raise ValueError(f"Unknown ROSTER_BACKEND: {backend}")
    from data_store import FileRosterStore
    return FileRosterStore(app.config['DATA_DIR'])


def create_app(config_object=None, overrides=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    if overrides:
        app.config.update(overrides)

    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)  # needed for url_for to generate with https
    CORS(app, resources={r"/*": {"origins": app.config['CORS_ORIGINS']}})

    os.makedirs(app.config['DATA_DIR'], exist_ok=True)
    db.init_app(app)
    login_manager.init_app(app)

    with app.app_context():
        import models  # noqa: F401
        db.create_all()
        logger.info("Database tables created")
        app.extensions['roster_store'] = build_store(app)

    from routes import api
    app.register_blueprint(api)

    @app.errorhandler(RosterError)
    def handle_roster_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify(error=e.description), e.code

    logger.info(f"Roster backend: {app.config['ROSTER_BACKEND']}")
    return app
