# finance_api/app.py

import os
import logging
from datetime import timedelta

from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException

from . import db
from .auth import auth_bp
from .categories import bp as categories_bp
from .models import User
from .transactions import bp as transactions_bp
from .validation import id_in_range

# ---------------- Configuration ----------------
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("finance-api")

DEFAULT_DB_PATH = os.path.join(os.getcwd(), "data", "finance.db")
DEFAULT_CORS_ORIGINS = "http://localhost:8501,http://localhost:8502"


def _register_jwt_handlers(jwt):
    """Every token problem is a plain 401 with a JSON message."""

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({"msg": reason}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({"msg": f"Invalid token: {reason}"}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({"msg": "Token has expired"}), 401

    @jwt.revoked_token_loader
    def revoked_token(jwt_header, jwt_payload):
        return jsonify({"msg": "Token has been revoked"}), 401

    @jwt.user_lookup_loader
    def load_user(jwt_header, jwt_payload):
        try:
            user_id = int(jwt_payload["sub"])
        except (KeyError, TypeError, ValueError):
            return None
        if not id_in_range(user_id):
            return None
        row = db.query_db("SELECT * FROM users WHERE id=?", (user_id,), one=True)
        return User.from_row(row) if row else None

    @jwt.user_lookup_error_loader
    def unknown_user(jwt_header, jwt_payload):
        return jsonify({"msg": "Token user no longer exists"}), 401


def _register_error_handlers(app):

    @app.errorhandler(HTTPException)
    def http_error(exc):
        return jsonify({"msg": exc.description}), exc.code

    @app.errorhandler(Exception)
    def unhandled_error(exc):
        logger.exception("Unhandled error")
        return jsonify({"msg": "Internal server error"}), 500


# ---------------- Flask App Factory ----------------
def create_app(test_config=None):
    app = Flask(__name__)

    app.config['DB_PATH'] = os.environ.get('DB_PATH', DEFAULT_DB_PATH)
    app.config['JWT_SECRET_KEY'] = os.environ.get('JWT_SECRET_KEY', "dev-key-change-me-in-production")
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(
        minutes=int(os.environ.get('JWT_EXPIRES_MINUTES', 60))
    )
    app.config['CORS_ORIGINS'] = os.environ.get('CORS_ORIGINS', DEFAULT_CORS_ORIGINS)
    if test_config:
        app.config.update(test_config)

    jwt = JWTManager(app)
    _register_jwt_handlers(jwt)

    origins = [o.strip() for o in app.config['CORS_ORIGINS'].split(",") if o.strip()]
    CORS(app, resources={r"/api/*": {"origins": origins}}, supports_credentials=True)

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(categories_bp, url_prefix='/api/categories')
    app.register_blueprint(transactions_bp, url_prefix='/api/transactions')

    _register_error_handlers(app)

    db.init_db(app.config['DB_PATH'])
    logger.info(f"Database initialized at {app.config['DB_PATH']}")

    app.teardown_appcontext(db.close_db)

    @app.route('/health')
    def health():
        return jsonify({"status": "ok"})

    return app


def main():
    app = create_app()
    app.run(
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", 5000)),
        debug=os.environ.get("FLASK_DEBUG") == "1",
    )


# ---------------- Run ----------------
if __name__ == '__main__':
    main()
