# finance_api/auth.py
import logging
import sqlite3

from flask import Blueprint, request, jsonify
from flask_jwt_extended import create_access_token, get_jwt_identity, jwt_required
from werkzeug.security import check_password_hash, generate_password_hash

from . import db
from .models import TransactionKind, User
from .validation import normalize_email, password_problems

logger = logging.getLogger("finance-api")

auth_bp = Blueprint("auth", __name__)

DEFAULT_CATEGORIES = [
    ("Food", TransactionKind.EXPENSE),
    ("Rent", TransactionKind.EXPENSE),
    ("Entertainment", TransactionKind.EXPENSE),
    ("Utilities", TransactionKind.EXPENSE),
    ("Salary", TransactionKind.INCOME),
]


def _find_user_by_email(email):
    row = db.query_db("SELECT * FROM users WHERE email=?", (email,), one=True)
    return User.from_row(row) if row else None


def _seed_default_categories(conn, user_id):
    conn.executemany(
        "INSERT INTO categories (user_id, name, type) VALUES (?,?,?)",
        [(user_id, name, kind.value) for name, kind in DEFAULT_CATEGORIES],
    )


@auth_bp.route("/register", methods=["POST"])
def register():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"msg": "JSON object body required"}), 400

    email = normalize_email(data.get("email"))
    if not email:
        return jsonify({"msg": "A valid email is required"}), 400

    password = data.get("password")
    if not isinstance(password, str):
        return jsonify({"msg": "password is required"}), 400
    problems = password_problems(password)
    if problems:
        return jsonify({"msg": "Password does not meet requirements", "errors": problems}), 400

    first_name = data.get("firstName") or ""
    if not isinstance(first_name, str):
        return jsonify({"msg": "firstName must be a string"}), 400
    first_name = first_name.strip()

    if _find_user_by_email(email):
        return jsonify({"msg": "Email already registered"}), 400

    conn = db.get_db()
    try:
        cur = conn.execute(
            "INSERT INTO users (email, password_hash, first_name) VALUES (?,?,?)",
            (email, generate_password_hash(password), first_name),
        )
        user_id = cur.lastrowid
        _seed_default_categories(conn, user_id)
        conn.commit()
    except sqlite3.IntegrityError:
        conn.rollback()
        return jsonify({"msg": "Email already registered"}), 400

    logger.info(f"New user registered - ID: {user_id}")
    return jsonify({"id": user_id, "email": email, "firstName": first_name}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"msg": "JSON object body required"}), 400

    raw_email = data.get("email")
    password = data.get("password")
    if not raw_email or not password or not isinstance(password, str):
        return jsonify({"msg": "email and password are required"}), 400

    email = normalize_email(raw_email)
    user = _find_user_by_email(email) if email else None
    if not user or not check_password_hash(user.password_hash, password):
        logger.warning("Failed login attempt")
        return jsonify({"msg": "Invalid email or password"}), 401

    token = create_access_token(identity=str(user.id))
    logger.info(f"User {user.id} logged in")
    return jsonify({"token": token, "email": user.email, "firstName": user.first_name})


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user_id = int(get_jwt_identity())
    row = db.query_db("SELECT * FROM users WHERE id=?", (user_id,), one=True)
    if not row:
        return jsonify({"msg": "user not found"}), 404
    return jsonify(User.from_row(row).to_dict())
