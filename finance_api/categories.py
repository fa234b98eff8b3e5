# finance_api/categories.py
import logging
import sqlite3

from flask import Blueprint, request, jsonify, url_for
from flask_jwt_extended import jwt_required, get_jwt_identity

from . import db
from .models import Category
from .validation import id_in_range, validate_category

logger = logging.getLogger("finance-api")

bp = Blueprint("categories", __name__)


def get_owned_category(category_id, user_id):
    """Category row scoped to its owner; foreign ids look exactly like missing ones."""
    if not id_in_range(category_id):
        return None
    row = db.query_db(
        "SELECT * FROM categories WHERE id=? AND user_id=?", (category_id, user_id), one=True
    )
    return Category.from_row(row) if row else None


@bp.route("", methods=["GET"])
@jwt_required()
def list_categories():
    user_id = int(get_jwt_identity())
    rows = db.query_db(
        "SELECT * FROM categories WHERE user_id=? ORDER BY name COLLATE NOCASE, id", (user_id,)
    )
    return jsonify([Category.from_row(r).to_dict() for r in rows])


@bp.route("", methods=["POST"])
@jwt_required()
def create_category():
    user_id = int(get_jwt_identity())
    fields, error = validate_category(request.get_json(silent=True))
    if error:
        return jsonify({"msg": error}), 400

    try:
        category_id = db.execute_db(
            "INSERT INTO categories (user_id, name, type) VALUES (?,?,?)",
            (user_id, fields["name"], fields["type"].value),
        )
    except sqlite3.Error as e:
        logger.exception("DB insert failed")
        return jsonify({"msg": "DB insert failed", "error": str(e)}), 500

    category = Category(category_id, user_id, fields["name"], fields["type"])
    logger.info(f"Category {category_id} created for user {user_id}")
    response = jsonify(category.to_dict())
    response.headers["Location"] = url_for("categories.get_category", category_id=category_id)
    return response, 201


@bp.route("/<int:category_id>", methods=["GET"])
@jwt_required()
def get_category(category_id):
    user_id = int(get_jwt_identity())
    category = get_owned_category(category_id, user_id)
    if not category:
        return jsonify({"msg": "category not found"}), 404
    return jsonify(category.to_dict())


@bp.route("/<int:category_id>", methods=["DELETE"])
@jwt_required()
def delete_category(category_id):
    user_id = int(get_jwt_identity())
    if not get_owned_category(category_id, user_id):
        return jsonify({"msg": "category not found"}), 404

    in_use = db.query_db(
        "SELECT COUNT(*) AS count FROM transactions WHERE category_id=?", (category_id,), one=True
    )
    if in_use["count"]:
        logger.warning(f"Refused to delete category {category_id}: {in_use['count']} transactions")
        return jsonify({
            "msg": "category is still used by transactions",
            "transactions": in_use["count"],
        }), 409

    db.execute_db("DELETE FROM categories WHERE id=? AND user_id=?", (category_id, user_id))
    logger.info(f"Category {category_id} deleted for user {user_id}")
    return "", 204
