# finance_api/transactions.py

import logging
import sqlite3

from flask import Blueprint, request, jsonify, url_for
from flask_jwt_extended import jwt_required, get_jwt_identity

from . import db
from .categories import get_owned_category
from .models import Transaction
from .summary import category_spending, monthly_summary, totals_summary
from .validation import id_in_range, validate_transaction

logger = logging.getLogger("finance-api")

bp = Blueprint("transactions", __name__)

SELECT_WITH_CATEGORY = """
    SELECT t.id, t.user_id, t.category_id, t.title, t.amount, t.type, t.date,
           c.name AS category_name
    FROM transactions t
    LEFT JOIN categories c ON c.id = t.category_id
"""


def load_user_transactions(user_id):
    rows = db.query_db(
        SELECT_WITH_CATEGORY + " WHERE t.user_id=? ORDER BY t.date DESC, t.id DESC",
        (user_id,),
    )
    return [Transaction.from_row(r) for r in rows]


def get_owned_transaction(tx_id, user_id):
    if not id_in_range(tx_id):
        return None
    row = db.query_db(
        SELECT_WITH_CATEGORY + " WHERE t.id=? AND t.user_id=?", (tx_id, user_id), one=True
    )
    return Transaction.from_row(row) if row else None


@bp.route("", methods=["GET"])
@jwt_required()
def list_transactions():
    user_id = int(get_jwt_identity())
    return jsonify([tx.to_dict() for tx in load_user_transactions(user_id)])


@bp.route("", methods=["POST"])
@jwt_required()
def add_transaction():
    user_id = int(get_jwt_identity())
    fields, error = validate_transaction(request.get_json(silent=True))
    if error:
        return jsonify({"msg": error}), 400

    category = get_owned_category(fields["category_id"], user_id)
    if not category:
        return jsonify({"msg": "Invalid category ID"}), 400

    try:
        tx_id = db.execute_db(
            "INSERT INTO transactions (user_id, category_id, title, amount, type, date) "
            "VALUES (?,?,?,?,?,?)",
            (user_id, category.id, fields["title"], str(fields["amount"]),
             fields["type"].value, fields["date"].isoformat()),
        )
    except sqlite3.Error as e:
        logger.exception("DB insert failed")
        return jsonify({"msg": "DB insert failed", "error": str(e)}), 500

    tx = Transaction(tx_id, user_id, category.id, fields["title"], fields["amount"],
                     fields["type"], fields["date"], category_name=category.name)
    logger.info(f"Transaction {tx_id} created for user {user_id}")
    response = jsonify(tx.to_dict())
    response.headers["Location"] = url_for("transactions.get_transaction", tx_id=tx_id)
    return response, 201


@bp.route("/<int:tx_id>", methods=["GET"])
@jwt_required()
def get_transaction(tx_id):
    user_id = int(get_jwt_identity())
    tx = get_owned_transaction(tx_id, user_id)
    if not tx:
        return jsonify({"msg": "transaction not found"}), 404
    return jsonify(tx.to_dict())


@bp.route("/<int:tx_id>", methods=["DELETE"])
@jwt_required()
def delete_transaction(tx_id):
    user_id = int(get_jwt_identity())
    if not get_owned_transaction(tx_id, user_id):
        return jsonify({"msg": "transaction not found"}), 404

    db.execute_db("DELETE FROM transactions WHERE id=? AND user_id=?", (tx_id, user_id))
    logger.info(f"Transaction {tx_id} deleted for user {user_id}")
    return "", 204


# ---------------- Reports ----------------
@bp.route("/summary", methods=["GET"])
@jwt_required()
def summary():
    user_id = int(get_jwt_identity())
    return jsonify(totals_summary(load_user_transactions(user_id)))


@bp.route("/summary/monthly", methods=["GET"])
@jwt_required()
def summary_monthly():
    user_id = int(get_jwt_identity())
    return jsonify(monthly_summary(load_user_transactions(user_id)))


@bp.route("/summary/by-category", methods=["GET"])
@jwt_required()
def summary_by_category():
    user_id = int(get_jwt_identity())
    return jsonify(category_spending(load_user_transactions(user_id)))
