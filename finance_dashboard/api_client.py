# finance_dashboard/api_client.py

import os
import time
import logging

import pandas as pd
import requests
from jose import JWTError, jwt

from finance_api.validation import normalize_email, password_problems

logger = logging.getLogger(__name__)

API_BASE = os.environ.get("FINANCE_API_URL", "http://localhost:5000")


# ---------------- Helpers ----------------
def safe_json(resp):
    try:
        return resp.json()
    except ValueError:
        return None


def api_request(method, path, token=None, json=None, timeout=10):
    headers = {}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    url = API_BASE.rstrip("/") + "/api" + path

    try:
        if method.upper() == "GET":
            response = requests.get(url, headers=headers, timeout=timeout)
        elif method.upper() == "POST":
            response = requests.post(url, headers=headers, json=json, timeout=timeout)
        elif method.upper() == "DELETE":
            response = requests.delete(url, headers=headers, timeout=timeout)
        else:
            raise ValueError(f"Unsupported method: {method}")
        return response
    except requests.RequestException as e:
        logger.error(f"Connection to {url} failed: {e}")
        return None


def error_message(resp, default="Request failed"):
    if resp is None:
        return "Could not reach the finance API"
    payload = safe_json(resp) or {}
    errors = payload.get("errors")
    if errors:
        return ". ".join(errors)
    return payload.get("msg") or default


# ---------------- Token ----------------
def token_expired(token, now=None):
    """
    Advisory check of the ``exp`` claim against local time. The signature is
    not verified here; the API still rejects bad tokens on every call.
    """
    if not token:
        return True
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return True
    exp = claims.get("exp")
    if exp is None:
        return True
    now = time.time() if now is None else now
    return now >= float(exp)


def registration_errors(first_name, email, password, confirm_password):
    """Same rules the API enforces, checked before the round trip."""
    if not (first_name or "").strip():
        return ["First name is required"]
    if not email:
        return ["Email is required"]
    if not normalize_email(email):
        return ["Please enter a valid email address"]

    errors = password_problems(password)
    if errors:
        return errors

    if password != confirm_password:
        return ["Passwords do not match"]
    return []


# ---------------- Endpoints ----------------
def register(first_name, email, password):
    return api_request("POST", "/auth/register",
                       json={"firstName": first_name, "email": email, "password": password})


def login(email, password):
    return api_request("POST", "/auth/login", json={"email": email, "password": password})


def get_transactions(token):
    return api_request("GET", "/transactions", token=token)


def create_transaction(token, title, amount, kind, category_id, occurred=None):
    payload = {"title": title, "amount": str(amount), "type": kind, "categoryId": category_id}
    if occurred is not None:
        payload["date"] = occurred.isoformat()
    return api_request("POST", "/transactions", token=token, json=payload)


def delete_transaction(token, tx_id):
    return api_request("DELETE", f"/transactions/{tx_id}", token=token)


def get_categories(token):
    return api_request("GET", "/categories", token=token)


def create_category(token, name, kind):
    return api_request("POST", "/categories", token=token, json={"name": name, "type": kind})


def delete_category(token, category_id):
    return api_request("DELETE", f"/categories/{category_id}", token=token)


def get_summary(token):
    return api_request("GET", "/transactions/summary", token=token)


def get_monthly_summary(token):
    return api_request("GET", "/transactions/summary/monthly", token=token)


def get_category_spending(token):
    return api_request("GET", "/transactions/summary/by-category", token=token)


# ---------------- DataFrames ----------------
def transactions_frame(payload):
    columns = ["id", "date", "title", "amount", "type", "categoryName", "categoryId"]
    if not payload:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame(payload)
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce")
    df = df.dropna(subset=["date", "amount"])
    return df[[c for c in columns if c in df.columns]]


def monthly_frame(payload):
    """Monthly summaries oldest first, ready for a time axis."""
    columns = ["month", "totalIncome", "totalExpenses", "netBalance"]
    if not payload:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame(payload)
    for col in columns[1:]:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0)
    return df.iloc[::-1].reset_index(drop=True)


def category_frame(payload):
    if not payload:
        return pd.DataFrame(columns=["categoryName", "totalSpent"])
    df = pd.DataFrame(payload)
    df["totalSpent"] = pd.to_numeric(df["totalSpent"], errors="coerce").fillna(0)
    return df
