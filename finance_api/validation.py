# finance_api/validation.py
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN

from .models import TransactionKind

DATETIME_FORMATS = ["%Y-%m-%d", "%Y-%m-%d %H:%M:%S", "%d-%m-%Y", "%Y/%m/%d", "%d/%m/%Y"]
CENTS = Decimal("0.01")
MAX_AMOUNT = Decimal("10000000")
# largest rowid SQLite can store
MAX_ID = 2 ** 63 - 1
MAX_TITLE_LENGTH = 200
MAX_CATEGORY_NAME_LENGTH = 100

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def parse_datetime(s):
    """Try ISO first, then a handful of common formats. None if nothing fits."""
    if s is None:
        return None
    s = str(s).strip()
    if not s:
        return None
    try:
        parsed = datetime.fromisoformat(s.replace("Z", "+00:00"))
        return parsed.replace(tzinfo=None) if parsed.tzinfo else parsed
    except ValueError:
        pass
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    return None


def parse_amount(value):
    """Exact decimal rounded to cents. Returns (amount, error)."""
    if value is None or isinstance(value, bool):
        return None, "amount is required"
    if isinstance(value, str) and not value.strip():
        return None, "amount is required"
    try:
        # str() first so floats like 0.1 keep their printed value
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None, "Invalid amount format"
    if not amount.is_finite():
        return None, "Invalid amount format"
    if abs(amount) > MAX_AMOUNT:
        return None, f"Amount too large: {amount}"
    amount = amount.quantize(CENTS, rounding=ROUND_HALF_EVEN)
    if amount == 0:
        return None, "Amount cannot be zero"
    return amount, None


def parse_kind(value):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None, "type is required"
    kind = TransactionKind.parse(value)
    if kind is None:
        return None, "type must be 'Income' or 'Expense'"
    return kind, None


def parse_id(value, field):
    if value is None or value == "":
        return None, f"{field} is required"
    if isinstance(value, bool):
        return None, f"{field} must be an integer"
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None, f"{field} must be an integer"
    if isinstance(value, float) and value != parsed:
        return None, f"{field} must be an integer"
    if not id_in_range(parsed):
        return None, f"{field} must be between 1 and {MAX_ID}"
    return parsed, None


def id_in_range(value):
    return 0 < value <= MAX_ID


def _required_text(data, field, max_length):
    raw = data.get(field)
    if raw is None or not isinstance(raw, str) or not raw.strip():
        return None, f"{field} is required"
    text = raw.strip()
    if len(text) > max_length:
        return None, f"{field} must be at most {max_length} characters"
    return text, None


def validate_transaction(data):
    """
    Check a transaction payload. Returns (fields, error) where fields holds
    title, amount, type, category_id and date ready for insertion.
    """
    if not isinstance(data, dict):
        return None, "JSON object body required"

    title, error = _required_text(data, "title", MAX_TITLE_LENGTH)
    if error:
        return None, error

    amount, error = parse_amount(data.get("amount"))
    if error:
        return None, error

    kind, error = parse_kind(data.get("type"))
    if error:
        return None, error

    category_id, error = parse_id(data.get("categoryId"), "categoryId")
    if error:
        return None, error

    raw_date = data.get("date")
    if raw_date in (None, ""):
        occurred = datetime.now().replace(microsecond=0)
    else:
        occurred = parse_datetime(raw_date)
        if occurred is None:
            return None, "Invalid or missing date"

    return {
        "title": title,
        "amount": amount,
        "type": kind,
        "category_id": category_id,
        "date": occurred,
    }, None


def validate_category(data):
    if not isinstance(data, dict):
        return None, "JSON object body required"

    name, error = _required_text(data, "name", MAX_CATEGORY_NAME_LENGTH)
    if error:
        return None, error

    kind, error = parse_kind(data.get("type"))
    if error:
        return None, error

    return {"name": name, "type": kind}, None


def password_problems(password):
    """Every password rule the value breaks, in a stable order."""
    problems = []
    password = password or ""
    if len(password) < 6:
        problems.append("Password must be at least 6 characters long")
    if not re.search(r"[A-Z]", password):
        problems.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        problems.append("Password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        problems.append("Password must contain at least one number")
    if not re.search(r"[^a-zA-Z0-9]", password):
        problems.append("Password must contain at least one special character")
    return problems


def normalize_email(value):
    if not isinstance(value, str):
        return None
    email = value.strip().lower()
    return email if EMAIL_RE.match(email) else None
