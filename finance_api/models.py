# finance_api/models.py
# lightweight model classes (not DB-bound ORM)
from datetime import datetime
from decimal import Decimal
from enum import Enum


class TransactionKind(str, Enum):
    INCOME = "Income"
    EXPENSE = "Expense"

    @classmethod
    def parse(cls, value):
        """Case-insensitive lookup; returns None for anything that is not a kind."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        wanted = value.strip().lower()
        for kind in cls:
            if kind.value.lower() == wanted:
                return kind
        return None


class User:
    def __init__(self, id, email, password_hash, first_name='', created_at=None):
        self.id = id
        self.email = email
        self.password_hash = password_hash
        self.first_name = first_name
        self.created_at = created_at

    @classmethod
    def from_row(cls, row):
        return cls(row['id'], row['email'], row['password_hash'],
                   row['first_name'], row['created_at'])

    def to_dict(self):
        return {"id": self.id, "email": self.email, "firstName": self.first_name}


class Category:
    def __init__(self, id, user_id, name, type):
        self.id = id
        self.user_id = user_id
        self.name = name
        self.type = TransactionKind(type)

    @classmethod
    def from_row(cls, row):
        return cls(row['id'], row['user_id'], row['name'], row['type'])

    def to_dict(self):
        return {"id": self.id, "name": self.name, "type": self.type.value}


class Transaction:
    def __init__(self, id, user_id, category_id, title, amount, type, date,
                 category_name=None):
        self.id = id
        self.user_id = user_id
        self.category_id = category_id
        self.title = title
        self.amount = Decimal(amount)
        self.type = TransactionKind(type)
        self.date = date if isinstance(date, datetime) else datetime.fromisoformat(date)
        self.category_name = category_name

    @classmethod
    def from_row(cls, row):
        keys = row.keys()
        return cls(
            row['id'], row['user_id'], row['category_id'], row['title'],
            row['amount'], row['type'], row['date'],
            category_name=row['category_name'] if 'category_name' in keys else None,
        )

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "amount": self.amount,
            "type": self.type.value,
            "date": self.date.isoformat(),
            "categoryId": self.category_id,
            "categoryName": self.category_name,
        }
