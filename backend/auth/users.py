from __future__ import annotations

import threading
from typing import Any

import bcrypt

_users: dict[str, dict[str, Any]] = {}
_lock = threading.Lock()


class DuplicateUserError(ValueError):
    pass


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def public_user(record: dict[str, Any]) -> dict[str, Any]:
    """Strip the password hash from a stored record."""
    return {"username": record["username"], "email": record["email"]}


def find_by_email_or_username(identifier: str) -> dict[str, Any] | None:
    key = identifier.strip().lower()
    if not key:
        return None
    for record in _users.values():
        if record["username"].lower() == key or record["email"].lower() == key:
            return record
    return None


def create_user(username: str, email: str, password: str) -> dict[str, Any]:
    """Store a new account with a bcrypt hash. Raises ``DuplicateUserError``."""
    username = username.strip()
    email = email.strip()
    with _lock:
        if find_by_email_or_username(username) or find_by_email_or_username(email):
            raise DuplicateUserError("Username or email already registered")
        record = {
            "username": username,
            "email": email,
            "password_hash": _hash_password(password),
        }
        _users[username.lower()] = record
    return record


def compare_password(record: dict[str, Any], password: str) -> bool:
    return _verify_password(password, record["password_hash"])


def authenticate(identifier: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, email}`` or ``None``."""
    record = find_by_email_or_username(identifier)
    if record and compare_password(record, password):
        return public_user(record)
    return None


def clear_users() -> None:
    _users.clear()
