# ==========================================
# Login state and page guards
# ==========================================

import time
from functools import wraps
from flask import session, redirect, url_for, request, abort, current_app

from common.config_util import get_int_setting

DEFAULT_TIMEOUT_SECONDS = 300  # 5 minutes without a request

ROLES = ("admin", "manager", "cashier")


def get_timeout_seconds() -> int:
    return current_app.config.get("SESSION_TIMEOUT") or get_int_setting("SESSION_TIMEOUT", DEFAULT_TIMEOUT_SECONDS)


class UserSession:
    """Logged-in user as stored in the Flask session."""

    KEY = "user"
    LAST_ACCESS_KEY = "last_access"

    def __init__(self, email, name="", role="cashier", last_access=None):
        self.email = email
        self.name = name or email
        self.role = role
        self.last_access = last_access if last_access is not None else time.time()

    @classmethod
    def load(cls):
        data = session.get(cls.KEY)
        if not data or not data.get("email"):
            return None
        return cls(
            email=data["email"],
            name=data.get("name", ""),
            role=data.get("role", "cashier"),
            last_access=session.get(cls.LAST_ACCESS_KEY),
        )

    def save(self):
        session[self.KEY] = {"email": self.email, "name": self.name, "role": self.role}
        session[self.LAST_ACCESS_KEY] = self.last_access

    @staticmethod
    def clear():
        session.clear()

    def is_expired(self, timeout, now=None) -> bool:
        now = now if now is not None else time.time()
        return now - self.last_access > timeout

    def touch(self, now=None):
        self.last_access = now if now is not None else time.time()
        session[self.LAST_ACCESS_KEY] = self.last_access

    def has_role(self, *roles) -> bool:
        return self.role in roles


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        # not logged in -> login page
        user = UserSession.load()
        if user is None:
            return redirect(url_for("auth.login", next=request.script_root + request.full_path.rstrip("?")))

        # idle too long -> timeout
        if user.is_expired(get_timeout_seconds()):
            UserSession.clear()
            return redirect(url_for("auth.login", timeout=1))

        user.touch()
        return fn(*args, **kwargs)

    return wrapper


def role_required(*roles):
    """login_required + the user's role must be one of `roles` (403 otherwise)."""
    def decorator(fn):
        @wraps(fn)
        @login_required
        def wrapper(*args, **kwargs):
            user = UserSession.load()
            if not user.has_role(*roles):
                abort(403)
            return fn(*args, **kwargs)
        return wrapper
    return decorator
