# =================
# Login user lookup
# =================

from werkzeug.security import generate_password_hash, check_password_hash

from common.config_util import get_users

# used when the config file has no USERS entry
DEFAULT_USERS = [
    {
        "email": "admin@example.com",
        "name": "Admin User",
        "role": "admin",
        "password_hash": generate_password_hash("password"),
    },
]


def list_users() -> list:
    return get_users() or DEFAULT_USERS


def authenticate_user(email: str, password: str):
    """
    Check an email / password pair.
    Config entries carry "password_hash" (werkzeug format); a plain
    "password" is accepted for local setups.

    Returns:
        dict | None: the user entry on success
    """
    email = (email or "").strip().lower()
    if not email or not password:
        return None

    for user in list_users():
        if (user.get("email") or "").strip().lower() != email:
            continue
        if user.get("password_hash"):
            ok = check_password_hash(user["password_hash"], password)
        else:
            ok = user.get("password") == password
        return user if ok else None
    return None
