from flask import session

def get_login_user(default="anonymous"):
    """
    Email of the logged-in user (for operation logs).
    Falls back to `default` outside a login.
    """
    user = session.get("user") or {}
    return user.get("email") or default
