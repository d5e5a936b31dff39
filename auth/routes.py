from urllib.parse import urlparse

from flask import (
    render_template, request, redirect,
    url_for, jsonify
)
from . import auth_bp
from .auth_utils import UserSession, get_timeout_seconds
from .user_store import authenticate_user
from common.log_util import write_op_log


def _safe_next(next_url):
    # only local paths, never another host ("//host" and "/\host" both leave the site)
    if not next_url or not next_url.startswith("/") or next_url[1:2] in ("/", "\\"):
        return url_for("dashboard")
    parts = urlparse(next_url.replace("\\", "/"))
    if parts.scheme or parts.netloc:
        return url_for("dashboard")
    return next_url


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    error = ""
    if request.args.get("timeout"):
        error = "Session expired, please log in again"

    if request.method == "POST":
        email = request.form.get("email", "").strip()
        password = request.form.get("password", "")

        if not email or not password:
            error = "Email and password are required"
        else:
            user = authenticate_user(email, password)
            if user:
                UserSession(
                    email=user["email"],
                    name=user.get("name", ""),
                    role=user.get("role", "cashier"),
                ).save()
                write_op_log(user["email"], "auth", "LOGIN", "login ok")

                next_url = request.args.get("next") or request.form.get("next")
                return redirect(_safe_next(next_url))

            write_op_log(email, "auth", "LOGIN_NG", "invalid credentials")
            error = "Invalid email or password"

    return render_template("auth/login.html", error=error)


# logout
@auth_bp.route("/logout", methods=["POST"])
def logout():
    user = UserSession.load()
    if user:
        write_op_log(user.email, "auth", "LOGOUT", "logout")
    UserSession.clear()
    return redirect(url_for("auth.login"))


# keep-alive check used by the page script
@auth_bp.route("/check_session")
def check_session():
    user = UserSession.load()
    if user is None:
        return jsonify({"logged_in": False})

    if user.is_expired(get_timeout_seconds()):
        UserSession.clear()
        return jsonify({"logged_in": False})

    return jsonify({"logged_in": True, "email": user.email, "role": user.role})
