"""Editor sign-in and the admin gate.

Credentials are checked by the hosted auth service; this module only keeps
the access token in the Flask session and compares the signed-in email with
the single allow-listed editor address.
"""

from functools import wraps
from typing import Any, Callable, Optional, Tuple, Union

from flask import Blueprint, Response, jsonify, redirect, render_template, request, session, url_for

from shop.exceptions import AuthError, RemoteStoreError
from shop.logging_config import get_logger
from shop.remote import AuthUser

from .config import ADMIN_EMAIL
from .store_context import get_auth_client, get_store

__all__ = ["auth", "current_user", "is_admin", "admin_required", "check_admin"]

logger = get_logger("web.auth")

auth = Blueprint("auth", __name__)

_TOKEN_KEY = "access_token"
_EMAIL_KEY = "email"


def current_user() -> Optional[AuthUser]:
    """Return the signed-in user, or None when there is no valid session."""
    token = session.get(_TOKEN_KEY)
    if not token:
        return None
    try:
        user = get_auth_client().get_user(token)
    except RemoteStoreError:
        logger.exception("Session check failed")
        return None
    if user is None:
        session.clear()
    return user


def is_admin(user: Optional[AuthUser]) -> bool:
    return bool(user and user.email and user.email.strip().lower() == ADMIN_EMAIL)


def check_admin() -> Optional[Tuple[Response, int]]:
    """JSON gate for API writes. Returns an error response or None."""
    user = current_user()
    if user is None:
        return jsonify({"error": "Authentication required"}), 401
    if not is_admin(user):
        return jsonify({"error": "Acceso denegado"}), 403
    return None


def admin_required(view: Callable[..., Any]) -> Callable[..., Any]:
    """Gate an HTML view: login page when signed out, denial page for other accounts."""

    @wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        user = current_user()
        if user is None:
            return redirect(url_for("auth.login", next=request.path))
        if not is_admin(user):
            return render_template("denied.html", site=get_store().site_config, email=user.email), 403
        return view(*args, **kwargs)

    return wrapper


@auth.route("/login", methods=["GET", "POST"])
def login() -> Union[str, Response, Tuple[Any, int]]:
    """Email/password sign-in (form or JSON)."""
    site = get_store().site_config
    if request.method == "GET":
        return render_template("login.html", site=site, error=None)

    data = request.get_json(silent=True) if request.is_json else request.form
    if not isinstance(data, dict):
        data = {}
    email = str(data.get("email", "")).strip()
    password = str(data.get("password", ""))

    if not email or not password:
        error = "Email y contraseña son obligatorios."
        if request.is_json:
            return jsonify({"error": error}), 400
        return render_template("login.html", site=site, error=error), 400

    try:
        auth_session = get_auth_client().sign_in(email, password)
    except AuthError as e:
        logger.info(f"Rejected sign-in for {email}: {e}")
        error = str(e) or "Credenciales incorrectas."
        if request.is_json:
            return jsonify({"error": error}), 401
        return render_template("login.html", site=site, error=error), 401
    except RemoteStoreError:
        logger.exception("Sign-in failed")
        error = "Error al iniciar sesión. Por favor, intenta de nuevo."
        if request.is_json:
            return jsonify({"error": error}), 502
        return render_template("login.html", site=site, error=error), 502

    session.clear()
    session[_TOKEN_KEY] = auth_session.access_token
    session[_EMAIL_KEY] = auth_session.user.email
    logger.info(f"Signed in: {auth_session.user.email}")

    if request.is_json:
        return jsonify({"email": auth_session.user.email, "admin": is_admin(auth_session.user)})
    target = request.args.get("next") or url_for("editor")
    # Local paths only
    if not target.startswith("/") or target.startswith("//"):
        target = url_for("editor")
    return redirect(target)


@auth.route("/logout", methods=["POST"])
def logout() -> Response:
    token = session.get(_TOKEN_KEY)
    if token:
        try:
            get_auth_client().sign_out(token)
        except RemoteStoreError:
            logger.exception("Remote sign-out failed; clearing local session anyway")
    session.clear()
    if request.is_json:
        return jsonify({"ok": True})
    return redirect(url_for("index"))
