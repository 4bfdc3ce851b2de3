from __future__ import annotations

from flask import Flask, request

from ..container import Container
from ..core.constants import CSRF_HEADER
from ..core.enums import ErrorKind
from ..core.exceptions import SessionExpiredError, ValidationError
from ..core.responses import error_response, success_response
from .gate import client_from_request


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON data", kind=ErrorKind.INVALID_REQUEST)
    return data


def register(app: Flask, container: Container) -> None:
    cookie = container.session_cookie
    gate = container.gate

    @app.errorhandler(SessionExpiredError)
    def session_expired(exc: SessionExpiredError):
        response, status = error_response(exc.message, exc.status_code)
        cookie.clear(response)
        return response, status

    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        if not data.get("email") or not data.get("password"):
            raise ValidationError("Email and password are required", kind=ErrorKind.MISSING_FIELD)

        session = container.auth_service.login(
            str(data["email"]),
            str(data["password"]),
            previous_session_id=gate.session_id_from_request(),
            client=client_from_request(),
        )
        response, status = success_response(
            "Login successful",
            {"username": session.username, "user_id": session.user_id, "role": session.role.value},
        )
        cookie.attach(response, session)
        response.headers[CSRF_HEADER] = session.csrf_token
        return response, status

    @app.route("/logout", methods=["GET"], endpoint="logout")
    def logout():
        container.auth_service.logout(gate.session_id_from_request(), client=client_from_request())
        response, status = success_response("Logged out successfully")
        cookie.clear(response)
        return response, status

    @app.route("/check-auth", methods=["GET"], endpoint="check_auth")
    def check_auth():
        session = container.auth_service.identity(gate.session_id_from_request(), client=client_from_request())
        response, status = success_response("User is authenticated", session.identity())
        response.headers[CSRF_HEADER] = session.csrf_token
        return response, status

    @app.route("/signup", methods=["POST"], endpoint="signup")
    def signup():
        result = container.registration.register(json_body(), client=client_from_request())
        if not result.ok:
            return error_response(result.error.message, result.error.status_code)
        return success_response(
            "Registration successful",
            {"user_id": result.user.user_id, "role": result.user.role.value},
        )
