from __future__ import annotations

from flask import Flask, request

from ..auth.controller import json_body
from ..auth.gate import AccessGate, client_from_request
from ..auth.sessions import Session
from ..container import Container
from ..core.constants import MUTATING_METHODS
from ..core.responses import success_response
from .routes import RouteTable


def _portal_view(gate: AccessGate, table: RouteTable):
    @gate.protect(*table.allowed_roles, csrf=True)
    def portal(session: Session):
        if request.method in MUTATING_METHODS:
            payload = json_body()
        else:
            payload = request.args.to_dict()

        data = table.dispatch(
            request.method,
            request.args.get("action", ""),
            session.claims(),
            payload,
            client_from_request(),
        )
        return success_response(data=data)

    return portal


def register(app: Flask, container: Container) -> None:
    for portal, table in container.route_tables.items():
        app.add_url_rule(
            f"/protected/{portal}",
            endpoint=f"protected_{portal.replace('-', '_')}",
            view_func=_portal_view(container.gate, table),
            methods=["GET", "POST"],
        )
