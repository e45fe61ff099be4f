from __future__ import annotations

from flask import Flask, jsonify

from ..api.http import json_body
from ..container import Container
from .guards import bearer_required, current_claim


def register(app: Flask, container: Container) -> None:
    auth_required = bearer_required(container.token_service)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        body = json_body()
        user, token = container.auth_service.login(body.get("email"), body.get("password"))
        return jsonify({"user": user.to_public_dict(), "token": token})

    @app.route("/api/auth/validate", methods=["GET"], endpoint="auth_validate")
    @auth_required
    def validate():
        return jsonify({"valid": True, "user": current_claim().to_dict()})
