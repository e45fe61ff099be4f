from __future__ import annotations

from flask import Flask, jsonify

from ..api.http import json_body
from ..auth.guards import bearer_required, current_claim
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth_required = bearer_required(container.token_service)

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @auth_required
    def list_users():
        directory = container.user_service.list_users(claim=current_claim())
        return jsonify(
            {
                "users": [u.to_public_dict() for u in directory.users],
                "positions": [p.to_dict() for p in directory.positions],
            }
        )

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @auth_required
    def create_user():
        user = container.user_service.create_user(claim=current_claim(), payload=json_body())
        return jsonify(user.to_public_dict()), 201

    @app.route("/api/users/<user_id>", methods=["PATCH"], endpoint="update_user")
    @auth_required
    def update_user(user_id: str):
        user = container.user_service.update_user(claim=current_claim(), user_id=user_id, payload=json_body())
        return jsonify(user.to_public_dict())

    @app.route("/api/users/<user_id>", methods=["DELETE"], endpoint="delete_user")
    @auth_required
    def delete_user(user_id: str):
        container.user_service.delete_user(claim=current_claim(), user_id=user_id)
        return jsonify({"message": "User deleted successfully"})

    @app.route("/api/positions", methods=["GET"], endpoint="list_positions")
    @auth_required
    def list_positions():
        return jsonify({"positions": [p.to_dict() for p in container.user_service.list_positions()]})
