from __future__ import annotations

from flask import Flask, jsonify, request

from ..api.http import json_body
from ..auth.guards import bearer_required, current_claim
from ..container import Container
from .service import parse_task_query


def register(app: Flask, container: Container) -> None:
    auth_required = bearer_required(container.token_service)

    @app.route("/api/tasks", methods=["GET"], endpoint="list_tasks")
    @auth_required
    def list_tasks():
        now = container.clock()
        listing = container.task_service.list_tasks(
            claim=current_claim(),
            query=parse_task_query(request.args),
            now=now,
        )
        return jsonify(
            {
                "tasks": [t.to_dict(now=now) for t in listing.tasks],
                "positions": [p.to_dict() for p in listing.positions],
                "users": [u.to_public_dict() for u in listing.users],
            }
        )

    @app.route("/api/tasks", methods=["POST"], endpoint="create_task")
    @auth_required
    def create_task():
        task = container.task_service.create_task(claim=current_claim(), payload=json_body())
        return jsonify(task.to_dict(now=container.clock())), 201

    @app.route("/api/tasks/<task_id>", methods=["GET"], endpoint="get_task")
    @auth_required
    def get_task(task_id: str):
        task = container.task_service.get_task(claim=current_claim(), task_id=task_id)
        return jsonify(task.to_dict(now=container.clock()))

    @app.route("/api/tasks/<task_id>", methods=["PATCH"], endpoint="update_task")
    @auth_required
    def update_task(task_id: str):
        now = container.clock()
        task = container.task_service.update_task(
            claim=current_claim(),
            task_id=task_id,
            payload=json_body(),
            now=now,
        )
        return jsonify(task.to_dict(now=now))

    @app.route("/api/tasks/<task_id>", methods=["POST"], endpoint="duplicate_task")
    @auth_required
    def duplicate_task(task_id: str):
        task = container.task_service.duplicate_task(claim=current_claim(), task_id=task_id, payload=json_body())
        return jsonify(task.to_dict(now=container.clock())), 201
