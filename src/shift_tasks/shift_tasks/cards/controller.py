from __future__ import annotations

from flask import Flask, jsonify, request

from ..api.http import json_body
from ..auth.guards import bearer_required, current_claim
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth_required = bearer_required(container.token_service)

    @app.route("/api/cards", methods=["GET"], endpoint="list_cards")
    @auth_required
    def list_cards():
        board = container.card_service.list_records(
            claim=current_claim(),
            position_id=request.args.get("positionId") or None,
            user_id=request.args.get("userId") or None,
        )
        return jsonify(
            {
                "records": [r.to_dict() for r in board.records],
                "positions": [p.to_dict() for p in board.positions],
                "users": [u.to_public_dict() for u in board.users],
            }
        )

    @app.route("/api/cards", methods=["POST"], endpoint="record_card_count")
    @auth_required
    def record_card_count():
        record = container.card_service.record_count(claim=current_claim(), payload=json_body())
        return jsonify(record.to_dict())
