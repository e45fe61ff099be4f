from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.guards import bearer_required, current_claim
from ..container import Container
from .service import parse_period


def register(app: Flask, container: Container) -> None:
    auth_required = bearer_required(container.token_service)

    @app.route("/api/ranking", methods=["GET"], endpoint="ranking")
    @auth_required
    def ranking():
        period = parse_period(request.args.get("period"))
        rows = container.ranking_service.ranking(claim=current_claim(), period=period, now=container.clock())
        return jsonify({"period": period.value, "ranking": [r.to_dict() for r in rows]})

    @app.route("/api/analytics/positions", methods=["GET"], endpoint="position_summary")
    @auth_required
    def position_summary():
        summary = container.ranking_service.position_summary(claim=current_claim(), now=container.clock())
        return jsonify({"summary": [s.to_dict() for s in summary]})
