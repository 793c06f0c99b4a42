from __future__ import annotations

from flask import Flask

from ..common.http import current_actor, json_body, rate_limited
from ..common.responses import success
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/posts", methods=["POST"], endpoint="create_post")
    @rate_limited(container.rate_limiter, "posts")
    def create_post():
        body = json_body()
        report = container.report_service.submit(
            actor=current_actor(),
            site_id=body.get("siteId"),
            category=body.get("category"),
            content=body.get("content"),
            risk_level=body.get("riskLevel"),
            location_floor=body.get("locationFloor"),
            location_zone=body.get("locationZone"),
            is_urgent=body.get("isUrgent"),
        )
        return success({"post": report.to_dict()}, 201)
