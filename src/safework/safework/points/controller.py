from __future__ import annotations

from flask import Flask, request

from ..attendance.gate import normalize_site_id
from ..common.http import current_actor
from ..common.responses import success
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/points/balance", methods=["GET"], endpoint="points_balance")
    def points_balance():
        site_id = normalize_site_id(request.args.get("siteId"))
        balance = container.points_service.get_balance(actor=current_actor(), site_id=site_id)
        return success({"balance": balance, "siteId": site_id})
