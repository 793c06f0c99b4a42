from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_actor, json_body, rate_limited
from ..common.responses import success
from ..common.validators import require_positive_int
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _parse_valid_date(value):
        if not value:
            return None
        try:
            return parse_iso_date(str(value))
        except ValueError:
            raise ValidationError("validDate는 YYYY-MM-DD 형식이어야 합니다")

    @app.route("/access-policies/<int:site_id>", methods=["GET"], endpoint="get_access_policy")
    def get_access_policy(site_id: int):
        container.site_access.require_member(current_actor(), site_id)
        policy = container.access_policy_service.get_policy(site_id)
        return success({"policy": policy.to_dict()})

    @app.route("/access-policies/<int:site_id>", methods=["PUT"], endpoint="update_access_policy")
    @rate_limited(container.rate_limiter, "access-policies")
    def update_access_policy(site_id: int):
        body = json_body()
        policy = container.access_policy_service.update_policy(
            actor=current_actor(),
            site_id=site_id,
            require_checkin=body.get("requireCheckin"),
            day_cutoff_hour=body.get("dayCutoffHour"),
        )
        return success({"policy": policy.to_dict()})

    @app.route("/manual-approvals", methods=["POST"], endpoint="create_manual_approval")
    @rate_limited(container.rate_limiter, "manual-approvals")
    def create_manual_approval():
        body = json_body()
        approval = container.manual_approval_service.grant(
            actor=current_actor(),
            user_id=require_positive_int(body.get("userId"), "userId"),
            site_id=require_positive_int(body.get("siteId"), "siteId"),
            reason=body.get("reason"),
            valid_date=_parse_valid_date(body.get("validDate")),
        )
        return success({"approval": approval.to_dict()}, 201)
