from __future__ import annotations

from flask import Flask

from ..common.http import current_actor, json_body, rate_limited
from ..common.responses import success
from ..common.validators import require_positive_int
from ..container import Container
from .model import ReviewOutcome


def _outcome_payload(outcome: ReviewOutcome) -> dict:
    return {
        "review": outcome.event.to_dict(),
        "post": outcome.report.to_dict(),
        "pointsAwarded": outcome.points_delta,
        "pointsBreakdown": outcome.breakdown,
        "blocked": outcome.blocked,
        "blockReason": outcome.block_reason.value if outcome.block_reason else None,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/reviews", methods=["POST"], endpoint="create_review")
    @rate_limited(container.rate_limiter, "reviews")
    def create_review():
        body = json_body()
        outcome = container.review_service.apply_review(
            report_id=require_positive_int(body.get("postId"), "postId"),
            action=body.get("action"),
            actor=current_actor(),
            reason_code=body.get("reason"),
            comment=body.get("comment"),
        )
        return success(_outcome_payload(outcome), 201)

    @app.route("/reviews/post/<int:report_id>", methods=["GET"], endpoint="list_reviews")
    def list_reviews(report_id: int):
        events = container.review_service.list_reviews(report_id, current_actor())
        return success([e.to_dict() for e in events])

    @app.route("/posts/<int:report_id>/resubmit", methods=["POST"], endpoint="resubmit_post")
    @rate_limited(container.rate_limiter, "resubmit")
    def resubmit_post(report_id: int):
        body = json_body()
        outcome = container.review_service.resubmit(
            report_id=report_id,
            actor=current_actor(),
            supplementary_content=body.get("supplementaryContent"),
        )
        return success(_outcome_payload(outcome))
