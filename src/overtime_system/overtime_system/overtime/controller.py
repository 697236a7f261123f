from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..core.exceptions import InvalidStateTransition, NotFoundError, StoreError, ValidationError
from ..container import Container
from ..stats.service import DayStats
from . import schemas
from .model import AuditMeta, OvertimeRecord

logger = logging.getLogger(__name__)


def record_to_json(r: OvertimeRecord) -> dict:
    return {
        "id": r.record_id,
        "employeeId": r.employee_id,
        "workDate": r.work_date.strftime("%Y-%m-%d"),
        "shift": r.shift,
        "inTime": r.in_time,
        "outTime": r.out_time,
        "reason": r.reason,
        "status": r.status.value,
        "normalMinutes": r.normal_minutes,
        "doubleMinutes": r.double_minutes,
        "tripleMinutes": r.triple_minutes,
        "isNight": r.is_night,
        "isTripleDay": r.is_triple_day,
        "createdBy": r.created_by,
        "updatedBy": r.updated_by,
        "createdAt": r.created_at.isoformat(),
        "updatedAt": r.updated_at.isoformat(),
        "decidedBy": r.decided_by,
        "decidedAt": r.decided_at.isoformat() if r.decided_at else None,
        "decisionReason": r.decision_reason,
    }


def stats_to_json(s: DayStats) -> dict:
    return {
        "date": s.date.strftime("%Y-%m-%d"),
        "total": s.total,
        "pending": s.pending,
        "approved": s.approved,
        "rejected": s.rejected,
        "normalMinutes": s.normal_minutes,
        "doubleMinutes": s.double_minutes,
        "tripleMinutes": s.triple_minutes,
    }


def register(app: Flask, container: Container) -> None:
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if not session.get("user_id"):
                return jsonify({"ok": False, "error": "Authentication required"}), 401
            return view(*args, **kwargs)

        return wrapper

    def _actor() -> str:
        return str(session["user_id"])

    def _meta() -> AuditMeta:
        return AuditMeta(
            ip=request.remote_addr,
            user_agent=request.headers.get("User-Agent"),
            route=request.full_path.rstrip("?"),
        )

    @app.errorhandler(ValidationError)
    def _on_validation(e: ValidationError):
        return jsonify({"ok": False, "error": str(e)}), 400

    @app.errorhandler(NotFoundError)
    def _on_not_found(e: NotFoundError):
        return jsonify({"ok": False, "error": str(e)}), 404

    @app.errorhandler(InvalidStateTransition)
    def _on_invalid_state(e: InvalidStateTransition):
        return jsonify({"ok": False, "error": str(e)}), 409

    @app.errorhandler(StoreError)
    def _on_store_error(e: StoreError):
        logger.exception("Store failure on %s %s", request.method, request.path)
        return jsonify({"ok": False, "error": "Internal server error"}), 500

    @app.route("/ot", methods=["GET"], endpoint="ot_list")
    @login_required
    def ot_list():
        query = schemas.parse_list_query(request.args)
        page = container.overtime_service.list(query)
        return jsonify(
            {
                "items": [record_to_json(r) for r in page.items],
                "page": page.page,
                "limit": page.limit,
                "total": page.total,
            }
        )

    @app.route("/ot/pending-count", methods=["GET"], endpoint="ot_pending_count")
    @login_required
    def ot_pending_count():
        return jsonify({"count": container.overtime_service.pending_count()})

    @app.route("/ot/notifications", methods=["GET"], endpoint="ot_notifications")
    @login_required
    def ot_notifications():
        limit = schemas.parse_notification_limit(request.args)
        items = container.notification_service.pending(limit)
        return jsonify({"items": [record_to_json(r) for r in items]})

    @app.route("/ot", methods=["POST"], endpoint="ot_bulk_create")
    @login_required
    def ot_bulk_create():
        data = schemas.parse_bulk_create(request.get_json(silent=True))
        created = container.overtime_service.create_bulk(data, actor_id=_actor(), meta=_meta())
        return jsonify({"items": [record_to_json(r) for r in created]}), 201

    @app.route("/ot/<record_id>", methods=["GET"], endpoint="ot_detail")
    @login_required
    def ot_detail(record_id: str):
        record = container.overtime_service.get(schemas.parse_record_id(record_id))
        return jsonify({"ok": True, "item": record_to_json(record)})

    @app.route("/ot/<record_id>", methods=["PATCH"], endpoint="ot_update")
    @login_required
    def ot_update(record_id: str):
        patch = schemas.parse_patch(request.get_json(silent=True))
        updated = container.overtime_service.update(
            schemas.parse_record_id(record_id), patch, actor_id=_actor(), meta=_meta()
        )
        return jsonify({"ok": True, "item": record_to_json(updated)})

    @app.route("/ot/<record_id>/approve", methods=["POST"], endpoint="ot_approve")
    @login_required
    def ot_approve(record_id: str):
        decision = schemas.parse_decision(request.get_json(silent=True))
        updated = container.overtime_service.approve(
            schemas.parse_record_id(record_id), decision, actor_id=_actor(), meta=_meta()
        )
        return jsonify({"ok": True, "item": record_to_json(updated)})

    @app.route("/ot/<record_id>/reject", methods=["POST"], endpoint="ot_reject")
    @login_required
    def ot_reject(record_id: str):
        decision = schemas.parse_decision(request.get_json(silent=True))
        updated = container.overtime_service.reject(
            schemas.parse_record_id(record_id), decision, actor_id=_actor(), meta=_meta()
        )
        return jsonify({"ok": True, "item": record_to_json(updated)})

    @app.route("/ot/stats/day", methods=["GET"], endpoint="ot_day_stats")
    @login_required
    def ot_day_stats():
        day = schemas.parse_day(request.args)
        return jsonify(stats_to_json(container.stats_service.day_stats(day)))

    @app.route("/ot/stats/week", methods=["GET"], endpoint="ot_week_stats")
    @login_required
    def ot_week_stats():
        start, end = schemas.parse_range(request.args)
        items = container.stats_service.range_stats(start, end)
        return jsonify({"items": [stats_to_json(s) for s in items]})
