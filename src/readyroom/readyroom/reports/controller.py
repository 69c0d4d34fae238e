from __future__ import annotations

import io
import logging

from flask import Flask, jsonify, request, send_file

from ..container import Container
from ..core.enums import ReportErrorKind
from ..cycles.model import Cycle
from ..roster.model import RosterFilters
from .model import ReportResult

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    ReportErrorKind.NOT_FOUND: 404,
    ReportErrorKind.EMPTY_INPUT: 422,
    ReportErrorKind.TIMEOUT: 504,
    ReportErrorKind.CANCELLED: 499,
    ReportErrorKind.UNEXPECTED: 500,
}


def _cycle_json(cycle: Cycle) -> dict:
    return {
        "id": cycle.cycle_id,
        "name": cycle.name,
        "start_date": cycle.start_date.isoformat(),
        "end_date": cycle.end_date.isoformat(),
        "type": cycle.cycle_type,
    }


def _filters_from_request() -> RosterFilters:
    return RosterFilters(
        squadron_ids=frozenset(v for v in request.args.getlist("squadron_id") if v),
        pilot_ids=frozenset(v for v in request.args.getlist("pilot_id") if v),
    )


def _send(result: ReportResult):
    if not result.ok:
        return jsonify({"success": False, "error": result.error.kind.value, "message": result.error.reason}), (
            _STATUS_BY_KIND.get(result.error.kind, 500)
        )

    artifact = result.artifact
    return send_file(
        io.BytesIO(artifact.content),
        mimetype=artifact.mimetype,
        as_attachment=True,
        download_name=artifact.filename,
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/reports/cycles", methods=["GET"], endpoint="report_cycles")
    def report_cycles():
        try:
            cycles = container.cycle_service.list_cycles()
        except Exception:
            logger.exception("Failed to list cycles")
            return jsonify({"success": False, "message": "Could not load cycles"}), 500
        return jsonify({"success": True, "cycles": [_cycle_json(c) for c in cycles]})

    @app.route("/reports/cycles/default", methods=["GET"], endpoint="report_default_cycle")
    def report_default_cycle():
        try:
            cycle = container.cycle_service.get_default_cycle()
        except Exception:
            logger.exception("Failed to resolve default cycle")
            return jsonify({"success": False, "message": "Could not load cycles"}), 500
        if cycle is None:
            return jsonify({"success": False, "message": "No cycles found"}), 404
        return jsonify({"success": True, "cycle": _cycle_json(cycle)})

    @app.route("/reports/cycles/<cycle_id>/attendance.xlsx", methods=["GET"], endpoint="report_cycle_attendance")
    def report_cycle_attendance(cycle_id: str):
        return _send(container.report_service.generate(cycle_id, filters=_filters_from_request()))

    @app.route("/reports/cycles/<cycle_id>/summary.csv", methods=["GET"], endpoint="report_cycle_summary")
    def report_cycle_summary(cycle_id: str):
        return _send(container.report_service.generate_summary_csv(cycle_id, filters=_filters_from_request()))
