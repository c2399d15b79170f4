from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import DateWindow, parse_iso_date
from ..common.http import current_identity, login_required
from ..container import TenantContainers
from ..core.enums import Weekday
from ..core.exceptions import AuthorizationError, ValidationError


def register(app: Flask, containers: TenantContainers) -> None:
    @app.route("/api/timesheets", methods=["GET"], endpoint="api_timesheet")
    @login_required
    def timesheet():
        identity = current_identity()
        args = request.args

        worker_id = args.get("worker_id") or identity.user_id
        if worker_id != identity.user_id and not identity.is_manager:
            raise AuthorizationError("Only managers can view other workers' timesheets")

        start = args.get("start")
        end = args.get("end") or start
        if not start:
            raise ValidationError("start is required (YYYY-MM-DD)")
        window = DateWindow(parse_iso_date(start), parse_iso_date(end))

        week_start_day = args.get("week_start_day")
        if week_start_day is not None:
            try:
                week_start_day = Weekday(int(week_start_day))
            except ValueError:
                raise ValidationError("week_start_day must be 0 (Sunday) to 6 (Saturday)")

        job_ids = args.getlist("job_id") or None
        report = containers.for_tenant(identity.tenant).report_service.build_timesheet(
            worker_id=worker_id,
            window=window,
            timezone=args.get("timezone"),
            job_ids=job_ids,
            week_start_day=week_start_day,
        )
        return jsonify({"success": True, "report": report.to_dict()})
