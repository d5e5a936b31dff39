from flask import render_template, request, redirect, url_for, flash, jsonify

from . import sheets_bp
from auth.auth_utils import login_required, role_required
from common.api_connection import get_connection, SheetsApiError
from common.auth_util import get_login_user
from common.log_util import write_op_log
from common.sheet_schema import SCHEMAS

VIEW_ROW_LIMIT = 200


# ---------------------------------------------------
# 1. API health (no login)
# ---------------------------------------------------
@sheets_bp.route("/health")
def health():
    try:
        with get_connection() as conn:
            body = conn.health()
        error = ""
    except SheetsApiError as e:
        body = {}
        error = f"Failed to fetch health data: {e}"

    healthy = not error and (not isinstance(body, dict) or body.get("success") is not False)
    if request.args.get("format") == "json":
        return jsonify({"healthy": healthy, "health": body, "message": error}), (200 if healthy else 503)
    return render_template("sheets/health.html", health=body, healthy=healthy, error=error)


# ---------------------------------------------------
# 2. Spreadsheet metadata
# ---------------------------------------------------
@sheets_bp.route("/metadata")
@login_required
def metadata():
    try:
        with get_connection() as conn:
            meta = conn.metadata()
        error = ""
    except SheetsApiError as e:
        meta = {}
        error = f"Failed to fetch metadata data: {e}"

    sheets = []
    if isinstance(meta, dict):
        for s in meta.get("sheets") or []:
            # entries are either names or {title/properties...} objects
            if isinstance(s, dict):
                props = s.get("properties") or s
                sheets.append(props.get("title") or props.get("name") or "")
            else:
                sheets.append(str(s))
    return render_template("sheets/metadata.html", meta=meta, sheets=sheets, error=error)


# ---------------------------------------------------
# 3. Raw sheet viewer
# ---------------------------------------------------
@sheets_bp.route("/view/<sheet_name>")
@login_required
def view(sheet_name):
    range_ = request.args.get("range", "").strip() or None
    issues = []
    try:
        with get_connection() as conn:
            values = conn.get_values(sheet_name, range_)
        error = ""
    except SheetsApiError as e:
        values = []
        error = f"Failed to fetch {sheet_name} data: {e}"

    schema = SCHEMAS.get(sheet_name)
    if schema is not None and not error and not range_:
        issues = schema.validate(values[0] if values else [])

    header = values[0] if values else []
    rows = values[1:VIEW_ROW_LIMIT + 1]
    return render_template(
        "sheets/view.html",
        sheet_name=sheet_name, range_=range_ or "",
        header=header, rows=rows, total_rows=max(len(values) - 1, 0),
        error=error, notices=issues,
    )


# ---------------------------------------------------
# 4. Clear (admin)
# ---------------------------------------------------
@sheets_bp.route("/clear/<sheet_name>", methods=["POST"])
@role_required("admin")
def clear(sheet_name):
    range_ = request.form.get("range", "").strip() or None
    user = get_login_user()
    try:
        with get_connection() as conn:
            conn.clear(sheet_name, range_)
    except SheetsApiError as e:
        flash(f"Failed to clear {sheet_name}: {e}", "error")
        return redirect(url_for("sheets.view", sheet_name=sheet_name))

    write_op_log(user, "sheets", "CLEAR", f"{sheet_name} {range_ or '(all)'}")
    flash(f"{sheet_name} cleared", "success")
    return redirect(url_for("sheets.view", sheet_name=sheet_name))
