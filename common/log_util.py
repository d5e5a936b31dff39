from datetime import datetime

from flask import request, has_request_context

from .api_connection import get_connection, SheetsApiError
from .config_util import get_setting

def get_client_ip():
    """ Client IP address (honours X-Forwarded-For behind a proxy) """
    if not has_request_context():
        return '0.0.0.0'

    x_forwarded = request.headers.getlist("X-Forwarded-For")
    if x_forwarded:
        # first entry is the client
        return x_forwarded[0].split(',')[0].strip()

    return request.remote_addr or '0.0.0.0'

def write_op_log(user_id, module, action, msg):
    """
    Record a user operation.
    Always printed; also appended to the OPLOG_SHEET sheet when one is configured.
    """
    client_ip = get_client_ip()
    print(f"[LOG] {module} | {user_id} | {client_ip} | {action} | {msg}")

    sheet = get_setting("OPLOG_SHEET", "")
    if not sheet:
        return

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    try:
        with get_connection() as conn:
            conn.append(sheet, [[now, user_id or "", client_ip, module, action, msg]])
    except (SheetsApiError, ValueError) as e:
        # a failed log write must not stop the main operation
        print(f"[Log Error] Failed to write log: {e}")
