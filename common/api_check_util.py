from .api_connection import get_connection, SheetsApiError

MAINTENANCE_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Service Unavailable</title>
</head>
<body style="text-align: center; padding-top: 50px; font-family: sans-serif; background-color: #f4f6f9;">
    <div style="background: white; padding: 40px; border-radius: 8px; display: inline-block; box-shadow: 0 4px 10px rgba(0,0,0,0.1);">
        <h1 style="color: #555;">Under maintenance</h1>
        <p style="color: #666;">The spreadsheet service could not be reached.</p>
        <p style="color: #666;">Please try again in a few minutes.</p>
    </div>
</body>
</html>
"""

def is_api_available(target=None):
    """
    Quick health probe of the sheets API before a write.

    Args:
        target (str): API target name (default: configured target)

    Returns:
        bool: True when /health answers with success
    """
    try:
        with get_connection(target) as conn:
            body = conn.health()
    except SheetsApiError as e:
        print(f"[API Check] unavailable: {e}")
        return False

    if isinstance(body, dict) and body.get("success") is False:
        print(f"[API Check] unhealthy: {body.get('message')}")
        return False
    return True
