"""
common/sheet_fetch.py
---------------------
Page-level sheet loading: parallel fetch, header check, one error message.
"""
from .api_connection import get_connection, SheetsApiError
from .sheet_schema import check_sheets


def fetch_page_sheets(page: str, sheet_names):
    """
    Fetch every sheet a page needs.

    Args:
        page (str): label used in the error message ("cashflow", "inventory" ...)
        sheet_names (list[str]): sheets to fetch

    Returns:
        (values_by_sheet: dict, error: str, notices: list[str])
        On failure every sheet maps to [] and error holds
        "Failed to fetch <page> data: <message>".
    """
    try:
        with get_connection() as conn:
            values = conn.fetch_many(sheet_names)
    except SheetsApiError as e:
        print(f"[Sheets API] {page}: {e}")
        return {name: [] for name in sheet_names}, f"Failed to fetch {page} data: {e}", []

    notices = check_sheets(values)
    return values, "", notices
