import io

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Side, PatternFill, Font
from openpyxl.utils import get_column_letter

FONT_NAME = "Calibri"
CURRENCY_FORMAT = '"TSh"#,##0.##'

HEADER_ROW = 3
FIRST_DATA_ROW = 4


# -----------------------------------------
# Title (row 2) / header (row 3)
# -----------------------------------------
def apply_title(ws, title, col_end):
    ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=col_end)
    ws["A2"].value = title
    ws["A2"].alignment = Alignment(horizontal="left", vertical="center")
    ws.row_dimensions[2].height = 19.5


def apply_header_color(ws, col_end):
    fill = PatternFill("solid", fgColor="C6D9F1")
    for col in range(1, col_end + 1):
        cell = ws.cell(row=HEADER_ROW, column=col)
        cell.fill = fill
        cell.alignment = Alignment(horizontal="center")


# -----------------------------------------
# Borders
# -----------------------------------------
def apply_borders(ws, col_end, last_row):
    """Thick outer frame, dotted inner lines, thin line under the header."""
    dotted = Side(style="dotted", color="000000")
    thin = Side(style="thin", color="000000")
    thick = Side(style="thick", color="000000")

    for row in range(HEADER_ROW, last_row + 1):
        for col in range(1, col_end + 1):
            ws.cell(row=row, column=col).border = Border(
                top=thick if row == HEADER_ROW else dotted,
                bottom=thick if row == last_row else (thin if row == HEADER_ROW else dotted),
                left=thick if col == 1 else dotted,
                right=thick if col == col_end else dotted,
            )


# -----------------------------------------
# Fonts / widths / number formats
# -----------------------------------------
def apply_font_style(ws):
    title_cell = ws["A2"]
    for row in ws.iter_rows():
        for cell in row:
            if cell is title_cell:
                cell.font = Font(name=FONT_NAME, size=14, bold=True)
            elif cell.row == HEADER_ROW:
                cell.font = Font(name=FONT_NAME, size=11, bold=True)
            else:
                cell.font = Font(name=FONT_NAME, size=11)


def apply_column_widths(ws, widths):
    for i, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(i)].width = width


def apply_currency_format(ws, currency_cols, last_row):
    for col in currency_cols:
        for row in range(FIRST_DATA_ROW, last_row + 1):
            cell = ws.cell(row=row, column=col)
            cell.number_format = CURRENCY_FORMAT
            cell.alignment = Alignment(horizontal="right")


def apply_negative_red(ws, cols, last_row):
    for col in cols:
        for row in range(FIRST_DATA_ROW, last_row + 1):
            cell = ws.cell(row=row, column=col)
            if isinstance(cell.value, (int, float)) and cell.value < 0:
                cell.font = Font(name=FONT_NAME, size=11, color="FF0000")


# -----------------------------------------
# Totals row
# -----------------------------------------
def append_totals_row(ws, totals, col_end):
    """
    totals: {column_index: value}, label goes in column 1.
    Yellow fill with a double line on top.
    """
    row = ws.max_row + 1
    ws.cell(row=row, column=1).value = "Total"
    for col, value in totals.items():
        ws.cell(row=row, column=col).value = value

    fill = PatternFill(start_color="FFFFCC", end_color="FFFFCC", fill_type="solid")
    double = Side(style="double", color="000000")
    for col in range(1, col_end + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = fill
        cell.border = Border(
            top=double,
            bottom=cell.border.bottom,
            left=cell.border.left,
            right=cell.border.right,
        )
    return row


# ============================================================
# Ledger workbook
# ============================================================
def build_ledger_workbook(title, headers, rows, widths=None, currency_cols=(), totals=None,
                          negative_red_cols=()):
    """
    One-sheet workbook: title, colored header, bordered rows, currency
    columns, frozen header and an optional totals row.

    Args:
        title (str): sheet title (row 2)
        headers (list[str]): column captions
        rows (list[list]): cell values
        widths (list[int]): column widths
        currency_cols (iterable[int]): 1-based columns shown as TSh
        totals (dict|None): {column_index: value} for the totals row

    Returns:
        io.BytesIO: xlsx content, positioned at 0
    """
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]
    col_end = len(headers)

    apply_title(ws, title, col_end)
    for col, caption in enumerate(headers, start=1):
        ws.cell(row=HEADER_ROW, column=col).value = caption
    for r, values in enumerate(rows, start=FIRST_DATA_ROW):
        for col, value in enumerate(values, start=1):
            ws.cell(row=r, column=col).value = value

    last_row = max(HEADER_ROW, ws.max_row)
    apply_header_color(ws, col_end)
    apply_borders(ws, col_end, last_row)
    if totals:
        last_row = append_totals_row(ws, totals, col_end)
    apply_font_style(ws)
    apply_column_widths(ws, widths or [16] * col_end)
    apply_currency_format(ws, currency_cols, last_row)
    apply_negative_red(ws, negative_red_cols, last_row)

    ws.freeze_panes = f"A{FIRST_DATA_ROW}"

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf
