"""
Excel export of list screens
"""
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter


def build_workbook(title, headers, rows):
    """Return an .xlsx file (BytesIO) with a styled header row and sized columns."""
    wb = Workbook()
    ws = wb.active
    # sheet titles are limited to 31 characters
    ws.title = title[:31]

    ws.append(headers)

    # Style header row
    header_fill = PatternFill(start_color='366092', end_color='366092', fill_type='solid')
    header_font = Font(bold=True, color='FFFFFF')
    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal='center', vertical='center')

    for row in rows:
        ws.append(row)

    # Auto-size columns
    for i, col in enumerate(ws.columns, 1):
        max_length = max((len(str(cell.value)) for cell in col if cell.value is not None), default=0)
        ws.column_dimensions[get_column_letter(i)].width = min(max_length + 2, 50)

    bio = BytesIO()
    wb.save(bio)
    bio.seek(0)
    return bio
