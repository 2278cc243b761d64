"""
Export Service - Excel workbooks for accounting reports
"""
from datetime import date, datetime
from io import BytesIO
from typing import Dict, List

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter

from jewelerp.models import Organization

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER_FONT = Font(bold=True, color="FFFFFF", size=11)
HEADER_FILL = PatternFill(start_color="1e40af", end_color="1e40af", fill_type="solid")
TITLE_FONT = Font(bold=True, size=14)
CURRENCY_FONT = Font(name='Consolas', size=10)
TOTAL_FONT = Font(bold=True, size=10)
TOTAL_FILL = PatternFill(start_color="f3f4f6", end_color="f3f4f6", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)
AMOUNT_FORMAT = '#,##0.00'


def _amount_cell(ws, row: int, col: int, value):
    cell = ws.cell(row=row, column=col, value=value)
    cell.number_format = AMOUNT_FORMAT
    cell.font = CURRENCY_FONT
    cell.alignment = Alignment(horizontal='right')
    cell.border = THIN_BORDER
    return cell


def trial_balance_workbook(organization: Organization, rows: List[Dict], totals: Dict,
                           as_of_date: date = None) -> BytesIO:
    """Render a trial balance as an .xlsx file held in memory.

    Amounts are written as Decimal so the sheet shows exactly what the
    ledger holds; zero sides are left blank.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Trial Balance"

    ws['A1'] = organization.name
    ws['A1'].font = TITLE_FONT
    ws.merge_cells('A1:E1')

    ws['A3'] = "As of:"
    ws['B3'] = str(as_of_date) if as_of_date else "All dates"
    ws['A4'] = "Generated:"
    ws['B4'] = datetime.now().strftime('%Y-%m-%d %H:%M')

    headers = ['Code', 'Account', 'Type', 'Debit', 'Credit']
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=6, column=col, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal='center')
        cell.border = THIN_BORDER

    row = 7
    for line in rows:
        account = line["account"]
        ws.cell(row=row, column=1, value=account.account_code).border = THIN_BORDER
        ws.cell(row=row, column=2, value=account.account_name).border = THIN_BORDER
        ws.cell(row=row, column=3, value=account.account_type).border = THIN_BORDER
        _amount_cell(ws, row, 4, line["debit_total"] or None)
        _amount_cell(ws, row, 5, line["credit_total"] or None)
        row += 1

    for col in range(1, 6):
        ws.cell(row=row, column=col).fill = TOTAL_FILL
        ws.cell(row=row, column=col).font = TOTAL_FONT
        ws.cell(row=row, column=col).border = THIN_BORDER

    ws.cell(row=row, column=2, value="TOTAL")
    ws.cell(row=row, column=4, value=totals["total_debit"]).number_format = AMOUNT_FORMAT
    ws.cell(row=row, column=5, value=totals["total_credit"]).number_format = AMOUNT_FORMAT

    column_widths = [10, 40, 12, 15, 15]
    for col, width in enumerate(column_widths, 1):
        ws.column_dimensions[get_column_letter(col)].width = width

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer
