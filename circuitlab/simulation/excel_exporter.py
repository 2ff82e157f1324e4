"""
simulation/excel_exporter.py

Export recorded tick readings to Excel (.xlsx) format.
No drawing code; choosing the file is the caller's responsibility.
"""

from datetime import datetime

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .csv_exporter import CIRCUIT_HEADERS, READING_HEADERS, circuit_row, reading_row


def _add_metadata_sheet(wb, network_name="", fps=None, frames=0):
    """Add a Summary sheet with run metadata."""
    ws = wb.active
    ws.title = "Summary"
    header_font = Font(bold=True)
    ws.append(["Network Simulation Summary"])
    ws["A1"].font = Font(bold=True, size=14)
    ws.append([])
    ws.append(["Analysis Type", "Tick Readings"])
    ws.append(["Date", datetime.now().strftime("%Y-%m-%d %H:%M:%S")])
    if network_name:
        ws.append(["Network", network_name])
    if fps is not None:
        ws.append(["FPS", fps])
    ws.append(["Frames", frames])
    for row in ws.iter_rows(min_row=3, max_col=1):
        row[0].font = header_font
    ws.column_dimensions["A"].width = 18
    ws.column_dimensions["B"].width = 30
    return ws


def _style_header_row(ws, row_num=1):
    """Apply header styling to a row of a worksheet."""
    header_fill = PatternFill(
        start_color="4472C4", end_color="4472C4", fill_type="solid"
    )
    header_font = Font(bold=True, color="FFFFFF")
    for cell in ws[row_num]:
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")


def _set_widths(ws, count, width):
    for i in range(1, count + 1):
        ws.column_dimensions[get_column_letter(i)].width = width


def export_to_excel(records, fps, filepath, network_name=""):
    """Export recorded ticks to an Excel workbook.

    The workbook holds a Summary sheet, a "Circuit" sheet with one row per
    tick and a "Readings" sheet with one row per component per tick.

    Args:
        records: list of TickRecord from SimulationController.tick()/run()
        fps: tick rate, used for the time column
        filepath: path to write the .xlsx file
        network_name: optional network filename for metadata
    """
    wb = Workbook()
    _add_metadata_sheet(wb, network_name, fps, len(records))
    _export_circuit(wb, records, fps)
    _export_readings(wb, records, fps)
    wb.save(filepath)


def _export_circuit(wb, records, fps):
    ws = wb.create_sheet("Circuit")
    ws.append(CIRCUIT_HEADERS)
    _style_header_row(ws)
    for record in records:
        ws.append(circuit_row(record, fps))
    _set_widths(ws, len(CIRCUIT_HEADERS), 16)


def _export_readings(wb, records, fps):
    ws = wb.create_sheet("Readings")
    if not records:
        ws.append(["No data"])
        return
    ws.append(READING_HEADERS)
    _style_header_row(ws)
    for record in records:
        for reading in record.components:
            ws.append(reading_row(record, reading, fps))
    _set_widths(ws, len(READING_HEADERS), 16)
    ws.column_dimensions["D"].width = 22
    ws.freeze_panes = "A2"
