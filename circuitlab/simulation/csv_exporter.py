"""
simulation/csv_exporter.py

Export recorded tick readings to CSV format.
No drawing code; choosing the file is the caller's responsibility.
"""

import csv
import io
from datetime import datetime

READING_HEADERS = [
    "Frame", "Time (s)", "Component", "Type",
    "Resistance (Ohm)", "Voltage (V)", "Current (A)", "Power (W)", "On", "Blown",
]

CIRCUIT_HEADERS = [
    "Frame", "Time (s)", "Evaluated", "Broken",
    "Resistance (Ohm)", "Voltage (V)", "Current (A)", "Power (W)",
]


def _write_preamble(writer, analysis_type, network_name, fps):
    writer.writerow(["# Analysis Type", analysis_type])
    writer.writerow(["# Date", datetime.now().strftime("%Y-%m-%d %H:%M:%S")])
    if network_name:
        writer.writerow(["# Network", network_name])
    writer.writerow(["# FPS", fps])
    writer.writerow([])


def reading_row(record, reading, fps):
    """One CSV/worksheet row for a component reading within a tick record."""
    return [
        record.frame,
        record.frame / fps,
        reading["id"],
        reading["type"],
        reading["resistance"],
        reading["voltage"],
        reading["current"],
        reading["power"],
        reading["is_on"],
        reading["is_blown"],
    ]


def circuit_row(record, fps):
    """One CSV/worksheet row for the root circuit within a tick record."""
    circuit = record.circuit
    return [
        record.frame,
        record.frame / fps,
        record.evaluated,
        circuit.get("is_broken", ""),
        circuit.get("resistance", ""),
        circuit.get("voltage", ""),
        circuit.get("current", ""),
        circuit.get("power", ""),
    ]


def export_tick_readings(records, fps, network_name=""):
    """
    Export per-component readings to CSV string.

    Args:
        records: list of TickRecord from SimulationController.tick()/run()
        fps: tick rate, used for the time column
        network_name: optional network filename

    Returns:
        str: CSV content, one row per component per tick
    """
    output = io.StringIO()
    writer = csv.writer(output)
    _write_preamble(writer, "Tick Readings", network_name, fps)

    writer.writerow(READING_HEADERS)
    for record in records:
        for reading in record.components:
            writer.writerow(reading_row(record, reading, fps))

    return output.getvalue()


def export_circuit_summary(records, fps, network_name=""):
    """
    Export the root circuit's readings to CSV string.

    Returns:
        str: CSV content, one row per tick
    """
    output = io.StringIO()
    writer = csv.writer(output)
    _write_preamble(writer, "Circuit Summary", network_name, fps)

    writer.writerow(CIRCUIT_HEADERS)
    for record in records:
        writer.writerow(circuit_row(record, fps))

    return output.getvalue()


def write_csv(csv_content, filepath):
    """
    Write CSV content string to a file.

    Args:
        csv_content: str from one of the export_* functions
        filepath: path to write to
    """
    with open(filepath, "w", newline="") as f:
        f.write(csv_content)
