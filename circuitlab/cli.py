"""
Command-line interface for circuitlab batch operations.

Run simulations, validate networks, and normalize network files.

Usage::

    circuitlab simulate network.json
    circuitlab simulate network.json --frames 100 --format csv --output readings.csv
    circuitlab simulate network.json --format xlsx --output readings.xlsx
    circuitlab validate network.json
    circuitlab export network.json --output normalized.json
    circuitlab batch networks/ --output-dir results/
    circuitlab components
"""

import argparse
import glob
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from circuitlab.config import clamp_fps
from circuitlab.controllers.circuit_controller import CircuitController
from circuitlab.controllers.file_controller import validate_network_data
from circuitlab.controllers.simulation_controller import SimulationController
from circuitlab.errors import NetworkFileError, StructuralError
from circuitlab.models.catalog import COMPONENT_CLASSES
from circuitlab.models.network import NetworkModel
from circuitlab.simulation.csv_exporter import export_tick_readings

DEFAULT_FRAMES = 20


def try_load_network(filepath: str) -> tuple[Optional[NetworkModel], str]:
    """Load and validate a network JSON file without exiting.

    Args:
        filepath: Path to the network JSON file.

    Returns:
        (model, "") on success, or (None, error_message) on failure.
    """
    path = Path(filepath)
    if not path.exists():
        return None, f"file not found: {filepath}"

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        return None, f"invalid JSON in {filepath}: {e}"

    try:
        validate_network_data(data)
    except NetworkFileError as e:
        return None, f"invalid network file: {e}"

    try:
        return NetworkModel.from_dict(data), ""
    except StructuralError as e:
        return None, f"cannot build network from {filepath}: {e}"


def load_network(filepath: str) -> NetworkModel:
    """Load and validate a network JSON file.

    Raises:
        SystemExit: On file read or validation errors.
    """
    model, error = try_load_network(filepath)
    if model is None:
        print(f"Error: {error}", file=sys.stderr)
        sys.exit(1)
    return model


def _apply_overrides(model: NetworkModel, args: argparse.Namespace) -> None:
    if getattr(args, "fps", None) is not None:
        model.settings.fps = clamp_fps(args.fps)
    if getattr(args, "seed", None) is not None:
        model.settings.seed = args.seed
        model.rng.seed(args.seed)


def cmd_simulate(args: argparse.Namespace) -> int:
    """Run the network for a number of frames and output the readings."""
    if args.format == "xlsx" and not args.output:
        print("Error: --output is required for xlsx format", file=sys.stderr)
        return 1
    if args.frames < 0:
        print("Error: --frames must be non-negative", file=sys.stderr)
        return 1

    model = load_network(args.network)
    _apply_overrides(model, args)
    controller = CircuitController(model)
    sim = SimulationController(model, controller)

    result = sim.run(args.frames)

    if not result.success:
        print(f"Simulation failed: {result.error}", file=sys.stderr)
        for err in result.errors:
            print(f"  - {err}", file=sys.stderr)
        return 1

    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    for fault in result.faults:
        print(f"Fault: {fault}", file=sys.stderr)

    name = Path(args.network).stem
    if args.format == "xlsx":
        from circuitlab.simulation.excel_exporter import export_to_excel

        export_to_excel(result.data, model.settings.fps, args.output, name)
        print(f"Results written to {args.output}", file=sys.stderr)
        return 0

    output_text = _format_result(result, args.format, model.settings.fps, name)
    if args.output:
        Path(args.output).write_text(output_text)
        print(f"Results written to {args.output}", file=sys.stderr)
    else:
        print(output_text)

    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a network without simulating."""
    model = load_network(args.network)
    sim = SimulationController(model)

    result = sim.validate_network()

    if result.success:
        print(f"Network is valid: {args.network}")
        for warning in result.warnings:
            print(f"  Warning: {warning}")
        return 0
    else:
        print(f"Network has errors: {args.network}", file=sys.stderr)
        for err in result.errors:
            print(f"  - {err}", file=sys.stderr)
        return 1


def cmd_export(args: argparse.Namespace) -> int:
    """Rewrite a network file in normalized (flow-ordered) JSON."""
    model = load_network(args.network)
    output_text = json.dumps(model.to_dict(), indent=2)
    if args.output:
        Path(args.output).write_text(output_text)
        print(f"JSON written to {args.output}", file=sys.stderr)
    else:
        print(output_text)
    return 0


def cmd_components(args: argparse.Namespace) -> int:
    """List the component catalogue."""
    print(f"{'Type':<24} {'Resistance (Ohm)':<18} {'Max current (A)':<16} {'In/Out'}")
    print("-" * 66)
    for kind, cls in COMPONENT_CLASSES.items():
        limit = "-" if cls.default_max_current is None else f"{cls.default_max_current:g}"
        print(f"{kind.value:<24} {cls.default_resistance:<18g} {limit:<16} {cls.max_inputs}/{cls.max_outputs}")
    return 0


def _format_result(result, fmt: str, fps: int, network_name: str = "") -> str:
    """Format simulation result as text."""
    if fmt == "csv":
        return export_tick_readings(result.data, fps, network_name)
    return _result_to_json(result, fps)


def _result_to_json(result, fps: int) -> str:
    """Format simulation result as JSON."""
    output = {
        "success": result.success,
        "frames": result.frames,
        "fps": fps,
        "ticks": [record.to_dict() for record in result.data or []],
    }
    if result.warnings:
        output["warnings"] = result.warnings
    if result.faults:
        output["faults"] = result.faults
    return json.dumps(output, indent=2, default=str)


def cmd_batch(args: argparse.Namespace) -> int:
    """Run simulations on multiple network files."""
    pattern = args.path
    path = Path(pattern)
    if path.is_dir():
        files = sorted(path.glob("*.json"))
    elif "*" in pattern or "?" in pattern:
        files = sorted(Path(p) for p in glob.glob(pattern))
    else:
        print(f"Error: {pattern} is not a directory or glob pattern", file=sys.stderr)
        return 1

    if not files:
        print(f"No .json network files found matching: {pattern}", file=sys.stderr)
        return 1

    output_dir = None
    if args.output_dir:
        output_dir = Path(args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

    results_summary = []
    any_failed = False

    for filepath in files:
        model, error = try_load_network(str(filepath))
        if model is None:
            results_summary.append({"file": filepath.name, "status": "LOAD_ERROR", "error": error})
            any_failed = True
            if args.fail_fast:
                break
            continue

        sim = SimulationController(model, CircuitController(model))
        result = sim.run(args.frames)

        if not result.success:
            results_summary.append({"file": filepath.name, "status": "FAIL", "error": result.error})
            any_failed = True
            if args.fail_fast:
                break
            continue

        results_summary.append({"file": filepath.name, "status": "OK", "details": f"{result.frames} frames"})

        if output_dir:
            ext = "csv" if args.format == "csv" else "json"
            out_path = output_dir / f"{filepath.stem}.{ext}"
            out_path.write_text(_format_result(result, args.format, model.settings.fps, filepath.stem))

    print(f"\n{'File':<40} {'Status':<12} {'Details'}")
    print("-" * 70)
    for entry in results_summary:
        details = entry.get("details", entry.get("error", ""))
        print(f"{entry['file']:<40} {entry['status']:<12} {details}")

    total = len(results_summary)
    passed = sum(1 for e in results_summary if e["status"] == "OK")
    print(f"\n{passed}/{total} succeeded, {total - passed} failed")

    return 1 if any_failed else 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="circuitlab",
        description="circuitlab batch operations: simulate, validate and normalize network files.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log engine activity to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # simulate
    sim_parser = subparsers.add_parser("simulate", help="Run the network and output tick readings")
    sim_parser.add_argument("network", help="Path to network JSON file")
    sim_parser.add_argument(
        "--frames", "-n", type=int, default=DEFAULT_FRAMES, help=f"Frames to run (default: {DEFAULT_FRAMES})"
    )
    sim_parser.add_argument("--fps", type=int, help="Override the tick rate stored in the network file")
    sim_parser.add_argument("--seed", type=int, help="Seed for randomized component behaviour")
    sim_parser.add_argument(
        "--format", choices=["json", "csv", "xlsx"], default="json", help="Output format (default: json)"
    )
    sim_parser.add_argument("--output", "-o", help="Write results to file instead of stdout")

    # validate
    val_parser = subparsers.add_parser("validate", help="Check a network for errors without simulating")
    val_parser.add_argument("network", help="Path to network JSON file")

    # export
    exp_parser = subparsers.add_parser("export", help="Rewrite a network file in normalized JSON")
    exp_parser.add_argument("network", help="Path to network JSON file")
    exp_parser.add_argument("--output", "-o", help="Write output to file instead of stdout")

    # batch
    batch_parser = subparsers.add_parser("batch", help="Run simulations on multiple network files")
    batch_parser.add_argument("path", help="Directory or glob pattern matching network JSON files")
    batch_parser.add_argument(
        "--frames", "-n", type=int, default=DEFAULT_FRAMES, help=f"Frames to run (default: {DEFAULT_FRAMES})"
    )
    batch_parser.add_argument(
        "--format", choices=["json", "csv"], default="json", help="Output format for per-file results (default: json)"
    )
    batch_parser.add_argument("--output-dir", help="Write per-file results to this directory")
    batch_parser.add_argument("--fail-fast", action="store_true", help="Stop on first error")

    # components
    subparsers.add_parser("components", help="List the component catalogue")

    return parser


def main(argv=None) -> int:
    """CLI entry point. Returns exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    handlers = {
        "simulate": cmd_simulate,
        "validate": cmd_validate,
        "export": cmd_export,
        "batch": cmd_batch,
        "components": cmd_components,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
