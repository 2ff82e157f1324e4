"""
FileController - Handles network file I/O.

File dialog interaction is the responsibility of the view layer.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from circuitlab.errors import NetworkFileError
from circuitlab.models.network import NetworkModel

logger = logging.getLogger(__name__)


def validate_network_data(data) -> None:
    """
    Validate JSON structure before loading.

    Only the shape is checked here; wiring rules are enforced when the
    connections are replayed.

    Raises NetworkFileError with a descriptive message if anything is wrong.
    """
    if not isinstance(data, dict):
        raise NetworkFileError("File does not contain a valid network object.")

    if "components" not in data or not isinstance(data["components"], list):
        raise NetworkFileError("Missing or invalid 'components' list.")
    if "settings" in data and not isinstance(data["settings"], dict):
        raise NetworkFileError("'settings' must be an object.")

    count = len(data["components"])
    for i, comp in enumerate(data["components"]):
        if not isinstance(comp, dict):
            raise NetworkFileError(f"Component #{i + 1} is not an object.")
        if "type" not in comp:
            raise NetworkFileError(f"Component #{i + 1} is missing required field 'type'.")
        if not isinstance(comp["type"], str):
            raise NetworkFileError(f"Component #{i + 1} has a non-text type.")

        pos = comp.get("position", [0, 0])
        if not isinstance(pos, list) or len(pos) != 2:
            raise NetworkFileError(f"Component #{i + 1} ({comp['type']}) has invalid position data.")
        if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in pos):
            raise NetworkFileError(f"Component #{i + 1} ({comp['type']}) position values must be numeric.")
        if "data" in comp and not isinstance(comp["data"], dict):
            raise NetworkFileError(f"Component #{i + 1} ({comp['type']}) has invalid 'data'.")

        connections = comp.get("connections", [])
        if not isinstance(connections, list):
            raise NetworkFileError(f"Component #{i + 1} ({comp['type']}) has invalid 'connections'.")
        for j, conn in enumerate(connections):
            if not isinstance(conn, dict) or "target_index" not in conn:
                raise NetworkFileError(
                    f"Connection #{j + 1} of component #{i + 1} is missing required field 'target_index'."
                )
            target = conn["target_index"]
            if isinstance(target, bool) or not isinstance(target, int) or not 0 <= target < count:
                raise NetworkFileError(
                    f"Connection #{j + 1} of component #{i + 1} references unknown component index {target!r}."
                )
            _validate_connection(conn, f"Connection #{j + 1} of component #{i + 1}")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _validate_connection(conn: dict, label: str) -> None:
    options = conn.get("wire_options", {})
    if not isinstance(options, dict):
        raise NetworkFileError(f"{label} has invalid 'wire_options'.")
    if "radius" in options and not _is_number(options["radius"]):
        raise NetworkFileError(f"{label} wire radius must be numeric.")
    if "material" in options and not isinstance(options["material"], str):
        raise NetworkFileError(f"{label} wire material must be text.")

    path = conn.get("path", [])
    if not isinstance(path, list):
        raise NetworkFileError(f"{label} has invalid 'path'.")
    for point in path:
        if not isinstance(point, list) or len(point) != 2 or not all(_is_number(v) for v in point):
            raise NetworkFileError(f"{label} path points must be [x, y] number pairs.")

    if "merge" in conn and not isinstance(conn["merge"], bool):
        raise NetworkFileError(f"{label} 'merge' must be true or false.")
    if "order" in conn and (isinstance(conn["order"], bool) or not isinstance(conn["order"], int)):
        raise NetworkFileError(f"{label} 'order' must be an integer.")


class FileController:
    """
    Manages network file I/O.

    Handles saving/loading network data as JSON and tracking
    the current file path for quick-save.
    """

    def __init__(self, model: Optional[NetworkModel] = None, circuit_ctrl=None):
        self.model = model or NetworkModel()
        self.circuit_ctrl = circuit_ctrl
        self.current_file: Optional[Path] = None

    def new_network(self) -> None:
        """Clear the network and reset file state."""
        self.model.clear()
        self.current_file = None

    def save_network(self, filepath) -> None:
        """
        Save network to JSON file.

        Args:
            filepath: Path or string to save to.

        Raises:
            OSError: If the file cannot be written.
        """
        filepath = Path(filepath)
        data = self.model.to_dict()
        with open(filepath, "w") as f:
            json.dump(data, f, indent=2)
        self.current_file = filepath
        logger.debug("Saved %d components to %s", len(data["components"]), filepath)

        if self.circuit_ctrl:
            self.circuit_ctrl._notify("model_saved", None)

    def load_network(self, filepath) -> None:
        """
        Load network from JSON file.

        Validates JSON structure before loading. Updates the model
        in place (preserving the reference so controllers stay connected).

        Args:
            filepath: Path or string to load from.

        Raises:
            json.JSONDecodeError: If file is not valid JSON.
            NetworkFileError: If file structure is invalid.
            StructuralError: If the saved wiring breaks a connection rule.
            OSError: If the file cannot be read.
        """
        filepath = Path(filepath)
        with open(filepath, "r") as f:
            data = json.load(f)

        validate_network_data(data)
        new_model = NetworkModel.from_dict(data)

        # Update current model in place (preserving reference)
        self.model.replace_with(new_model)

        self.current_file = filepath

        if self.circuit_ctrl:
            self.circuit_ctrl._notify("model_loaded", None)

    def has_file(self) -> bool:
        """Return whether a current file path is set (for quick-save)."""
        return self.current_file is not None
