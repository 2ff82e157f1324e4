"""Tests for FileController and saved network validation."""

import json

import pytest
from circuitlab.controllers.file_controller import FileController, validate_network_data
from circuitlab.errors import NetworkFileError, WiringError


def _valid_data():
    return {
        "components": [
            {"type": "Cell", "position": [0, 0], "data": {"voltage": 1.5},
             "connections": [{"target_index": 1}]},
            {"type": "Resistor", "position": [50, 0], "connections": [{"target_index": 0}]},
        ],
        "settings": {"fps": 20},
    }


class TestValidateNetworkData:
    def test_valid_data_passes(self):
        validate_network_data(_valid_data())

    def test_minimal_data_passes(self):
        validate_network_data({"components": []})

    @pytest.mark.parametrize("data", [None, [], "network"])
    def test_not_an_object(self, data):
        with pytest.raises(NetworkFileError, match="valid network object"):
            validate_network_data(data)

    def test_missing_components(self):
        with pytest.raises(NetworkFileError, match="components"):
            validate_network_data({"settings": {}})

    def test_settings_must_be_object(self):
        data = _valid_data()
        data["settings"] = [20]
        with pytest.raises(NetworkFileError, match="settings"):
            validate_network_data(data)

    def test_component_not_object(self):
        with pytest.raises(NetworkFileError, match="#1"):
            validate_network_data({"components": ["Cell"]})

    def test_missing_type(self):
        data = _valid_data()
        del data["components"][1]["type"]
        with pytest.raises(NetworkFileError, match="#2 is missing required field 'type'"):
            validate_network_data(data)

    def test_non_text_type(self):
        with pytest.raises(NetworkFileError, match="non-text"):
            validate_network_data({"components": [{"type": 3}]})

    @pytest.mark.parametrize("position", [[1], [1, 2, 3], "0,0", {"x": 0, "y": 0}])
    def test_bad_position_shape(self, position):
        with pytest.raises(NetworkFileError, match="invalid position"):
            validate_network_data({"components": [{"type": "Cell", "position": position}]})

    @pytest.mark.parametrize("position", [["a", 0], [True, 0]])
    def test_non_numeric_position(self, position):
        with pytest.raises(NetworkFileError, match="numeric"):
            validate_network_data({"components": [{"type": "Cell", "position": position}]})

    def test_data_must_be_object(self):
        with pytest.raises(NetworkFileError, match="'data'"):
            validate_network_data({"components": [{"type": "Cell", "data": 1.5}]})

    def test_connections_must_be_list(self):
        with pytest.raises(NetworkFileError, match="'connections'"):
            validate_network_data({"components": [{"type": "Cell", "connections": {}}]})

    def test_connection_missing_target(self):
        data = _valid_data()
        data["components"][0]["connections"] = [{"path": []}]
        with pytest.raises(NetworkFileError, match="target_index"):
            validate_network_data(data)

    @pytest.mark.parametrize("target", [2, -1, "1", 1.0, True])
    def test_connection_bad_target(self, target):
        data = _valid_data()
        data["components"][0]["connections"] = [{"target_index": target}]
        with pytest.raises(NetworkFileError, match="unknown component index"):
            validate_network_data(data)

    def test_wire_options_must_be_object(self):
        data = _valid_data()
        data["components"][0]["connections"][0]["wire_options"] = "copper"
        with pytest.raises(NetworkFileError, match="wire_options"):
            validate_network_data(data)

    @pytest.mark.parametrize("options,match", [
        ({"radius": "wide"}, "radius"),
        ({"radius": None}, "radius"),
        ({"material": 7}, "material"),
    ])
    def test_bad_wire_options(self, options, match):
        data = _valid_data()
        data["components"][0]["connections"][0]["wire_options"] = options
        with pytest.raises(NetworkFileError, match=match):
            validate_network_data(data)

    @pytest.mark.parametrize("path", ["none", [[1, 2, 3]], [[1, "y"]], [5]])
    def test_bad_path(self, path):
        data = _valid_data()
        data["components"][0]["connections"][0]["path"] = path
        with pytest.raises(NetworkFileError, match="path"):
            validate_network_data(data)

    @pytest.mark.parametrize("key,value", [("merge", "no"), ("order", 1.5), ("order", True)])
    def test_bad_connection_flags(self, key, value):
        data = _valid_data()
        data["components"][0]["connections"][0][key] = value
        with pytest.raises(NetworkFileError, match=key):
            validate_network_data(data)


class TestSaveLoad:
    def test_save_creates_file(self, tmp_path, network, series_network):
        ctrl = FileController(network)
        filepath = tmp_path / "test.json"
        ctrl.save_network(filepath)
        assert filepath.exists()
        assert ctrl.current_file == filepath
        assert ctrl.has_file()

    def test_save_writes_valid_json(self, tmp_path, network, series_network):
        ctrl = FileController(network)
        filepath = tmp_path / "test.json"
        ctrl.save_network(filepath)
        data = json.loads(filepath.read_text())
        assert [c["type"] for c in data["components"]] == ["Cell", "Resistor"]
        assert data["settings"]["seed"] == 1234

    def test_load_preserves_model_identity(self, tmp_path, network, series_network):
        ctrl = FileController(network)
        filepath = tmp_path / "test.json"
        ctrl.save_network(filepath)

        other = FileController()
        model = other.model
        other.load_network(filepath)
        assert other.model is model
        assert len(model.components) == 2
        assert len(model.wires) == 2
        assert model.light_dirty

    def test_load_then_add_continues_ids(self, tmp_path, network, series_network):
        ctrl = FileController(network)
        filepath = tmp_path / "test.json"
        ctrl.save_network(filepath)
        ctrl.load_network(filepath)
        bulb = ctrl.model.add_component("Bulb")
        assert bulb.component_id == 3

    def test_load_invalid_structure(self, tmp_path):
        filepath = tmp_path / "bad.json"
        filepath.write_text('{"foo": "bar"}')
        with pytest.raises(NetworkFileError):
            FileController().load_network(filepath)

    def test_load_invalid_json(self, tmp_path):
        filepath = tmp_path / "bad.json"
        filepath.write_text("not json")
        with pytest.raises(json.JSONDecodeError):
            FileController().load_network(filepath)

    def test_load_bad_wiring_keeps_current_network(self, tmp_path, network, series_network):
        filepath = tmp_path / "loop.json"
        filepath.write_text(json.dumps({"components": [
            {"type": "Resistor", "connections": [{"target_index": 0}]},
        ]}))
        ctrl = FileController(network)
        with pytest.raises(WiringError):
            ctrl.load_network(filepath)
        assert len(network.components) == 2

    def test_new_network(self, tmp_path, network, series_network):
        ctrl = FileController(network)
        ctrl.save_network(tmp_path / "test.json")
        ctrl.new_network()
        assert not network.components
        assert not ctrl.has_file()


class TestNotifications:
    def test_save_and_load_notify(self, tmp_path, network, controller, series_network, events):
        recorded, callback = events
        controller.add_observer(callback)
        ctrl = FileController(network, controller)
        filepath = tmp_path / "test.json"
        ctrl.save_network(filepath)
        ctrl.load_network(filepath)
        assert recorded == [("model_saved", None), ("model_loaded", None)]
