"""
Observer integration: one observer sees the full event stream of an
editing, simulating and saving session.
"""

from circuitlab.controllers.file_controller import FileController
from circuitlab.controllers.simulation_controller import SimulationController


class TestSessionEvents:
    def test_edit_run_save_load(self, tmp_path, network, controller, events):
        recorded, callback = events
        controller.add_observer(callback)
        sim = SimulationController(network, controller)
        files = FileController(network, controller)

        cell = controller.add_component("Cell")
        bulb = controller.add_component("Bulb", (50.0, 0.0))
        controller.connect(cell.component_id, bulb.component_id)
        controller.connect(bulb.component_id, cell.component_id)
        sim.run(1)
        sim.stop()
        files.save_network(tmp_path / "session.json")
        files.load_network(tmp_path / "session.json")

        assert [event for event, _ in recorded] == [
            "component_added",
            "component_added",
            "wire_added",
            "wire_added",
            "simulation_started",
            "tick_completed",
            "simulation_completed",
            "simulation_stopped",
            "model_saved",
            "model_loaded",
        ]

    def test_blown_component_event_carries_notice(self, network, controller, loop, events):
        recorded, callback = events
        _, fuse, _ = loop(controller, ("DC Power Supply", {"voltage": 50.0}), "Fuse", "Resistor")
        controller.add_observer(callback)
        sim = SimulationController(network, controller)
        result = sim.run(2)

        notices = [data for event, data in recorded if event == "component_blown"]
        assert len(notices) == 1
        assert notices[0].component_id == fuse.component_id
        assert result.faults == [notices[0].message]

    def test_observer_removed_mid_session(self, network, controller, series_network, events):
        recorded, callback = events
        controller.add_observer(callback)
        sim = SimulationController(network, controller)
        sim.start()
        sim.tick()
        controller.remove_observer(callback)
        sim.tick()
        assert [event for event, _ in recorded] == ["simulation_started", "tick_completed"]

    def test_completed_event_carries_result(self, network, controller, series_network, events):
        recorded, callback = events
        controller.add_observer(callback)
        result = SimulationController(network, controller).run(2)
        assert recorded[-1] == ("simulation_completed", result)

    def test_failed_validation_still_completes(self, network, controller, events):
        recorded, callback = events
        controller.add_observer(callback)
        result = SimulationController(network, controller).run(2)
        assert recorded == [("simulation_completed", result)]
        assert not result.success
