"""Tests for the simulation loop."""

import numpy as np
import pytest

from string_waves import (
    Action, EdgeTrigger, Exporter, Simulation, SimulationConfig, render_points,
    create_string, HEADER
)
from string_waves.simulation import SAVE, QUIT


class RecordingRenderer:
    def __init__(self):
        self.frames = []

    def draw(self, points):
        self.frames.append(points.copy())


def read_times(path):
    lines = path.read_text().splitlines()
    assert lines[0] + "\n" == HEADER
    times = []
    for line in lines[1:]:
        t = float(line.split('\t')[0])
        if not times or times[-1] != t:
            times.append(t)
    return lines[1:], times


def test_render_points_screen_mapping():
    state = create_string('plucked', 101, 100.0, 0.1)
    points = render_points(state)
    assert points.shape == (101, 2)
    np.testing.assert_array_equal(points[:, 0], np.arange(101) / 50.0 - 1)
    np.testing.assert_array_equal(points[:, 1], state.positions)
    assert points[0, 0] == -1.0 and points[50, 0] == 0.0 and points[100, 0] == 1.0


def test_renderer_gets_every_frame_even_without_a_step():
    renderer = RecordingRenderer()
    sim = Simulation(SimulationConfig(), renderer=renderer)
    assert sim.frame(now=0.0)
    assert not sim.frame(now=0.01)
    assert not sim.frame(now=0.02)
    assert len(renderer.frames) == 3
    assert sim.steps == 1


def test_run_captures_once_per_second():
    sim = Simulation(SimulationConfig(duration=5.0))
    sim.run()
    times = [round(s.time, 6) for s in sim.buffer]
    assert times == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]
    assert sim.steps == 51


def test_first_snapshot_is_the_initial_shape():
    config = SimulationConfig()
    sim = Simulation(config)
    initial = sim.state.positions.copy()
    sim.run(0.5)
    np.testing.assert_array_equal(sim.buffer.oldest().positions, initial)


def test_auto_save_fires_once_and_disables_itself(tmp_path):
    path = tmp_path / "out.dat"
    config = SimulationConfig(duration=5.0, auto_save_time=3.0)
    with Exporter(path, config.point_spacing) as exporter:
        sim = Simulation(config, exporter=exporter)
        sim.run()
        assert sim.auto_save_time == 0.0
        # the save at t=3 already includes the snapshot for t=3
        assert exporter.snapshots_written == 4
        assert [round(s.time, 6) for s in sim.buffer] == [4.0, 5.0]
        sim.close()
    lines, times = read_times(path)
    assert times == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]
    assert len(lines) == 6 * 101


def test_close_drains_remaining_snapshots(tmp_path):
    path = tmp_path / "out.dat"
    config = SimulationConfig(duration=2.0)
    exporter = Exporter(path, config.point_spacing)
    sim = Simulation(config, exporter=exporter)
    sim.run()
    sim.close()
    assert exporter.closed
    assert sim.buffer.is_empty()
    _, times = read_times(path)
    assert times == [0.0, 1.0, 2.0]


def test_close_twice_is_harmless(tmp_path):
    path = tmp_path / "out.dat"
    config = SimulationConfig(duration=2.0)
    exporter = Exporter(path, config.point_spacing)
    sim = Simulation(config, exporter=exporter)
    sim.run()
    sim.close()
    sim.close()
    sim.close(drain=False)
    assert exporter.closed
    assert exporter.snapshots_written == 3
    _, times = read_times(path)
    assert times == [0.0, 1.0, 2.0]


def test_deadline_sample_is_not_captured_twice():
    sim = Simulation(SimulationConfig(duration=2.0, auto_save_time=2.0))
    sim.run()
    assert [round(s.time, 6) for s in sim.buffer] == [0.0, 1.0, 2.0]


def test_close_without_drain_keeps_buffer(tmp_path):
    config = SimulationConfig(duration=2.0)
    exporter = Exporter(tmp_path / "out.dat", config.point_spacing)
    sim = Simulation(config, exporter=exporter)
    sim.run()
    sim.close(drain=False)
    assert len(sim.buffer) == 3
    assert exporter.snapshots_written == 0


def test_evictions_are_counted(tmp_path):
    config = SimulationConfig(duration=12.0, capacity=10)
    with Exporter(tmp_path / "out.dat", config.point_spacing) as exporter:
        sim = Simulation(config, exporter=exporter)
        sim.run()
        assert sim.buffer.evicted == 3
        assert sim.save() == 10
    assert sim.buffer.is_empty()


def test_actions_change_speed_save_and_quit(tmp_path):
    config = SimulationConfig()
    exporter = Exporter(tmp_path / "out.dat", config.point_spacing)
    sim = Simulation(config, exporter=exporter)

    sim.handle(Action.speed(2))
    assert sim.clock.speed == 5.0

    sim.frame(now=0.0)
    assert len(sim.buffer) == 1
    sim.handle(SAVE)
    assert sim.buffer.is_empty()
    assert exporter.snapshots_written == 1

    sim.handle(QUIT)
    assert not sim.running
    assert not sim.frame(now=10.0)
    sim.close()


def test_save_without_exporter_keeps_snapshots():
    sim = Simulation(SimulationConfig())
    sim.advance()
    assert sim.save() == 0
    assert len(sim.buffer) == 1
    sim.close()


def test_simulation_uses_given_state():
    state = create_string('pulse', 101, 100.0, 0.1)
    sim = Simulation(SimulationConfig(boundary='free'), state=state)
    sim.advance()
    assert sim.state is state
    assert sim.integrator.policy.value == 'free'


def test_dispersive_simulation_loses_energy():
    sim = Simulation(SimulationConfig(boundary='free-dispersive', damping=1.0))
    e0 = sim.energy()
    sim.run(20.0)
    assert sim.energy() < e0


def test_edge_trigger_fires_once_per_press():
    trigger = EdgeTrigger()
    assert trigger.press('s')
    assert not trigger.press('s')
    assert not trigger.press('s')
    assert trigger.press('1')
    trigger.release('s')
    assert trigger.press('s')
