import pytest

from sketchplot.config import PlotterConfig
from sketchplot.ebb import (
    CommandPacket,
    PauseMarker,
    build_ebb_packets,
    count_commands,
    estimate_duration_ms,
    move_duration_ms,
    round_half_up,
    speed_from_percent,
    to_steps,
    xm_command,
)
from sketchplot.geometry import Point
from sketchplot.normalize import NormalizedDocument, NormalizedLayer
from sketchplot.planner import create_plot_job_plan

CONFIG = PlotterConfig()


def commands(packets):
    return [p.command if isinstance(p, CommandPacket) else p for p in packets]


def test_pause_between_packet_stream(two_layer_document):
    plan = create_plot_job_plan(two_layer_document, "pause-between", CONFIG)
    packets = build_ebb_packets(plan, CONFIG)

    assert commands(packets) == [
        "EM,1,1",
        "SP,0,140",
        "SP,1,170",
        "XM,328,2874,0",
        "SP,0,140",
        PauseMarker(layer_id="two", layer_name="Two"),
        "SP,0,140",
        "XM,145,-2874,2874",
        "SP,1,170",
        "XM,328,2874,0",
        "SP,0,140",
        "EM,0,0",
    ]
    assert count_commands(packets) == 11
    assert estimate_duration_ms(packets) == 1701


def test_packets_are_tagged_with_layer(two_layer_document):
    plan = create_plot_job_plan(two_layer_document, "ordered", CONFIG)
    packets = build_ebb_packets(plan, CONFIG)
    assert not any(isinstance(p, PauseMarker) for p in packets)
    assert packets[0].layer_id is None
    assert packets[2] == CommandPacket("SP,1,170", "one")
    assert packets[-2].layer_id == "two"


def test_pause_markers_precede_every_layer_but_the_first(two_layer_document):
    config = PlotterConfig(repeat_count=3)
    plan = create_plot_job_plan(two_layer_document, "pause-between", config)
    markers = [p for p in build_ebb_packets(plan, config) if isinstance(p, PauseMarker)]
    assert len(plan.layers) == 6
    assert len(markers) == 5
    assert markers[0] == PauseMarker("one-copy-2", "One (2/3)")


def test_empty_plan_still_enables_and_disables_motors():
    plan = create_plot_job_plan(NormalizedDocument(8, 6, "in", []), "ordered", CONFIG)
    assert commands(build_ebb_packets(plan, CONFIG)) == ["EM,1,1", "SP,0,140", "EM,0,0"]


def test_custom_delays_are_used():
    config = PlotterConfig(pen_up_delay_ms=10, pen_down_delay_ms=20)
    layer = NormalizedLayer.from_polylines("a", "A", [[Point(1, 1), Point(2, 1)]])
    document = NormalizedDocument(8, 6, "in", [layer])
    cmds = commands(build_ebb_packets(create_plot_job_plan(document, "ordered", config), config))
    assert cmds[:5] == ["EM,1,1", "SP,0,10", "SP,0,10", cmds[3], "SP,1,20"]
    assert cmds[3].startswith("XM,")


@pytest.mark.parametrize(
    "value, expected",
    [(2.5, 3), (-2.5, -2), (0.49, 0), (-0.51, -1), (1.5, 2)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_step_conversion_rounds_each_delta():
    assert to_steps(1) == 2874
    assert to_steps(0.5) == 1437
    assert to_steps(-0.25) == -718


def test_speed_percent_is_clamped():
    assert speed_from_percent(0, 10) == pytest.approx(0.1)
    assert speed_from_percent(250, 10) == pytest.approx(10)
    assert speed_from_percent(50, 10) == pytest.approx(5)
    assert speed_from_percent(1, 1) == pytest.approx(0.1)


def test_move_duration_has_one_millisecond_floor():
    assert move_duration_ms(Point(0, 0), Point(0, 0), True, CONFIG) == 1
    assert move_duration_ms(Point(0, 0), Point(0.0001, 0), False, CONFIG) == 1
    assert move_duration_ms(Point(0, 0), Point(15, 0), False, PlotterConfig(speed_pen_up=100)) == 1000


def test_xm_command_format():
    config = PlotterConfig(speed_pen_down=100)
    assert xm_command(Point(0, 0), Point(0, -1), config, pen_down=True) == "XM,115,0,-2874"


def test_estimate_ignores_markers_and_other_commands():
    packets = [
        CommandPacket("EM,1,1"),
        CommandPacket("SP,1,170"),
        PauseMarker("b", "B"),
        CommandPacket("XM,50,10,10"),
        CommandPacket("ES"),
    ]
    assert estimate_duration_ms(packets) == 220
    assert count_commands(packets) == 4


def test_out_of_range_speeds_are_clamped_through_config():
    fast = PlotterConfig(speed_pen_down=500, speed_pen_up=-20)
    capped = PlotterConfig(speed_pen_down=100, speed_pen_up=1)
    for pen_down in (True, False):
        assert move_duration_ms(Point(0, 0), Point(2, 1), pen_down, fast) == move_duration_ms(
            Point(0, 0), Point(2, 1), pen_down, capped
        )
    assert xm_command(Point(0, 0), Point(1, 0), fast, pen_down=True) == "XM,115,2874,0"
