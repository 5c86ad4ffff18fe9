import pytest

from sketchplot.config import PlotterConfig
from sketchplot.geometry import Point
from sketchplot.normalize import NormalizedDocument, NormalizedLayer
from sketchplot.planner import (
    FLATTENED_LAYER_ID,
    FLATTENED_LAYER_NAME,
    PlannedLayer,
    compute_stats,
    create_plot_job_plan,
)

CONFIG = PlotterConfig()


def test_ordered_keeps_layers_in_document_order(two_layer_document):
    plan = create_plot_job_plan(two_layer_document, "ordered", CONFIG)

    assert plan.mode == "ordered"
    assert [layer.id for layer in plan.layers] == ["one", "two"]
    assert plan.stats.layer_count == 2
    assert plan.stats.stroke_count == 2
    assert plan.stats.point_count == 4
    assert plan.stats.draw_distance == pytest.approx(2.0)
    assert plan.stats.travel_distance == 0
    assert plan.stats.out_of_bounds_points == 0


def test_flatten_merges_and_optimises_across_layers(two_layer_document):
    plan = create_plot_job_plan(two_layer_document, "flatten", CONFIG)

    assert len(plan.layers) == 1
    layer = plan.layers[0]
    assert (layer.id, layer.name) == (FLATTENED_LAYER_ID, FLATTENED_LAYER_NAME)
    assert layer.polylines == [
        [Point(0, 0), Point(1, 0)],
        [Point(1, 1), Point(0, 1)],
    ]
    assert plan.stats.travel_distance == pytest.approx(1.0)


def test_repeat_count_duplicates_each_layer(two_layer_document):
    plan = create_plot_job_plan(two_layer_document, "ordered", PlotterConfig(repeat_count=3))
    assert [layer.id for layer in plan.layers] == [
        "one-copy-1",
        "one-copy-2",
        "one-copy-3",
        "two-copy-1",
        "two-copy-2",
        "two-copy-3",
    ]
    assert plan.layers[4].name == "Two (2/3)"
    assert plan.layers[0].polylines is not plan.layers[1].polylines
    assert plan.stats.stroke_count == 6


@pytest.mark.parametrize("repeat", [0, -2, 1])
def test_repeat_below_two_keeps_original_ids(two_layer_document, repeat):
    plan = create_plot_job_plan(two_layer_document, "ordered", PlotterConfig(repeat_count=repeat))
    assert [layer.id for layer in plan.layers] == ["one", "two"]
    assert [layer.name for layer in plan.layers] == ["One", "Two"]


def test_millimetre_documents_are_converted_to_inches():
    document = NormalizedDocument(
        width=200,
        height=100,
        units="mm",
        layers=[NormalizedLayer.from_polylines("a", "A", [[Point(0, 0), Point(25.4, 50.8)]])],
    )
    plan = create_plot_job_plan(document, "ordered", CONFIG)
    assert plan.layers[0].polylines == [[Point(0, 0), Point(1, 2)]]


def test_out_of_bounds_points_are_counted_inclusively():
    bounds = CONFIG.bounds
    document = NormalizedDocument(
        width=20,
        height=20,
        units="in",
        layers=[
            NormalizedLayer.from_polylines(
                "a",
                "A",
                [[Point(0, 0), Point(bounds.width_in, bounds.height_in), Point(12, 1), Point(-0.1, 1)]],
            )
        ],
    )
    plan = create_plot_job_plan(document, "ordered", CONFIG)
    assert plan.stats.out_of_bounds_points == 2

    larger = create_plot_job_plan(document, "ordered", PlotterConfig(model="A3"))
    assert larger.stats.out_of_bounds_points == 1


def test_unknown_mode_is_rejected(two_layer_document):
    with pytest.raises(ValueError, match="Unknown layer mode"):
        create_plot_job_plan(two_layer_document, "sideways", CONFIG)


def test_travel_is_not_carried_between_layers(two_layer_document):
    plan = create_plot_job_plan(two_layer_document, "pause-between", CONFIG)
    stats = compute_stats(plan.layers, CONFIG)
    assert stats.travel_distance == 0
    assert stats.to_dict()["draw_distance"] == pytest.approx(2.0)


def test_document_is_not_modified(two_layer_document):
    before = [list(layer.polylines) for layer in two_layer_document.layers]
    create_plot_job_plan(two_layer_document, "flatten", PlotterConfig(repeat_count=2))
    assert [layer.polylines for layer in two_layer_document.layers] == before


def test_stats_skip_strokes_with_fewer_than_two_points():
    layer = PlannedLayer(
        id="raw",
        name="Raw",
        polylines=[[Point(0, 0), Point(1, 0)], [Point(5, 5)], [], [Point(1, 2), Point(1, 3)]],
    )
    stats = compute_stats([layer], CONFIG)
    assert stats.layer_count == 1
    assert stats.stroke_count == 2
    assert stats.point_count == 4
    assert stats.draw_distance == pytest.approx(2.0)
    assert stats.travel_distance == pytest.approx(2.0)
    assert stats.out_of_bounds_points == 0
