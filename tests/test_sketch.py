import math

import pytest

from sketchplot.normalize import normalize_output
from sketchplot.sketch import (
    BooleanParam,
    GeometryOutput,
    NumberParam,
    RenderContext,
    Sketch,
    SvgOutput,
    get_sketch,
    list_sketches,
    register_sketch,
)

PARAM = NumberParam("Inset", 1, 0, 4, 0.05)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (1.23, 1.25),
        ("2.5", 2.5),
        (-3, 0),
        (99, 4),
        ("not a number", 1),
        (None, 1),
        (float("nan"), 1),
        (float("inf"), 1),
    ],
)
def test_number_param_clamps_and_snaps(raw, expected):
    assert PARAM.coerce(raw) == pytest.approx(expected)


def test_number_param_snap_has_no_float_noise():
    value = NumberParam("Step", 0, 0, 1, 0.1).coerce(0.3)
    assert value == 0.3


def test_boolean_param_falls_back_to_default():
    param = BooleanParam("Diagonals", True)
    assert param.coerce(None) is True
    assert param.coerce(False) is False
    assert param.coerce(0) is False


def test_coerce_params_fills_missing_and_drops_unknown():
    sketch = get_sketch("inset-square")
    params = sketch.coerce_params({"ring_count": 30.7, "bogus": 1})
    assert params == {"inset": 1, "ring_count": 24, "show_diagonals": True}
    assert sketch.coerce_params(None) == sketch.default_params()


def test_registry_lookup_and_duplicates():
    assert {s.slug for s in list_sketches()} >= {"inset-square", "layered-waves"}
    with pytest.raises(KeyError, match="Unknown sketch: nope"):
        get_sketch("nope")
    with pytest.raises(ValueError):
        register_sketch(get_sketch("inset-square"))


def test_register_custom_sketch():
    sketch = Sketch(
        slug="test-single-line",
        title="Single line",
        schema={},
        render_fn=lambda params, context: SvgOutput('<svg><line x1="0" y1="0" x2="1" y2="1" /></svg>'),
    )
    register_sketch(sketch)
    assert get_sketch("test-single-line") is sketch
    assert sketch.describe() == {
        "slug": "test-single-line",
        "title": "Single line",
        "description": "",
        "params": {},
    }


def test_describe_lists_param_types():
    described = get_sketch("inset-square").describe()
    assert described["params"]["inset"]["type"] == "number"
    assert described["params"]["inset"]["step"] == 0.05
    assert described["params"]["show_diagonals"] == {
        "label": "Diagonals",
        "default": True,
        "description": "Include crossing diagonals in a second layer.",
        "type": "boolean",
    }


def test_render_context_from_dict():
    context = RenderContext.from_dict({"width": "210", "height": 297, "units": "mm", "seed": 7})
    assert context == RenderContext(width=210.0, height=297.0, units="mm", seed=7)
    assert RenderContext.from_dict({}) == RenderContext()
    with pytest.raises(ValueError):
        RenderContext.from_dict({"units": "cm"})


# ---------------------------------------------------------------------------
# Built-in sketches
# ---------------------------------------------------------------------------


def test_inset_square_layers():
    sketch = get_sketch("inset-square")
    output = sketch.render(sketch.coerce_params({"ring_count": 3}), RenderContext())
    assert isinstance(output, GeometryOutput)
    frame, guides = output.layers
    assert (frame.id, guides.id) == ("frame", "guides")
    assert len(frame.polylines) == 3
    assert frame.polylines[0][0] == (1, 1)
    assert frame.polylines[0][2] == (7, 5)
    assert len(guides.polylines) == 2


def test_inset_square_without_diagonals_has_empty_guides():
    sketch = get_sketch("inset-square")
    output = sketch.render(sketch.coerce_params({"show_diagonals": False}), RenderContext())
    assert output.layers[1].polylines == []
    document = normalize_output(output, RenderContext())
    assert document.layers[1].polylines == []


def test_layered_waves_produces_two_named_groups():
    sketch = get_sketch("layered-waves")
    context = RenderContext(seed=3)
    params = sketch.coerce_params({"wave_count": 5})
    output = sketch.render(params, context)
    assert isinstance(output, SvgOutput)

    document = normalize_output(output, context)
    primary, secondary = document.layers
    assert (primary.id, primary.name) == ("primary", "Primary Waves")
    assert (secondary.id, secondary.name) == ("secondary", "Secondary Waves")
    assert len(primary.polylines) == 5
    assert len(secondary.polylines) == 3
    first = primary.polylines[0]
    assert first[0].x == pytest.approx(0, abs=1e-3)
    assert first[-1].x == pytest.approx(8, abs=1e-3)


def test_layered_waves_is_deterministic_per_seed():
    sketch = get_sketch("layered-waves")
    params = sketch.default_params()
    first = sketch.render(params, RenderContext(seed=5)).svg
    assert sketch.render(params, RenderContext(seed=5)).svg == first
    assert sketch.render(params, RenderContext(seed=6)).svg != first
    assert math.isclose(sketch.coerce_params({"amplitude": 0.33})["amplitude"], 0.35)
