import numpy as np
import pytest

from bubblechart.config import FOCAL_FILL, ScaleConfig
from bubblechart.model.body import Size
from bubblechart.model.scales import PALETTE, ColorScale, SizeScale, radius_range, size_scale


def test_size_scale_is_linear_inside_domain():
    assert size_scale(0, (0, 100), (10, 150)) == pytest.approx(10)
    assert size_scale(50, (0, 100), (10, 150)) == pytest.approx(80)
    assert size_scale(100, (0, 100), (10, 150)) == pytest.approx(150)


def test_size_scale_clamps_outside_domain():
    assert size_scale(-20, (0, 100), (10, 150)) == pytest.approx(10)
    assert size_scale(500, (0, 100), (10, 150)) == pytest.approx(150)


def test_size_scale_is_monotonic():
    values = np.linspace(-50, 250, 301)
    radii = [size_scale(v, (0, 100), (10, 150)) for v in values]
    assert all(a <= b for a, b in zip(radii, radii[1:]))


def test_size_scale_rejects_empty_domain():
    with pytest.raises(ValueError):
        size_scale(5, (1, 1), (10, 20))


def test_radius_range_follows_viewport():
    assert radius_range(Size(800, 600)) == (10.0, 150.0)
    assert radius_range(Size(400, 1000)) == (10.0, 100.0)


def test_radius_range_stays_positive_for_tiny_viewports():
    min_r, max_r = radius_range(Size(0, 0))
    assert min_r > 0 and max_r > 0
    assert min_r <= max_r

    min_r, max_r = radius_range(Size(20, 20))
    assert min_r == max_r == pytest.approx(5.0)


def test_size_scale_for_viewport_rescales_on_resize():
    small = SizeScale.for_viewport(Size(400, 300))
    large = SizeScale.for_viewport(Size(800, 600))
    assert small(65) < large(65)
    assert large(65) == pytest.approx(10 + 0.65 * 140)


def test_custom_radius_divisor():
    scale = SizeScale.for_viewport(Size(800, 600), ScaleConfig(radius_divisor=5.0))
    assert scale.range == (10.0, 120.0)


def test_color_scale_is_stable_per_id():
    colors = ColorScale()
    first = colors("a")
    colors("b")
    colors("c")
    assert colors("a") == first
    assert first == PALETTE[0]
    assert colors("b") == PALETTE[1]


def test_color_scale_cycles_palette():
    colors = ColorScale()
    ids = [str(i) for i in range(len(PALETTE) + 1)]
    assigned = [colors(i) for i in ids]
    assert assigned[-1] == assigned[0]


def test_focal_color_ignores_mapping():
    colors = ColorScale()
    assert colors.color_for("center", is_focal=True) == FOCAL_FILL
    assert colors.color_for("x") in PALETTE
