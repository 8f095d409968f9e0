from __future__ import annotations

import pytest

from zoom_viewer.geometry.transform import Transform, is_empty_size, transforms_approx_eq


def test_apply_maps_content_to_viewport() -> None:
    transform = Transform(offset=(10.0, -5.0), scale=2.0)
    assert transform.apply((3.0, 4.0)) == pytest.approx((16.0, 3.0))


def test_inverse_maps_viewport_back_to_content() -> None:
    transform = Transform(offset=(0.0, 25.0), scale=0.5)
    inverse = transform.inverse()
    assert inverse.scale == pytest.approx(2.0)
    assert inverse.offset == pytest.approx((0.0, -50.0))
    assert inverse.apply(transform.apply((40.0, 60.0))) == pytest.approx((40.0, 60.0))


def test_approx_eq_uses_tolerance() -> None:
    base = Transform(offset=(1.0, 1.0), scale=1.0)
    assert base.approx_eq(Transform(offset=(1.0 + 1e-8, 1.0), scale=1.0 + 1e-8))
    assert not base.approx_eq(Transform(offset=(1.0 + 1e-3, 1.0), scale=1.0))
    assert not transforms_approx_eq(base, Transform(offset=(1.0, 1.0), scale=1.01))


def test_translated_keeps_scale() -> None:
    moved = Transform(offset=(1.0, 2.0), scale=3.0).translated((4.0, -2.0))
    assert moved == Transform(offset=(5.0, 0.0), scale=3.0)


def test_empty_size() -> None:
    assert is_empty_size((0.0, 10.0))
    assert not is_empty_size((1.0, 1.0))
