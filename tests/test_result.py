import dataclasses
import math

import pandas as pd
import pytest

from bubblepack import Chart, LayoutStatus, LayoutStrategy
from bubblepack.circles import CircleHandle
from bubblepack.result import CircleSnapshot, PackingResult


def make_result(**kwargs) -> PackingResult:
    circles = (
        CircleSnapshot(CircleHandle(0, 0), 1.0, 10.0, 20.0, 20.0, True),
        CircleSnapshot(CircleHandle(1, 2), 0.5, 0.0, math.nan, math.nan, False),
    )
    values = dict(
        circles=circles,
        strategy=LayoutStrategy.iterative,
        status=LayoutStatus.converged,
        computation_time=0.01,
        iterations=3,
        overlaps_exist=False,
        total_overlap_area=0.0,
        adjustments_made=4,
        width=100.0,
        height=50.0,
    )
    values.update(kwargs)
    return PackingResult(**values)


def test_result_is_immutable():
    result = make_result()
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.iterations = 10
    with pytest.raises(AttributeError):
        result.circles[0].radius = 1.0


def test_derived_properties():
    result = make_result()

    assert result.converged
    assert not make_result(status=LayoutStatus.capped).converged
    assert [c.handle for c in result.selected_circles] == [(0, 0)]
    assert result.packing_density == pytest.approx(math.pi * 100 / 5000)


def test_to_frame():
    frame = make_result().to_frame()

    assert isinstance(frame, pd.DataFrame)
    assert list(frame.columns) == ["index", "generation", "ratio", "radius", "x", "y", "selected"]
    assert frame["generation"].tolist() == [0, 2]
    assert frame["selected"].tolist() == [True, False]


def test_summary():
    summary = make_result().summary()

    assert summary["strategy"] == "iterative"
    assert summary["status"] == "converged"
    assert summary["circles"] == 2
    assert summary["selected"] == 1
    assert summary["adjustments_made"] == 4


def test_result_is_detached_from_the_chart():
    chart = Chart(random_state=0)
    handle = chart.add_circle(1.0)
    result = chart.run_iterative_resolution()
    radius = result.circles[0].radius

    chart.add_circle(3.0)

    assert result.circles[0].radius == radius
    assert chart.get(handle).radius < radius
    assert result.width == 500.0 and result.computation_time >= 0.0
