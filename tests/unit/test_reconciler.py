"""
Unit tests for the keyed data-join.
"""

from __future__ import annotations

import logging

from arcbar.charts.models import VisualRecord
from arcbar.charts.reconciler import LayerState, RenderState, reconcile
from arcbar.charts.shapes import RectGeometry


def record(key, value=1.0):
    return VisualRecord(key=key, series_index=0, value=value, color="#000")


class TestReconcile:
    """Tests for reconcile."""

    def test_first_join_enters_everything(self) -> None:
        layer = LayerState("bars")
        result = reconcile(layer, [record("a"), record("b")])

        assert [r.key for r in result.enter] == ["a", "b"]
        assert result.update == []
        assert result.exit == []
        assert layer.order == ["a", "b"]

    def test_identical_join_is_all_update(self) -> None:
        layer = LayerState("bars")
        reconcile(layer, [record("a"), record("b")])
        result = reconcile(layer, [record("a"), record("b")])

        assert result.is_stable
        assert [r.key for r, _ in result.update] == ["a", "b"]

    def test_update_carries_prior_geometry(self) -> None:
        layer = LayerState("bars")
        reconcile(layer, [record("a")])
        layer.set_geometry("a", RectGeometry(1, 2, 3, 4))

        result = reconcile(layer, [record("a", value=2)])
        rec, prior = result.update[0]
        assert rec.value == 2
        assert prior == RectGeometry(1, 2, 3, 4)

    def test_exit_removed_immediately(self) -> None:
        layer = LayerState("bars")
        reconcile(layer, [record("a"), record("b")])
        layer.set_geometry("b", RectGeometry(0, 0, 1, 1))

        result = reconcile(layer, [record("a"), record("c")])
        assert result.exit == ["b"]
        assert [r.key for r in result.enter] == ["c"]
        assert "b" not in layer
        assert "b" not in layer.geometry

    def test_order_follows_new_records(self) -> None:
        layer = LayerState("bars")
        reconcile(layer, [record("a"), record("b")])
        reconcile(layer, [record("b"), record("a")])
        assert layer.order == ["b", "a"]

    def test_duplicate_keys_ignored(self, caplog) -> None:
        layer = LayerState("bars")
        with caplog.at_level(logging.WARNING, logger="arcbar.charts.reconciler"):
            result = reconcile(layer, [record("a", 1), record("a", 2)])

        assert len(result.enter) == 1
        assert layer.get("a").value == 1
        assert "Duplicate key" in caplog.text

    def test_custom_key_function(self) -> None:
        layer = LayerState("ticks")
        result = reconcile(layer, ["Jan", "Feb"], key_fn=lambda label: ("tick", label))
        assert layer.order == [("tick", "Jan"), ("tick", "Feb")]
        assert result.summary() == {"enter": 2, "update": 0, "exit": 0}


class TestRenderState:
    """Tests for RenderState."""

    def test_layers_are_independent(self) -> None:
        state = RenderState()
        reconcile(state.layer("bars"), [record("a")])
        result = reconcile(state.layer("counts"), [record("a")])

        assert [r.key for r in result.enter] == ["a"]
        assert state.has_layer("bars")
        assert state.has_layer("counts")

    def test_layer_is_reused(self) -> None:
        state = RenderState()
        assert state.layer("slices") is state.layer("slices")

    def test_clear(self) -> None:
        state = RenderState()
        reconcile(state.layer("bars"), [record("a")])
        state.layout = object()
        state.clear()

        assert state.layers == {}
        assert state.layout is None
