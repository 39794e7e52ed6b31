import pytest

from conftest import make_board
from core.board_store import BoardStateStore, RenderMetrics, compute_metrics


@pytest.mark.parametrize("columns,width,expected", [
    (9, 600, 40),
    (16, 600, 37),
    (30, 600, 20),
    (30, 1200, 40),
    (7, 100, 14),
])
def test_compute_metrics(columns, width, expected):
    metrics = compute_metrics(columns, width)
    assert metrics.cell_size == expected
    assert metrics.glyph_size == expected // 2


def test_compute_metrics_without_columns_uses_max():
    assert compute_metrics(0, 600) == RenderMetrics(40, 20)


def test_set_snapshot_recomputes_metrics_from_surface_width():
    width = {"value": 300}
    store = BoardStateStore(surface_width_provider=lambda: width["value"])
    store.set_snapshot(make_board(cols=16))
    assert store.metrics.cell_size == 18
    assert store.metrics.glyph_size == 9

    width["value"] = 600
    store.set_snapshot(make_board(cols=30))
    assert store.metrics.cell_size == 20


def test_default_surface_width_is_used_without_surface():
    store = BoardStateStore(surface_width_provider=lambda: None)
    store.set_snapshot(make_board(cols=30))
    assert store.metrics.cell_size == 20


def test_set_snapshot_triggers_render_and_listeners():
    store = BoardStateStore()
    renders = []
    seen = []
    store.set_render_callback(lambda: renders.append(store.snapshot))
    store.add_listener(seen.append)

    board = make_board()
    assert store.set_snapshot(board)
    assert renders == [board]
    assert seen == [board]


def test_failing_listener_does_not_block_others():
    store = BoardStateStore()
    seen = []

    def broken(_):
        raise RuntimeError("boom")

    store.add_listener(broken)
    store.add_listener(seen.append)
    store.set_snapshot(make_board())
    assert len(seen) == 1


def test_elapsed_seconds_defaults_to_zero():
    store = BoardStateStore()
    assert store.elapsed_seconds == 0
    store.set_snapshot(make_board(elapsed_seconds=None))
    assert store.elapsed_seconds == 0
    store.set_snapshot(make_board(elapsed_seconds=31))
    assert store.elapsed_seconds == 31


def test_last_write_wins_without_sequence():
    store = BoardStateStore()
    first = make_board(rows=2)
    second = make_board(rows=3)
    store.set_snapshot(first)
    store.set_snapshot(second)
    assert store.snapshot is second


def test_stale_sequence_is_discarded():
    store = BoardStateStore()
    newer = make_board(sequence=5)
    older = make_board(sequence=4)
    assert store.set_snapshot(newer)
    assert not store.set_snapshot(older)
    assert store.snapshot is newer
    assert store.set_snapshot(make_board(sequence=5))


def test_closed_store_ignores_snapshots():
    store = BoardStateStore()
    renders = []
    store.set_render_callback(lambda: renders.append(1))
    store.close()
    assert not store.set_snapshot(make_board())
    assert store.snapshot is None
    assert renders == []


def test_zero_surface_width_falls_back_to_default():
    store = BoardStateStore(surface_width_provider=lambda: 0)
    store.set_snapshot(make_board(cols=30))
    assert store.metrics.cell_size == 20


def test_replace_resets_sequence_baseline():
    store = BoardStateStore()
    store.set_snapshot(make_board(sequence=12))
    restarted = make_board(sequence=0)
    assert store.set_snapshot(restarted, replace=True)
    assert store.snapshot is restarted
    assert store.set_snapshot(make_board(sequence=1))
