import pytest

from uciarena.adjudication import Color, DrawTracker, MaxMovesTracker, ResignTracker
from uciarena.engine import ScoreType


def test_draw_needs_enough_quiet_plies():
    tracker = DrawTracker(move_number=5, move_count=2, score=10)
    for _ in range(3):
        tracker.update(5, ScoreType.CP, 7)
    assert tracker.adjudicatable(5) is False
    tracker.update(-10, ScoreType.CP, 7)
    assert tracker.adjudicatable(5) is True
    assert tracker.adjudicatable(4) is False


def test_draw_counter_resets_on_large_score():
    tracker = DrawTracker(move_number=0, move_count=1, score=10)
    tracker.update(0, ScoreType.CP, 3)
    tracker.update(50, ScoreType.CP, 3)
    tracker.update(0, ScoreType.CP, 3)
    assert tracker.adjudicatable(0) is False


def test_draw_counter_ignores_mate_scores():
    tracker = DrawTracker(move_number=0, move_count=1, score=10)
    tracker.update(1, ScoreType.MATE, 3)
    tracker.update(1, ScoreType.MATE, 3)
    assert tracker.adjudicatable(0) is False


def test_draw_counter_restarts_on_zero_halfmove_clock():
    tracker = DrawTracker(move_number=0, move_count=2, score=10)
    for _ in range(3):
        tracker.update(0, ScoreType.CP, 4)
    tracker.update(0, ScoreType.CP, 0)
    assert tracker.adjudicatable(0) is False
    for _ in range(3):
        tracker.update(0, ScoreType.CP, 1)
    assert tracker.adjudicatable(0) is True


def test_draw_disabled_without_move_count():
    tracker = DrawTracker(move_number=0, move_count=0, score=10)
    tracker.update(500, ScoreType.CP, 3)
    assert tracker.draw_moves == 0


def test_one_sided_resign_counts_losing_side():
    tracker = ResignTracker(score=600, move_count=3, twosided=False)
    for _ in range(2):
        tracker.update(-700, ScoreType.CP, Color.BLACK)
        tracker.update(700, ScoreType.CP, Color.WHITE)
    assert tracker.resignable() is False
    tracker.update(-700, ScoreType.CP, Color.BLACK)
    assert tracker.resignable() is True


def test_one_sided_resign_resets_when_score_recovers():
    tracker = ResignTracker(score=600, move_count=2, twosided=False)
    tracker.update(-700, ScoreType.CP, Color.WHITE)
    tracker.update(-100, ScoreType.CP, Color.WHITE)
    tracker.update(-700, ScoreType.CP, Color.WHITE)
    assert tracker.resignable() is False


def test_one_sided_resign_counts_negative_mate():
    tracker = ResignTracker(score=600, move_count=1, twosided=False)
    tracker.update(3, ScoreType.MATE, Color.WHITE)
    assert tracker.resignable() is False
    tracker.update(-3, ScoreType.MATE, Color.WHITE)
    assert tracker.resignable() is True


@pytest.mark.parametrize(
    "score,score_type",
    [(700, ScoreType.CP), (-700, ScoreType.CP), (2, ScoreType.MATE), (-2, ScoreType.MATE)],
)
def test_two_sided_resign_counts_either_sign(score, score_type):
    tracker = ResignTracker(score=600, move_count=1, twosided=True)
    tracker.update(score, score_type, Color.WHITE)
    assert tracker.resignable() is False
    tracker.update(score, score_type, Color.BLACK)
    assert tracker.resignable() is True


def test_two_sided_resign_resets_on_small_score():
    tracker = ResignTracker(score=600, move_count=1, twosided=True)
    tracker.update(700, ScoreType.CP, Color.WHITE)
    tracker.update(100, ScoreType.CP, Color.BLACK)
    tracker.update(700, ScoreType.CP, Color.WHITE)
    assert tracker.resignable() is False


def test_max_moves_counts_full_moves():
    tracker = MaxMovesTracker(move_count=2)
    for _ in range(3):
        tracker.update()
    assert tracker.maxmoves_reached() is False
    tracker.update()
    assert tracker.maxmoves_reached() is True