import chess
import pytest

from sensor_chess.board_item import BoardItem
from sensor_chess.reconciler import PromotionPolicy


@pytest.fixture
def board():
    return BoardItem(promotion_policy=PromotionPolicy(), pending_timeout=None)


@pytest.fixture
def make_board():
    def _make(fen=chess.STARTING_FEN, **kwargs):
        kwargs.setdefault("promotion_policy", PromotionPolicy())
        kwargs.setdefault("pending_timeout", None)
        return BoardItem(fen=fen, **kwargs)
    return _make


@pytest.fixture
def play():
    """
    apply "-e2" (lift) / "+e4" (place) steps to a simulated physical board

    several squares joined with "," change in a single reading, e.g. "-e2,+e4"
    """
    def _play(board_item, *steps, start=None):
        physical = start if start is not None else board_item.observer.baseline
        outcomes = []
        for step in steps:
            for change in step.split(","):
                square = chess.parse_square(change[1:])
                physical = physical.with_square(square, change[0] == "+")
            outcomes.append(board_item.observe(physical))
        return outcomes
    return _play
