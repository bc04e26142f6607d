import chess

from sensor_chess.observer import OccupancyObserver
from sensor_chess.occupancy import Occupancy


def test_observe_does_not_move_baseline():
    start = Occupancy.from_board(chess.Board())
    observer = OccupancyObserver(start)
    lifted = start.with_square(chess.E2, False)

    assert observer.observe(lifted).lifted == {chess.E2}
    assert observer.baseline == start
    # the same change keeps showing up until it is accepted
    assert observer.observe(lifted).lifted == {chess.E2}


def test_accept_and_reset_replace_baseline():
    start = Occupancy.from_board(chess.Board())
    observer = OccupancyObserver(start)
    lifted = start.with_square(chess.E2, False)

    observer.accept(lifted)
    assert observer.observe(lifted).is_empty()

    observer.reset(start)
    assert observer.baseline == start
    assert observer.observe(lifted).lifted == {chess.E2}


def test_default_baseline_is_empty_board():
    assert OccupancyObserver().baseline == Occupancy()
