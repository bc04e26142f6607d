import chess
import numpy as np
import pytest

from sensor_chess.occupancy import Occupancy, OccupancyDiff


def test_start_position_occupancy():
    occ = Occupancy.from_board(chess.Board())
    # white on ranks 1-2, black on ranks 7-8
    assert occ.bits == 0xFFFF00000000FFFF
    assert occ.count() == 32
    assert chess.E2 in occ
    assert chess.E4 not in occ


def test_diff_tags_direction():
    before = Occupancy.from_board(chess.Board())
    after = before.with_square(chess.E2, False).with_square(chess.E4, True)
    diff = before.diff(after)
    assert diff.lifted == {chess.E2}
    assert diff.placed == {chess.E4}
    assert diff.size == 2
    assert str(diff) == "-e2 +e4"


def test_diff_of_identical_snapshots_is_empty():
    occ = Occupancy.from_squares(["a1", "h8"])
    diff = occ.diff(Occupancy.from_squares([chess.A1, chess.H8]))
    assert diff.is_empty()
    assert diff.size == 0
    assert str(diff) == "(no change)"


def test_orderings_try_every_lift_order_before_places():
    diff = OccupancyDiff(lifted=frozenset({chess.H1, chess.E1}), placed=frozenset({chess.A3}))
    assert diff.orderings() == [
        [("lift", chess.E1), ("lift", chess.H1), ("place", chess.A3)],
        [("lift", chess.H1), ("lift", chess.E1), ("place", chess.A3)],
    ]


def test_single_lift_has_one_ordering():
    diff = OccupancyDiff(lifted=frozenset({chess.E2}), placed=frozenset({chess.E4}))
    assert diff.orderings() == [[("lift", chess.E2), ("place", chess.E4)]]
    assert OccupancyDiff(placed=frozenset({chess.E4})).orderings() == [[("place", chess.E4)]]


def test_parse_decimal_hex_and_bit_string():
    expected = Occupancy.from_squares(["a1", "b1", "h8"])
    assert Occupancy.parse(str(expected.bits)) == expected
    assert Occupancy.parse(hex(expected.bits)) == expected
    bit_string = "11" + "0" * 61 + "1"
    assert Occupancy.parse(bit_string + "\n") == expected


@pytest.mark.parametrize("text", ["", "ok", "0xZZ", "1" * 63, str(1 << 64)])
def test_parse_rejects_garbage(text):
    with pytest.raises(ValueError):
        Occupancy.parse(text)


def test_matrix_rows_start_at_rank_eight():
    grid = np.zeros((8, 8), dtype=int)
    grid[6, 4] = 1  # e2
    grid[0, 0] = 1  # a8
    occ = Occupancy.from_matrix(grid)
    assert set(occ) == {chess.E2, chess.A8}
    assert np.array_equal(occ.to_matrix(), grid)


def test_matrix_must_be_eight_by_eight():
    with pytest.raises(ValueError):
        Occupancy.from_matrix(np.zeros((10, 12)))
