import chess
import pytest

from sensor_chess.occupancy import Occupancy
from sensor_chess.reconciler import PromotionPolicy
from sensor_chess.simulator import parse_square, run_simulator


def scripted(*lines):
    """prompt replacement that types the given lines, then ends input"""
    queue = list(lines)

    def ask(prompt):
        if not queue:
            raise EOFError
        return queue.pop(0)
    return ask


@pytest.mark.parametrize("text, square", [
    ("e2", chess.E2),
    (" A1 ", chess.A1),
    ("h8", chess.H8),
    ("i1", None),
    ("e9", None),
    ("e22", None),
    ("", None),
])
def test_parse_square(text, square):
    assert parse_square(text) == square


def test_take_and_put_play_a_move(board, capsys):
    physical = run_simulator(board, scripted("take e2", "p e4", "quit", "take d2"))

    assert board.move_log == ["e2e4"]
    assert physical == board.expected_occupancy()
    out = capsys.readouterr().out
    assert "[BOARD] pending" in out
    assert "[BOARD] committed e2e4 (e4), none" in out


def test_bad_commands_are_reported(board, capsys):
    run_simulator(board, scripted("", "take", "take z9", "dance", "promote k", "new not-a-fen"))
    out = capsys.readouterr().out
    assert "Invalid command format" in out
    assert "Invalid square notation" in out
    assert "Unknown command." in out
    assert "not a promotion piece" in out
    assert board.move_log == []


def test_halt_then_reset(board, capsys):
    run_simulator(board, scripted("t e7", "t e2", "reset", "t d2", "p d4"))

    out = capsys.readouterr().out
    assert "halted [ILLEGAL_LIFT]" in out
    assert "Reset. Differences from the game: -e2 -e7" in out
    # the game continues from the board as it was trusted at the reset
    assert board.move_log == ["d2d4"]
    assert board.discrepancy.lifted == {chess.E2, chess.E7}


def test_promotion_choice(make_board, capsys):
    policy = PromotionPolicy(default_piece=None, wait_for_choice=True)
    board = make_board("8/4P3/8/8/8/8/k7/4K3 w - - 0 1", promotion_policy=policy)

    run_simulator(board, scripted("take e7", "put e8", "promote n"))

    assert board.move_log == ["e7e8n"]
    assert "Promotion: choose a piece" in capsys.readouterr().out


def test_new_game_sets_up_the_pieces(board):
    fen = "4k3/8/8/8/8/8/8/4K2R w K - 0 1"
    physical = run_simulator(board, scripted("t e2", "p e4", f"new {fen}", "show"))

    assert board.game_state.fen == fen
    assert board.move_log == []
    assert physical == Occupancy.from_squares(["e8", "e1", "h1"])
