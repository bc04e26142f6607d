"""
text renderings of the logical board and of where the physical board disagrees with it
"""

import chess
import numpy as np

FILES = "   " + "  ".join("abcdefgh")

# markers laid over the board
MISSING = "?" # logical piece, physical square empty
EXTRA = "!" # physical piece, logical square empty
LIFTED = "*" # lifted as part of the pending action
TARGET = "o" # where a pending candidate can still land


def _grid(game_state):
    # 8x8 display grid, row 0 is rank 8
    vis = np.full((8, 8), ".", dtype=object)
    for sq in chess.SQUARES:
        piece = game_state.piece_at(sq)
        if piece:
            vis[7 - chess.square_rank(sq), chess.square_file(sq)] = piece.symbol()
    return vis


def _mark(vis, square, marker):
    vis[7 - chess.square_rank(square), chess.square_file(square)] = marker


def _rows(vis):
    lines = [FILES]
    for r in range(8):
        # 2 character wide cells with a space between, like the other board printouts
        lines.append(f"{8 - r} " + " ".join(f"{str(cell):>2}" for cell in vis[r, :]) + f"  {8 - r}")
    lines.append(FILES)
    return lines


def render_board(game_state, discrepancy=None, pending=None):
    """
    draw the logical board with markers for anything that needs attention

    '?' = piece missing from the physical board
    '!' = physical piece where the game has none
    '*' = square lifted for the move in progress
    'o' = square a candidate of the move in progress can still land on

    Args:
        game_state (GameState): the logical position
        discrepancy (OccupancyDiff | None): physical minus logical, lifted = missing and placed = extra
        pending (PendingAction | None): action in flight

    Returns:
        str: the board, rank 8 on top
    """
    vis = _grid(game_state)

    if pending is not None:
        for move in pending.candidates:
            for path in game_state.footprint(move):
                if path.destination is not None and path.destination not in pending.placed:
                    _mark(vis, path.destination, TARGET)
        for sq in pending.lifted:
            _mark(vis, sq, LIFTED)

    if discrepancy is not None:
        for sq in discrepancy.lifted:
            _mark(vis, sq, MISSING)
        for sq in discrepancy.placed:
            _mark(vis, sq, EXTRA)

    return "\n".join(_rows(vis))


def render_occupancy(occupancy):
    """
    draw a raw sensor reading, '1' for occupied

    Args:
        occupancy (Occupancy): the reading

    Returns:
        str: the reading, rank 8 on top
    """
    vis = np.where(occupancy.to_matrix() == 1, "1", ".").astype(object)
    return "\n".join(_rows(vis))


def render_status(game_state, pending=None, halt=None, discrepancy=None):
    """
    header lines describing the game and the reconciler

    Returns:
        str: side to move, FEN, status, pending action, halt reason and discrepancy summary
    """
    lines = ["White to move" if game_state.turn == chess.WHITE else "Black to move"]
    lines.append(f"FEN: {game_state.fen}")
    lines.append(f"Status: {game_state.status.value}")
    if game_state.last_move is not None:
        lines.append(f"Last move: {game_state.last_move.uci()}")
    if pending is not None:
        lines.append(f"Moving: {pending.describe()}")
    else:
        lines.append("No action in progress")
    if halt is not None:
        lines.append(f"HALTED [{halt.code}]: {halt.reason}")
        lines.append(f"  offending change: {halt.diff}")
        lines.append("  re-seat the pieces and reset to continue")
    if discrepancy is not None and not discrepancy.is_empty():
        lines.append(f"Board differs from game: {discrepancy}")
    return "\n".join(lines)


def render(board_item):
    """
    full diagnostic view of a BoardItem

    Args:
        board_item (BoardItem): the board to describe

    Returns:
        str: status header followed by the marked board
    """
    pending = board_item.reconciler.pending
    halt = board_item.reconciler.halt_state
    discrepancy = board_item.discrepancy
    return "\n".join([
        render_status(board_item.game_state, pending, halt, discrepancy),
        "",
        render_board(board_item.game_state, discrepancy, pending),
    ])
