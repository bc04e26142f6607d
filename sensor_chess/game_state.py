"""
authoritative game state, a thin adapter over the python-chess board
"""

import enum
from dataclasses import dataclass
from typing import Optional

import chess

from sensor_chess.errors import IllegalMove, InvalidPosition
from sensor_chess.occupancy import Occupancy


class TerminalStatus(enum.Enum):
    """status of the position for the side to move"""
    NONE = "none"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"


@dataclass(frozen=True)
class Path:
    """
    one piece's part in a move

    Attributes:
        origin (int): square the piece leaves
        destination (int | None): square it lands on, None when it leaves the board (captured)
    """
    origin: int
    destination: Optional[int]


class GameState:
    """
    immutable chess position used as the single source of truth for what the board should look like

    every query goes through python-chess, which owns legality, move generation,
    castling and en passant rights, counters and check/mate detection.
    apply returns a new GameState so anything holding an older one keeps a consistent view

    Attributes:
        board (chess.Board): a copy of the underlying python-chess board
    """

    def __init__(self, fen=chess.STARTING_FEN):
        """
        load a position

        Args:
            fen (str): FEN of the position, defaults to the standard start

        Raises:
            InvalidPosition: if the FEN cannot be parsed or describes an impossible position
        """
        try:
            board = chess.Board(fen)
        except ValueError as exc:
            raise InvalidPosition(f"cannot load FEN {fen!r}: {exc}") from exc
        if not board.is_valid():
            raise InvalidPosition(f"FEN {fen!r} is not a valid position: {board.status()!r}")
        self._board = board

    @classmethod
    def _wrap(cls, board):
        # skip FEN parsing, the board came from a legal push
        state = cls.__new__(cls)
        state._board = board
        return state

    @property
    def board(self):
        return self._board.copy()

    @property
    def turn(self):
        return self._board.turn

    @property
    def fen(self):
        return self._board.fen()

    @property
    def castling_rights(self):
        return self._board.castling_xfen()

    @property
    def ep_square(self):
        return self._board.ep_square

    @property
    def halfmove_clock(self):
        return self._board.halfmove_clock

    @property
    def fullmove_number(self):
        return self._board.fullmove_number

    @property
    def history(self):
        """moves played since the position was loaded, in UCI"""
        return [move.uci() for move in self._board.move_stack]

    @property
    def last_move(self):
        return self._board.peek() if self._board.move_stack else None

    @property
    def status(self):
        """
        terminal status of the position

        Returns:
            TerminalStatus: checkmate, stalemate or draw once the game is over, check or none otherwise
        """
        outcome = self._board.outcome()
        if outcome is not None:
            if outcome.termination == chess.Termination.CHECKMATE:
                return TerminalStatus.CHECKMATE
            if outcome.termination == chess.Termination.STALEMATE:
                return TerminalStatus.STALEMATE
            return TerminalStatus.DRAW
        if self._board.is_check():
            return TerminalStatus.CHECK
        return TerminalStatus.NONE

    def is_game_over(self):
        return self._board.outcome() is not None

    def piece_at(self, square):
        return self._board.piece_at(square)

    def legal_moves_from(self, square):
        """
        every legal move starting on a square

        Args:
            square (int): origin square

        Returns:
            list[chess.Move]: empty if the square holds no piece of the side to move or it cannot move
        """
        return [m for m in self._board.legal_moves if m.from_square == square]

    def legal_moves_to(self, square):
        """
        every legal move ending on a square

        Args:
            square (int): destination square

        Returns:
            list[chess.Move]: the moves, castling counts by the king's destination
        """
        return [m for m in self._board.legal_moves if m.to_square == square]

    def castling_moves(self):
        """legal castling moves, encoded as the king's two square step"""
        return [m for m in self._board.legal_moves if self._board.is_castling(m)]

    def is_legal(self, move):
        return self._board.is_legal(move)

    def apply(self, move):
        """
        play a move and return the resulting state

        Args:
            move (chess.Move): the move to play

        Returns:
            GameState: the new state, this one is left unchanged

        Raises:
            IllegalMove: if the move is not legal here
        """
        if not self._board.is_legal(move):
            raise IllegalMove(f"{move.uci()} is not legal in {self.fen}")
        board = self._board.copy()
        board.push(move)
        return GameState._wrap(board)

    def san(self, move):
        return self._board.san(move)

    def expected_occupancy(self):
        """
        occupancy the physical board should show for this position

        Returns:
            Occupancy: every square holding a piece
        """
        return Occupancy.from_board(self._board)

    def footprint(self, move):
        """
        break a move into the paths of every piece it touches

        - plain move: the mover
        - capture: the mover and the captured piece leaving its square
        - en passant: the mover and the captured pawn beside the origin
        - castling: the king and the rook

        Args:
            move (chess.Move): a legal move in this position

        Returns:
            tuple[Path, ...]: mover first
        """
        start_sq, end_sq = move.from_square, move.to_square
        paths = [Path(start_sq, end_sq)]

        if self._board.is_castling(move):
            sr = chess.square_rank(start_sq)
            sc = chess.square_file(start_sq)
            ec = chess.square_file(end_sq)
            # the rook comes from the corner on the king's side and lands next to it
            if ec > sc:
                paths.append(Path(chess.square(7, sr), chess.square(ec - 1, sr)))
            else:
                paths.append(Path(chess.square(0, sr), chess.square(ec + 1, sr)))
        elif self._board.is_en_passant(move):
            # captured pawn is on the destination file and the origin rank
            captured_sq = chess.square(chess.square_file(end_sq), chess.square_rank(start_sq))
            paths.append(Path(captured_sq, None))
        elif self._board.is_capture(move):
            paths.append(Path(end_sq, None))

        return tuple(paths)

    def __repr__(self):
        return f"GameState({self.fen!r})"
