"""
Occupancy Chess Board
=====================

Turns the per-square occupancy readings of a physical chess board into
legal chess moves, and stops instead of guessing when a reading cannot be
explained.

Architecture:
    1. Observer     – diffs each reading against the last accepted one
    2. Reconciler   – matches the diff against legal moves and their footprints
    3. Game state   – python-chess position, the single source of truth
    4. Diagnostics  – text view of the board and any physical/logical mismatch
"""

from sensor_chess.board_item import BoardItem
from sensor_chess.game_state import GameState, TerminalStatus
from sensor_chess.occupancy import Occupancy, OccupancyDiff
from sensor_chess.pending import Outcome, OutcomeKind
from sensor_chess.reconciler import MoveReconciler, PromotionPolicy

__version__ = "0.1.0"

__all__ = [
    "BoardItem",
    "GameState",
    "MoveReconciler",
    "Occupancy",
    "OccupancyDiff",
    "Outcome",
    "OutcomeKind",
    "PromotionPolicy",
    "TerminalStatus",
]
