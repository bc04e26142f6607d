"""
states of the move reconciler and the values it hands back

the reconciler is always in exactly one of Idle, PendingSingle, PendingCompound,
PendingPromotion or Halted
"""

import enum
import time
from dataclasses import dataclass, field
from typing import Optional

import chess

from sensor_chess.occupancy import OccupancyDiff


@dataclass(frozen=True)
class PendingAction:
    """
    a physical action that has started but not finished

    Attributes:
        events (tuple[tuple[str, int], ...]): ("lift", square) and ("place", square) events seen so far, in order
        candidates (tuple[chess.Move, ...]): legal moves still consistent with those events
        started_at (float): time.monotonic() of the first lift
    """
    events: tuple
    candidates: tuple
    started_at: float = field(default_factory=time.monotonic)

    @property
    def lifted(self):
        return tuple(sq for kind, sq in self.events if kind == "lift")

    @property
    def placed(self):
        return tuple(sq for kind, sq in self.events if kind == "place")

    def extend(self, event, candidates):
        """copy of the action with one more event and a narrowed candidate list"""
        return PendingAction(self.events + (event,), tuple(candidates), self.started_at)

    def age(self, now=None):
        now = time.monotonic() if now is None else now
        return now - self.started_at

    def describe(self):
        steps = []
        for kind, sq in self.events:
            steps.append(("-" if kind == "lift" else "+") + chess.square_name(sq))
        moves = ", ".join(sorted({m.uci()[:4] for m in self.candidates}))
        return f"{' '.join(steps)} (candidates: {moves})"


@dataclass(frozen=True)
class HaltState:
    """
    record of why interpretation stopped

    Attributes:
        fen (str): last consistent position
        diff (OccupancyDiff): the diff that could not be interpreted
        reason (str): human readable explanation
        error (ReconcileError): the classified error
        pending (PendingAction | None): action in flight when the halt happened
    """
    fen: str
    diff: OccupancyDiff
    reason: str
    error: Exception
    pending: Optional[PendingAction] = None

    @property
    def code(self):
        return self.error.code


@dataclass(frozen=True)
class Idle:
    """no action in flight, the board should match the game state"""


@dataclass(frozen=True)
class PendingSingle:
    """exactly one piece has been lifted, from origin"""
    origin: int
    action: PendingAction


@dataclass(frozen=True)
class PendingCompound:
    """several events of one move seen, e.g. a capture, castling or en passant in progress"""
    action: PendingAction


@dataclass(frozen=True)
class PendingPromotion:
    """a pawn reached the last rank and the promotion piece has not been chosen"""
    action: PendingAction


@dataclass(frozen=True)
class Halted:
    """interpretation stopped until an explicit reset"""
    halt: HaltState


class OutcomeKind(enum.Enum):
    NOOP = "noop"
    PENDING = "pending"
    COMMITTED = "committed"
    AWAITING_PROMOTION = "awaiting_promotion"
    HALTED = "halted"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class Outcome:
    """
    result of handing one diff (or a control call) to the reconciler

    Attributes:
        kind (OutcomeKind): what happened
        accepted (bool): whether the observer may advance its baseline to the reading
        move (chess.Move | None): committed move
        san (str | None): committed move in SAN, computed before the move was played
        status (TerminalStatus | None): status of the position after a commit
        halt (HaltState | None): set when kind is HALTED
        prior (tuple[Outcome, ...]): commits made earlier while handling the same diff
    """
    kind: OutcomeKind
    accepted: bool = True
    move: Optional[chess.Move] = None
    san: Optional[str] = None
    status: Optional[object] = None
    halt: Optional[HaltState] = None
    prior: tuple = ()

    def __str__(self):
        if self.kind == OutcomeKind.COMMITTED:
            return f"committed {self.move.uci()} ({self.san}), {self.status.value}"
        if self.kind == OutcomeKind.HALTED:
            return f"halted [{self.halt.code}] {self.halt.reason}"
        return self.kind.value
