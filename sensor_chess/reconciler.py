"""
turns occupancy diffs into committed chess moves

the reconciler only ever sees which squares went empty or became occupied. it keeps
the legal moves that are still consistent with what has been observed since the
first lift and commits one once the physical board shows it completely. anything it
cannot explain moves it to Halted, where it stays until reset
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

import chess

from sensor_chess.errors import (
    AmbiguousCompletion,
    EngineRejectedMove,
    IllegalDestination,
    IllegalLift,
    IllegalMove,
    UnsupportedSimultaneousChange,
)
from sensor_chess.occupancy import OccupancyDiff
from sensor_chess.pending import (
    HaltState,
    Halted,
    Idle,
    Outcome,
    OutcomeKind,
    PendingAction,
    PendingCompound,
    PendingPromotion,
    PendingSingle,
)

log = logging.getLogger(__name__)

PROMOTION_PIECES = {
    "q": chess.QUEEN,
    "r": chess.ROOK,
    "b": chess.BISHOP,
    "n": chess.KNIGHT,
}


def parse_promotion_piece(piece):
    """
    normalize a promotion choice

    Args:
        piece (int | str): a python-chess piece type or one of the letters q, r, b, n

    Returns:
        int: chess.QUEEN, chess.ROOK, chess.BISHOP or chess.KNIGHT

    Raises:
        ValueError: for anything a pawn cannot promote to
    """
    if isinstance(piece, str):
        key = piece.strip().lower()
        if key not in PROMOTION_PIECES:
            raise ValueError(f"not a promotion piece: {piece!r}")
        return PROMOTION_PIECES[key]
    if piece not in PROMOTION_PIECES.values():
        raise ValueError(f"not a promotion piece: {piece!r}")
    return piece


@dataclass(frozen=True)
class PromotionPolicy:
    """
    how a promotion is resolved when occupancy cannot show which piece went on the board

    Attributes:
        default_piece (int | None): piece used when nobody chose one, None means always wait
        wait_for_choice (bool): wait for supply_promotion_choice instead of using the default right away
    """
    default_piece: Optional[int] = chess.QUEEN
    wait_for_choice: bool = False


class MoveReconciler:
    """
    state machine from occupancy diffs to moves

    the game state is injected and replaced on every commit. it only has to offer
    legal_moves_from, castling_moves, footprint, piece_at, turn, san, apply, status,
    fen and is_game_over, so tests may pass any object with those

    Attributes:
        game_state (GameState): the authoritative position
        promotion_policy (PromotionPolicy): how promotions are resolved
        state (Idle | PendingSingle | PendingCompound | PendingPromotion | Halted): current state
    """

    def __init__(self, game_state, promotion_policy=None):
        self.game_state = game_state
        self.promotion_policy = promotion_policy or PromotionPolicy()
        self.state = Idle()
        self._promotion_choice = None

    @property
    def is_halted(self):
        return isinstance(self.state, Halted)

    @property
    def pending(self):
        """the action in flight, or None"""
        return _pending_action(self.state)

    @property
    def halt_state(self):
        return self.state.halt if isinstance(self.state, Halted) else None

    def process(self, diff):
        """
        interpret one diff

        Args:
            diff (OccupancyDiff): changes since the last accepted reading

        Returns:
            Outcome: what happened, with accepted telling the observer whether to advance
        """
        state = self.state

        # halted absorbs everything until reset
        if isinstance(state, Halted):
            return Outcome(OutcomeKind.HALTED, accepted=False, halt=state.halt)

        # repeated reading, nothing new
        if diff.is_empty():
            return Outcome(_waiting_kind(state))

        if diff.size >= 3:
            return self.halt(UnsupportedSimultaneousChange(
                f"unsupported simultaneous change: {diff.size} squares changed at once ({diff})"), diff)

        prior = ()
        if isinstance(state, PendingPromotion):
            # the board moved on before anyone picked a piece
            default = self.promotion_policy.default_piece
            if default is None:
                return self.halt(AmbiguousCompletion(
                    f"board changed ({diff}) while waiting for a promotion choice"), diff)
            committed = _logged(self._commit(_promotion_move(state.action.candidates, default), diff))
            if committed.kind == OutcomeKind.HALTED:
                return committed
            prior = (committed,)

        # a multi square diff is applied as a whole or not at all
        saved_state = self.state
        saved_game = self.game_state
        saved_choice = self._promotion_choice

        failed = None
        for events in diff.orderings():
            outcomes = self._run_events(events, diff)
            if outcomes[-1].kind != OutcomeKind.HALTED:
                break
            # a set of lifts has no order, start over and try the next one
            failed = failed or outcomes[-1]
            self.state = saved_state
            self.game_state = saved_game
            self._promotion_choice = saved_choice
        else:
            halt = replace(failed.halt, fen=saved_game.fen, pending=_pending_action(saved_state))
            self.state = Halted(halt)
            return _logged(Outcome(OutcomeKind.HALTED, accepted=False, halt=halt, prior=prior))

        commits = _commits(outcomes[:-1])
        for outcome in commits + (outcomes[-1],):
            _logged(outcome)
        return replace(outcomes[-1], prior=prior + commits)

    def supply_promotion_choice(self, piece):
        """
        choose the piece for a promotion

        when a promotion is waiting it is committed right away, otherwise the choice
        is kept for the next promotion

        Args:
            piece (int | str): promotion piece, see parse_promotion_piece

        Returns:
            Outcome: COMMITTED if a waiting promotion was played, HALTED if halted, NOOP otherwise
        """
        piece = parse_promotion_piece(piece)
        state = self.state
        if isinstance(state, Halted):
            return Outcome(OutcomeKind.HALTED, accepted=False, halt=state.halt)
        if isinstance(state, PendingPromotion):
            self._promotion_choice = None
            return _logged(self._commit(_promotion_move(state.action.candidates, piece), OccupancyDiff()))
        log.debug("promotion choice %s stored for the next promotion", chess.piece_name(piece))
        self._promotion_choice = piece
        return Outcome(OutcomeKind.NOOP)

    def halt(self, error, diff=None):
        """
        stop interpreting

        Args:
            error (ReconcileError): why
            diff (OccupancyDiff | None): the diff that could not be interpreted

        Returns:
            Outcome: the HALTED outcome
        """
        return _logged(self._fail(error, diff if diff is not None else OccupancyDiff()))

    def reset(self, game_state=None):
        """
        drop any pending action or halt, optionally replacing the game state

        Args:
            game_state (GameState | None): new position, keeps the current one if None
        """
        if game_state is not None:
            self.game_state = game_state
        self.state = Idle()
        self._promotion_choice = None

    # single events
    def _run_events(self, events, diff):
        # stops at the first event that halts or finds the game over
        outcomes = []
        for kind, square in events:
            outcome = self._step(kind, square, diff)
            outcomes.append(outcome)
            if outcome.kind in (OutcomeKind.HALTED, OutcomeKind.GAME_OVER):
                break
        return outcomes

    def _fail(self, error, diff):
        halt = HaltState(self.game_state.fen, diff, error.message, error, _pending_action(self.state))
        self.state = Halted(halt)
        return Outcome(OutcomeKind.HALTED, accepted=False, halt=halt)

    def _step(self, kind, square, diff):
        state = self.state
        if isinstance(state, Idle):
            return self._step_idle(kind, square, diff)
        if isinstance(state, (PendingSingle, PendingCompound)):
            return self._step_pending(state, kind, square, diff)
        if isinstance(state, (PendingPromotion, Halted)):
            # two events in one diff cannot get here, a commit always lands in Idle
            return self._fail(UnsupportedSimultaneousChange(
                f"unsupported simultaneous change: {diff} arrived while {type(state).__name__}"), diff)
        raise TypeError(f"unknown reconciler state {state!r}")

    def _step_idle(self, kind, square, diff):
        name = chess.square_name(square)

        if self.game_state.is_game_over():
            return Outcome(OutcomeKind.GAME_OVER, accepted=False)

        if kind == "place":
            return self._fail(IllegalDestination(
                f"piece placed on {name} with no move in progress", square), diff)

        candidates = self.game_state.legal_moves_from(square)
        # castling may start with the rook
        candidates += [m for m in self.game_state.castling_moves()
                       if self.game_state.footprint(m)[1].origin == square]
        if not candidates:
            piece = self.game_state.piece_at(square)
            if piece is None:
                detail = "the square should be empty"
            elif piece.color != self.game_state.turn:
                detail = f"{chess.piece_name(piece.piece_type)} on it belongs to the side not to move"
            else:
                detail = f"{chess.piece_name(piece.piece_type)} on it has no legal moves"
            return self._fail(IllegalLift(f"lift from illegal/empty square {name}: {detail}", square), diff)

        action = PendingAction((("lift", square),), tuple(candidates))
        self.state = PendingSingle(square, action)
        log.debug("lift %s, %d candidates", name, len(candidates))
        return Outcome(OutcomeKind.PENDING)

    def _step_pending(self, state, kind, square, diff):
        action = state.action
        name = chess.square_name(square)

        # piece put straight back where it came from
        if isinstance(state, PendingSingle) and kind == "place" and square == state.origin:
            log.debug("piece put back on %s", name)
            self.state = Idle()
            return Outcome(OutcomeKind.NOOP)

        events = action.events + ((kind, square),)
        consistent = []
        complete = []
        for move in action.candidates:
            fits, done = self._replay(move, events)
            if fits:
                consistent.append(move)
                if done:
                    complete.append(move)

        if not consistent:
            if kind == "place":
                error = IllegalDestination(
                    f"destination {name} does not match any legal continuation of the lifted piece "
                    f"({action.describe()})", square)
            elif isinstance(state, PendingSingle):
                error = IllegalLift(
                    f"second lift from {name} inconsistent with any legal compound move "
                    f"({action.describe()})", square)
            else:
                error = IllegalLift(
                    f"lift from {name} is beyond the footprint of the move in progress "
                    f"({action.describe()})", square)
            return self._fail(error, diff)

        action = action.extend((kind, square), consistent)

        if not complete:
            self.state = PendingCompound(action)
            log.debug("pending %s", action.describe())
            return Outcome(OutcomeKind.PENDING)

        # the four promotions of one pawn share a footprint
        footprints = {(m.from_square, m.to_square) for m in complete}
        if len(footprints) > 1:
            moves = ", ".join(sorted(m.uci() for m in complete))
            return self._fail(AmbiguousCompletion(f"ambiguous destination: {moves} all match", square), diff)

        if complete[0].promotion is not None:
            return self._resolve_promotion(action, complete, diff)
        return self._commit(complete[0], diff)

    def _replay(self, move, events):
        """
        check observed events against the piece paths of one candidate

        a lift has to take a piece from an origin of the move that is still untouched,
        a placement has to put down a piece already in hand on that piece's destination

        Args:
            move (chess.Move): candidate
            events (tuple[tuple[str, int], ...]): events in order

        Returns:
            tuple[bool, bool]: (consistent, complete)
        """
        paths = self.game_state.footprint(move)
        lifted = set()
        landed = set()
        landed_squares = set()
        for kind, square in events:
            if kind == "lift":
                if square in lifted or square in landed_squares:
                    return False, False
                if not any(p.origin == square for p in paths):
                    return False, False
                lifted.add(square)
            else:
                path = next((p for p in paths
                             if p.destination == square and p.origin in lifted and p not in landed), None)
                if path is None:
                    return False, False
                landed.add(path)
                landed_squares.add(square)
        done = all(p.origin in lifted and (p.destination is None or p in landed) for p in paths)
        return True, done

    def _resolve_promotion(self, action, moves, diff):
        piece = self._promotion_choice
        if piece is None and not self.promotion_policy.wait_for_choice:
            piece = self.promotion_policy.default_piece
        if piece is None:
            self.state = PendingPromotion(action)
            log.info("promotion on %s waiting for a piece choice", chess.square_name(moves[0].to_square))
            return Outcome(OutcomeKind.AWAITING_PROMOTION)
        self._promotion_choice = None
        return self._commit(_promotion_move(moves, piece), diff)

    def _commit(self, move, diff):
        try:
            new_state = self.game_state.apply(move)
        except IllegalMove as exc:
            return self._fail(EngineRejectedMove(f"rules engine rejected {move.uci()}: {exc}",
                                                move.to_square), diff)
        san = self.game_state.san(move)
        self.game_state = new_state
        self.state = Idle()
        status = new_state.status
        return Outcome(OutcomeKind.COMMITTED, move=move, san=san, status=status)


def _pending_action(state):
    if isinstance(state, (PendingSingle, PendingCompound, PendingPromotion)):
        return state.action
    return None


def _waiting_kind(state):
    if isinstance(state, Idle):
        return OutcomeKind.NOOP
    if isinstance(state, PendingPromotion):
        return OutcomeKind.AWAITING_PROMOTION
    return OutcomeKind.PENDING


def _commits(outcomes):
    return tuple(o for o in outcomes if o.kind == OutcomeKind.COMMITTED)


def _promotion_move(moves, piece):
    # every candidate shares from/to, only the promotion piece differs
    base = moves[0]
    return chess.Move(base.from_square, base.to_square, promotion=piece)


def _logged(outcome):
    if outcome.kind == OutcomeKind.COMMITTED:
        log.info("committed %s (%s), %s", outcome.move.uci(), outcome.san, outcome.status.value)
    elif outcome.kind == OutcomeKind.HALTED:
        log.warning("halted [%s]: %s", outcome.halt.code, outcome.halt.reason)
    return outcome
