"""
create a class to track a physical chess board that only reports which squares are occupied
"""

import logging

from sensor_chess import config, diagnostics
from sensor_chess.errors import AbandonedAction
from sensor_chess.game_state import GameState
from sensor_chess.observer import OccupancyObserver
from sensor_chess.occupancy import OccupancyDiff
from sensor_chess.pending import OutcomeKind
from sensor_chess.reconciler import MoveReconciler, PromotionPolicy, parse_promotion_piece

log = logging.getLogger(__name__)


def default_promotion_policy():
    """
    promotion policy built from the configuration constants

    Returns:
        PromotionPolicy: DEFAULT_PROMOTION and WAIT_FOR_PROMOTION_CHOICE from config
    """
    piece = parse_promotion_piece(config.DEFAULT_PROMOTION) if config.DEFAULT_PROMOTION else None
    return PromotionPolicy(default_piece=piece, wait_for_choice=config.WAIT_FOR_PROMOTION_CHOICE)


class BoardItem:
    """
    combined logical and physical chessboard representation for an occupancy sensing board

    this class handles
    - the authoritative python-chess game state
    - the baseline occupancy reading new readings are compared to
    - turning occupancy changes into committed moves through the reconciler
    - resynchronizing after a halt and starting new games
    - promotion choices, abandoned actions and notifying listeners of moves

    Attributes:
        reconciler (MoveReconciler): state machine that owns the game state
        observer (OccupancyObserver): holds the last accepted reading
        pending_timeout (float | None): seconds a half finished move may stay open, None for no limit
        move_log (list[str]): moves committed in this game, in UCI
        discrepancy (OccupancyDiff): physical board minus logical board as of the last reset or commit

    Methods:
        observe(snapshot):
            hand a new reading to the reconciler and advance the baseline if it was accepted

        reset(snapshot):
            clear a halt or pending action and trust the given reading as the new baseline

        start_new_game(fen, snapshot):
            replace the game state

        supply_promotion_choice(piece):
            pick the piece for a promotion the board cannot show

        check_staleness(now):
            halt if the pending action is older than pending_timeout

        subscribe(callback):
            get every outcome that is not a no-op

        display_board():
            print the diagnostic view
    """

    def __init__(self, fen=config.START_FEN, snapshot=None, promotion_policy=None,
                 pending_timeout=config.PENDING_TIMEOUT):
        """
        set up a game and trust a first reading

        Args:
            fen (str): starting position, defaults to the configured start
            snapshot (Occupancy | None): the board's current reading, assumed to match the position if None
            promotion_policy (PromotionPolicy | None): defaults to the configured policy
            pending_timeout (float | None): staleness limit in seconds

        Raises:
            InvalidPosition: if the FEN cannot be loaded
        """
        policy = promotion_policy if promotion_policy is not None else default_promotion_policy()
        self.reconciler = MoveReconciler(GameState(fen), policy)
        self.observer = OccupancyObserver()
        self.pending_timeout = pending_timeout
        self.move_log = []
        self.discrepancy = OccupancyDiff()
        self._listeners = []
        self._resync(snapshot)

    @property
    def game_state(self):
        return self.reconciler.game_state

    @property
    def is_halted(self):
        return self.reconciler.is_halted

    def expected_occupancy(self):
        return self.game_state.expected_occupancy()

    def observe(self, snapshot):
        """
        process one reading from the sensor grid

        Args:
            snapshot (Occupancy): the full board reading

        Returns:
            Outcome: what the reading meant
        """
        diff = self.observer.observe(snapshot)
        outcome = self.reconciler.process(diff)
        # a rejected reading stays in the diff until someone resets
        if outcome.accepted:
            self.observer.accept(snapshot)
        for step in outcome.prior + (outcome,):
            self._record(step)
        return outcome

    def reset(self, snapshot=None):
        """
        resynchronize with the physical board

        nothing is inferred from the reading: the game state stays as it is and any
        difference between the reading and the game is recorded in discrepancy

        Args:
            snapshot (Occupancy | None): the board's actual occupancy, the expected occupancy if None

        Returns:
            OccupancyDiff: the recorded discrepancy
        """
        self.reconciler.reset()
        return self._resync(snapshot)

    def start_new_game(self, fen=config.START_FEN, snapshot=None):
        """
        replace the game state with a new position

        Args:
            fen (str): the position to start from
            snapshot (Occupancy | None): the board's actual occupancy, the expected occupancy if None

        Returns:
            OccupancyDiff: the recorded discrepancy

        Raises:
            InvalidPosition: if the FEN cannot be loaded, the old game is kept
        """
        game_state = GameState(fen)
        self.reconciler.reset(game_state)
        self.move_log = []
        log.info("new game from %s", fen)
        return self._resync(snapshot)

    def supply_promotion_choice(self, piece):
        """
        choose the promotion piece

        Args:
            piece (int | str): chess.QUEEN/ROOK/BISHOP/KNIGHT or q/r/b/n

        Returns:
            Outcome: COMMITTED when a waiting promotion was played

        Raises:
            ValueError: if the piece is not a promotion piece
        """
        outcome = self.reconciler.supply_promotion_choice(piece)
        self._record(outcome)
        return outcome

    def check_staleness(self, now=None):
        """
        abandon a pending action that has been open too long

        Args:
            now (float | None): time.monotonic() value to compare against, the current time if None

        Returns:
            Outcome | None: the HALTED outcome if the action was abandoned
        """
        pending = self.reconciler.pending
        if self.pending_timeout is None or pending is None or self.reconciler.is_halted:
            return None
        age = pending.age(now)
        if age <= self.pending_timeout:
            return None
        outcome = self.reconciler.halt(AbandonedAction(
            f"pending action abandoned after {age:.1f}s: {pending.describe()}"))
        self._record(outcome)
        return outcome

    def subscribe(self, callback):
        """
        register a listener

        listeners run after the state change is complete and receive every outcome
        except no-ops

        Args:
            callback (callable): called with one Outcome

        Returns:
            callable: the callback, so this works as a decorator
        """
        self._listeners.append(callback)
        return callback

    def display_board(self):
        """
        print the diagnostic view of the board

        Returns:
            None
        """
        print(diagnostics.render(self))

    def _resync(self, snapshot):
        expected = self.expected_occupancy()
        if snapshot is None:
            snapshot = expected
        self.observer.reset(snapshot)
        self.discrepancy = expected.diff(snapshot)
        if not self.discrepancy.is_empty():
            log.warning("physical board differs from the game: %s", self.discrepancy)
        return self.discrepancy

    def _record(self, outcome):
        if outcome.kind == OutcomeKind.NOOP:
            return
        if outcome.kind == OutcomeKind.COMMITTED:
            self.move_log.append(outcome.move.uci())
            self.discrepancy = self.expected_occupancy().diff(self.observer.baseline)
        for callback in self._listeners:
            callback(outcome)
