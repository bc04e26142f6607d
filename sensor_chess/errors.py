"""
error types for move reconciliation

every ReconcileError is terminal for the interpretation stream: the reconciler
records it in a HaltState instead of raising it, and only an explicit reset clears it
"""


class ReconcileError(Exception):
    """
    base class for observations the reconciler cannot interpret

    Attributes:
        code (str): machine readable error code
        message (str): human readable reason
        square (int | None): square the offending event touched, if any
    """
    code = "RECONCILE_ERROR"

    def __init__(self, message, square=None):
        super().__init__(message)
        self.message = message
        self.square = square

    def to_dict(self):
        return {"code": self.code, "message": self.message, "square": self.square}


class IllegalLift(ReconcileError):
    """a square went empty that no legal continuation explains"""
    code = "ILLEGAL_LIFT"


class IllegalDestination(ReconcileError):
    """a piece landed where no legal continuation of the pending action ends"""
    code = "ILLEGAL_DESTINATION"


class UnsupportedSimultaneousChange(ReconcileError):
    """more squares changed in one reading than a single legal move can explain"""
    code = "UNSUPPORTED_SIMULTANEOUS_CHANGE"


class AmbiguousCompletion(ReconcileError):
    """more than one legal move matches what was observed"""
    code = "AMBIGUOUS_COMPLETION"


class EngineRejectedMove(ReconcileError):
    """the rules engine refused a move the reconciler believed legal"""
    code = "ENGINE_REJECTED_MOVE"


class AbandonedAction(ReconcileError):
    """a pending action outlived the configured staleness limit"""
    code = "ABANDONED_ACTION"


class IllegalMove(ValueError):
    """raised by GameState.apply for a move that is not legal in the position"""


class InvalidPosition(ValueError):
    """raised when a FEN cannot be loaded into a GameState"""
