"""
tracks the last accepted occupancy reading and diffs new readings against it
"""

import logging

from sensor_chess.occupancy import Occupancy

log = logging.getLogger(__name__)


class OccupancyObserver:
    """
    holds the baseline snapshot that incoming readings are compared to

    the observer never judges legality. the baseline only moves forward when the
    caller accepts a reading, so a reading that was rejected keeps showing up in
    every later diff until reset is called with the board's true state

    Attributes:
        baseline (Occupancy): last accepted snapshot
    """

    def __init__(self, baseline=None):
        self.baseline = baseline if baseline is not None else Occupancy()

    def observe(self, snapshot):
        """
        diff a new reading against the baseline without moving the baseline

        Args:
            snapshot (Occupancy): the new reading

        Returns:
            OccupancyDiff: squares that became empty or occupied
        """
        return self.baseline.diff(snapshot)

    def accept(self, snapshot):
        """make a reading the new baseline once the reconciler has accepted its diff"""
        self.baseline = snapshot

    def reset(self, snapshot):
        """
        replace the baseline with a reading the operator has confirmed

        Args:
            snapshot (Occupancy): the physical board's actual occupancy
        """
        log.info("observer baseline reset (%d pieces)", snapshot.count())
        self.baseline = snapshot
