# mlcausal/errors.py

"""
Exceptions raised by the generator, partitioner and evaluation harness.

Configuration problems (bad fractions, unknown names) are raised before any
model is fitted. Empty partitions found while scoring are recorded in the
Scoreboard by the harness instead of aborting the run.
"""


class MLCausalError(Exception):
    """Base class for all mlcausal errors."""


class InvalidFractionError(MLCausalError, ValueError):
    """Split fractions outside (0, 1), summing above 1, or a bad fold count."""


class UnknownPartitionError(MLCausalError, KeyError):
    """A requested partition name is not in the partition mapping."""

    def __init__(self, name, available=()):
        self.name = name
        self.available = tuple(available)
        super().__init__(
            f"Unknown partition: {name!r} (available: {', '.join(self.available) or 'none'})"
        )

    def __str__(self):
        # KeyError would otherwise repr() the message
        return self.args[0]


class EmptyPartitionError(MLCausalError, ValueError):
    """
    A score (or fit) was requested over a partition with zero records.

    When raised by a finished evaluation run, `scoreboard` holds the scores
    that were computed before the run gave up.
    """

    def __init__(self, message, scoreboard=None):
        super().__init__(message)
        self.scoreboard = scoreboard


class UnknownModelError(MLCausalError, ValueError):
    pass


class UnknownMetricError(MLCausalError, ValueError):
    pass


class UnknownDGPError(MLCausalError, ValueError):
    pass
