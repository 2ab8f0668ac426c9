"""Exception hierarchy for logit-probe.

All exceptions derive from LogitProbeError, enabling broad catch patterns
at the application boundary while allowing fine-grained handling internally.
"""


class LogitProbeError(Exception):
    """Base exception for all logit-probe errors."""


class DecodeError(LogitProbeError):
    """A token id could not be mapped to text.

    Raised by decoders for invalid ids or internal tokenizer failures.
    The reporter recovers from it per entry by omitting the decoded text.
    """


class ConfigValidationError(LogitProbeError):
    """Configuration field validation failed.

    Raised when a configured sink name is unknown or a setting cannot be
    turned into a working component.
    """


class PreconditionError(LogitProbeError, ValueError):
    """The caller passed arguments the reporter cannot act on."""


class InvalidTopKError(PreconditionError):
    """A negative top-k was requested.

    Negative k is rejected rather than clamped so that caller bugs surface
    instead of silently producing empty reports.
    """


class ScoreShapeError(PreconditionError):
    """The score buffer is not a 1-D row or a 2-D (batch, vocab) matrix."""
