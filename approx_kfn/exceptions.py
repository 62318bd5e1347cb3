"""
Exception types raised by the approximate furthest-neighbor package.
"""


class ApproxKFNError(Exception):
    """Base class for all package errors."""


class InvalidArgumentError(ApproxKFNError, ValueError):
    """A parameter or input violates a precondition (bad l, m, k or data)."""


class NotTrainedError(ApproxKFNError, RuntimeError):
    """Search was attempted before the candidate set was built."""


class SerializationError(ApproxKFNError, ValueError):
    """Serialized state is malformed or uses an unknown encoding."""
