"""
Error taxonomy for the design pattern detector.

All errors raised on purpose by the detector derive from DetectorError, so a
caller (the CLI) can handle them in one place.
"""


class DetectorError(Exception):
    """Base class of all detector errors."""


class GraphError(DetectorError):
    """
    Raised while building a graph: a relation references an unregistered
    node, carries no properties, or reuses an id with conflicting endpoints.
    """


class RuleError(DetectorError):
    """
    Raised when a rule cannot be evaluated: an unsupported
    scope/topic/operator combination, or an EQUALS/NOT_EQUALS rule whose
    mould has no determinate value. Always fatal to the matching run.
    """


class ParseError(DetectorError):
    """Raised when an XMI model or a pattern template cannot be read."""
