"""
Exceptions raised by the DSP core.

Both derive from ValueError so callers that only care about "bad input"
can keep catching that.
"""


class ArgumentError(ValueError):
    """An option is missing, malformed, or names an unknown mode."""


class ConfigurationError(ArgumentError):
    """Options are valid on their own but inconsistent with each other or with the input."""
