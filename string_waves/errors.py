"""
Exception types raised by the string simulator.

ConfigurationError and IndexRangeError subclass the builtin exceptions a
caller would naturally catch (ValueError, IndexError), ExportError
subclasses OSError.
"""


class WaveStringError(Exception):
    """Base class for all errors raised by string_waves."""


class ConfigurationError(WaveStringError, ValueError):
    """Invalid parameters: even point count, non-positive length, etc."""


class IndexRangeError(WaveStringError, IndexError):
    """A shape would place samples outside the string."""


class ExportError(WaveStringError, OSError):
    """The output destination could not be opened or written."""
