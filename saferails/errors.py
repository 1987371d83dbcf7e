"""
Exception types raised by the separation kernel
"""


class SafeRailsError(Exception):
    """Base class for all kernel errors"""


class InvalidGeometry(SafeRailsError, ValueError):
    """Track curve has zero, negative or undefined length"""


class InvalidInput(SafeRailsError, ValueError):
    """A command argument was rejected; simulator state is unchanged"""


class InvalidState(SafeRailsError, RuntimeError):
    """A command is not valid in the simulator's current state"""
