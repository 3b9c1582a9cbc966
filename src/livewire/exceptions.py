"""
Error types raised by the livewire search engine.
"""


class LivewireError(Exception):
    """Base class for all livewire errors."""


class InvalidAnchor(LivewireError, ValueError):
    """The anchor is unset, outside the image bounds or excluded by the mask."""


class OutOfBounds(LivewireError, IndexError):
    """A query coordinate lies outside the image extent."""


class NotVisited(LivewireError, LookupError):
    """A cell has no record in the direction field."""


class UnreachableQuery(NotVisited):
    """The queried cell was never reached from the anchor."""
