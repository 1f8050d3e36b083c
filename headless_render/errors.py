"""Exceptions raised by the headless facades themselves."""


class HeadlessError(Exception):
    """Base class for errors that originate in this package."""


class SessionClosedError(HeadlessError):
    """Raised when a browser session is used after ``quit()``."""


class UnsupportedOperationError(HeadlessError, NotImplementedError):
    """Raised by declared operations that have no defined behavior yet."""
