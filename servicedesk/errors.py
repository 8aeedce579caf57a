"""Exception types raised by the service desk package."""


class ServiceDeskError(Exception):
    """Base class for every error the package raises on purpose."""


class PersistenceError(ServiceDeskError):
    """A catalog or backup file could not be read or written."""


class NoBackupError(PersistenceError):
    """A restore was requested but no backup directory exists."""


class AccessDeniedError(ServiceDeskError):
    """An administrative command was run without the admin PIN."""
