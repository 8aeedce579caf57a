from servicedesk.backup import BackupManager
from servicedesk.errors import AccessDeniedError, NoBackupError, PersistenceError, ServiceDeskError
from servicedesk.persistence import FileHandler
from servicedesk.schema import ServiceRequest, User
from servicedesk.store import RequestManager

__all__ = [
    "AccessDeniedError",
    "BackupManager",
    "FileHandler",
    "NoBackupError",
    "PersistenceError",
    "RequestManager",
    "ServiceDeskError",
    "ServiceRequest",
    "User",
]
