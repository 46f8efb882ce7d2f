from .base import InvalidCredentials, NotFound, Store, StoreError, UserExists
from .local import LocalStore
from .sql import SqlStore

__all__ = [
    "Store", "StoreError", "UserExists", "InvalidCredentials", "NotFound",
    "SqlStore", "LocalStore",
]
