from . import models  # noqa: F401
from .base import Base
from .gateway import Database, ExecuteResult, Transaction, build_database

__all__ = ["Base", "Database", "ExecuteResult", "Transaction", "build_database"]
