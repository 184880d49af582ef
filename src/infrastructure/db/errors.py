"""Translate driver errors into the domain failure taxonomy.

Backends report the same integrity problem in different ways: PostgreSQL
through SQLSTATE codes and constraint names, SQLite through extended result
codes and ``table.column`` lists, MySQL through numeric error codes and key
names. The gateway calls :func:`classify_error` on every driver error so the
services never look at storage-specific messages.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from src.domain.errors import AlreadyExistsError, DomainError, PersistenceError

PG_UNIQUE_VIOLATION = "23505"
SQLITE_UNIQUE_ERRORS = frozenset({"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"})
MYSQL_DUPLICATE_ENTRY = 1062

_SQLITE_COLUMNS = re.compile(r"constraint failed: (?P<columns>.+)$")


@dataclass(frozen=True, slots=True)
class UniqueKey:
    """A named unique constraint and the field it guards."""

    constraint: str
    table: str
    columns: tuple[str, ...]
    field: str


UNIQUE_KEYS: tuple[UniqueKey, ...] = (
    UniqueKey("uq_users_email", "users", ("email",), "email"),
    UniqueKey("uq_users_handle", "users", ("handle",), "handle"),
    UniqueKey("uq_users_phone", "users", ("phone",), "phone"),
    UniqueKey("uq_reviews_application_user", "reviews", ("application_id", "user_id"), "review"),
)

DUPLICATE_MESSAGES = {
    "email": "A user with this email already exists",
    "handle": "A user with this handle already exists",
    "phone": "A user with this phone number already exists",
    "review": "You have already reviewed this application",
}


def classify_error(exc: SQLAlchemyError) -> DomainError:
    """Map a SQLAlchemy/driver error onto the domain taxonomy."""
    if isinstance(exc, DBAPIError) and is_unique_violation(exc.orig):
        key = match_unique_key(exc.orig)
        field = key.field if key else None
        message = DUPLICATE_MESSAGES.get(field or "", "Duplicate record")
        return AlreadyExistsError(message, field=field)
    return PersistenceError()


def is_unique_violation(orig: BaseException | None) -> bool:
    if orig is None:
        return False
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == PG_UNIQUE_VIOLATION:
        return True
    if getattr(orig, "sqlite_errorname", None) in SQLITE_UNIQUE_ERRORS:
        return True
    if str(orig).startswith("UNIQUE constraint failed"):
        # sqlite builds without extended result codes
        return True
    args = getattr(orig, "args", ())
    return bool(args) and args[0] == MYSQL_DUPLICATE_ENTRY


def match_unique_key(orig: BaseException) -> UniqueKey | None:
    """Find the unique constraint a duplicate-key error refers to."""
    constraint = _constraint_name(orig)
    if constraint:
        for key in UNIQUE_KEYS:
            if key.constraint == constraint:
                return key

    message = str(orig)
    found = _SQLITE_COLUMNS.search(message)
    if found:
        pairs = [part.strip().split(".", 1) for part in found.group("columns").split(",")]
        tables = {pair[0] for pair in pairs if len(pair) == 2}
        columns = tuple(sorted(pair[1] for pair in pairs if len(pair) == 2))
        for key in UNIQUE_KEYS:
            if tables == {key.table} and columns == tuple(sorted(key.columns)):
                return key

    # MySQL: "Duplicate entry 'x' for key 'users.uq_users_email'"
    for key in UNIQUE_KEYS:
        if f"'{key.constraint}'" in message or f".{key.constraint}'" in message:
            return key
    return None


def _constraint_name(orig: BaseException) -> str | None:
    # asyncpg errors are wrapped by the SQLAlchemy adapter; the driver
    # exception with ``constraint_name`` is the cause
    for candidate in (orig, orig.__cause__):
        name = getattr(candidate, "constraint_name", None)
        if name:
            return name
    return None
