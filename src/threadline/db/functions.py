# src/threadline/db/functions.py
"""SQL functions the ranking expressions rely on.

``epoch_seconds`` compiles per dialect. SQLite builds without its math
extension lack ``log10``, ``power`` and ``sqrt``, so those are registered on
every new SQLite connection.
"""

from __future__ import annotations

import math
import sqlite3

from sqlalchemy import Float, event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement

# Julian day number of 1970-01-01T00:00:00Z.
_UNIX_EPOCH_JULIAN_DAY = 2440587.5


class epoch_seconds(FunctionElement):
    """Seconds since the Unix epoch of a UTC timestamp expression."""

    type = Float()
    name = "epoch_seconds"
    inherit_cache = True


@compiles(epoch_seconds)
def _epoch_seconds_default(element, compiler, **kw):
    return "EXTRACT(EPOCH FROM %s)" % compiler.process(element.clauses, **kw)


@compiles(epoch_seconds, "sqlite")
def _epoch_seconds_sqlite(element, compiler, **kw):
    return "((julianday(%s) - %r) * 86400.0)" % (
        compiler.process(element.clauses, **kw),
        _UNIX_EPOCH_JULIAN_DAY,
    )


def _log10(value):
    if value is None or value <= 0:
        return None
    return math.log10(value)


def _power(base, exponent):
    if base is None or exponent is None or base <= 0:
        return None
    return math.pow(base, exponent)


def _sqrt(value):
    if value is None or value < 0:
        return None
    return math.sqrt(value)


@event.listens_for(Engine, "connect")
def register_sqlite_math(dbapi_connection, _connection_record) -> None:
    """Install the math functions on a fresh SQLite connection."""
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return
    dbapi_connection.create_function("log10", 1, _log10, deterministic=True)
    dbapi_connection.create_function("power", 2, _power, deterministic=True)
    dbapi_connection.create_function("sqrt", 1, _sqrt, deterministic=True)
