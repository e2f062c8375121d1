"""Database bootstrap utilities.

Convenience imports for engine construction, the transaction boundary and
the SQL migrations runner. The DB layer does not leak ORM models into route
handlers; stores issue plain SQL.
"""

from form_service.db.base import dispose_engines, get_engine, transaction
from form_service.db.migrations_runner import apply_migrations

__all__ = [
    "get_engine",
    "dispose_engines",
    "transaction",
    "apply_migrations",
]
