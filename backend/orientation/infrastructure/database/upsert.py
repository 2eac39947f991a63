"""Dialect-native ``INSERT … ON CONFLICT DO NOTHING`` for idempotent creates."""

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def insert_ignoring_conflicts(session: AsyncSession, model, index_elements: list[str]):
    """Build an insert that silently skips rows violating the given unique key.

    Add ``.returning(model.id)`` to learn whether the row was actually written.
    """
    dialect = session.bind.dialect.name
    try:
        insert = _INSERTS[dialect]
    except KeyError:
        raise NotImplementedError(f"Idempotent insert not supported on '{dialect}'") from None
    return insert(model).on_conflict_do_nothing(index_elements=index_elements)
