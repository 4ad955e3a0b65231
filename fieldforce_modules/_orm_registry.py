"""
Module ORM Registry (``fieldforce_modules._orm_registry``).

Ensure all module-level SQLAlchemy ORM models are imported so that
``Base.metadata`` contains their table definitions before tables are
created.  Called by ``fieldforce_kernel.db.engine.create_tables``.
"""


def import_all_orm_models() -> None:
    """Import every ``fieldforce_modules.*.orm`` module (idempotent)."""
    import fieldforce_modules.expense.orm  # noqa: F401
