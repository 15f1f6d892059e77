"""
Automatic schema migration.
Compares the SQLAlchemy models with an existing SQLite database and adds
columns the models declare but the database lacks.
"""
import logging
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from yourscore.database import engine, Base
from yourscore import models  # noqa: F401  registers all tables

logger = logging.getLogger("yourscore.migrations")


def sqlalchemy_type_to_sqlite(sa_type) -> str:
    """Map a SQLAlchemy column type to a SQLite storage class"""
    type_name = str(sa_type).upper()

    if "INT" in type_name or "BOOLEAN" in type_name:
        return "INTEGER"
    if "FLOAT" in type_name or "NUMERIC" in type_name or "REAL" in type_name:
        return "REAL"
    # Strings, dates and datetimes are stored as text
    return "TEXT"


def get_default_value(column) -> str:
    """Column default as a SQL literal, or NULL when it has none"""
    default = column.default
    if default is None or not hasattr(default, "arg"):
        return "NULL"

    value = default.arg
    if callable(value):
        return "CURRENT_TIMESTAMP" if "datetime" in str(value) else "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return f"'{value}'"
    return "NULL"


def build_add_column_sql(table_name: str, column) -> str:
    sql = f'ALTER TABLE {table_name} ADD COLUMN "{column.name}" {sqlalchemy_type_to_sqlite(column.type)}'
    default_value = get_default_value(column)
    if default_value != "NULL":
        sql += f" DEFAULT {default_value}"
        # SQLite only accepts NOT NULL on ADD COLUMN together with a default
        if not column.nullable:
            sql += " NOT NULL"
    return sql


def auto_migrate(bind: Engine = None) -> int:
    """
    Add missing columns to existing tables.

    Args:
        bind: Engine to migrate, defaults to the application engine

    Returns:
        Number of columns added
    """
    bind = bind or engine
    if bind.dialect.name != "sqlite":
        logger.info(f"Skipping schema migration for dialect '{bind.dialect.name}'")
        return 0

    logger.info("Starting automatic schema migration...")
    inspector = inspect(bind)
    existing_tables = set(inspector.get_table_names())

    missing = []
    for table_name, table in Base.metadata.tables.items():
        if table_name not in existing_tables:
            logger.warning(f"Table '{table_name}' doesn't exist. Run Base.metadata.create_all() first.")
            continue

        existing_columns = {column["name"] for column in inspector.get_columns(table_name)}
        missing.extend(
            (table_name, column) for column in table.columns
            if column.name not in existing_columns
        )

    with bind.begin() as conn:
        for table_name, column in missing:
            alter_sql = build_add_column_sql(table_name, column)
            logger.debug(f"SQL: {alter_sql}")
            try:
                conn.execute(text(alter_sql))
            except SQLAlchemyError as e:
                logger.error(f"Failed to add column {table_name}.{column.name}: {e}")
                raise
            logger.info(f"Added column: {table_name}.{column.name}")

    migrations_applied = len(missing)
    if migrations_applied > 0:
        logger.info(f"Migration completed: {migrations_applied} column(s) added")
    else:
        logger.info("Schema is up to date - no migrations needed")

    return migrations_applied


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    auto_migrate()
