import importlib.util
import os

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

MIGRATION_PATH = os.path.join(
    os.path.dirname(__file__),
    "..",
    "alembic",
    "versions",
    "3c1e7a9b5d20_create_auth_tables.py",
)


def _load_migration():
    spec = importlib.util.spec_from_file_location("create_auth_tables", MIGRATION_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_upgrade_creates_auth_tables_and_downgrade_drops_them():
    migration = _load_migration()
    engine = create_engine("sqlite://")

    with engine.begin() as connection:
        with Operations.context(MigrationContext.configure(connection)):
            migration.upgrade()

        inspector = inspect(connection)
        assert {"users", "auth_sessions", "failed_login_attempts"} <= set(inspector.get_table_names())

        session_indexes = {index["name"]: index for index in inspector.get_indexes("auth_sessions")}
        assert session_indexes["ix_auth_sessions_access_token"]["unique"]
        assert session_indexes["ix_auth_sessions_refresh_token"]["unique"]
        assert "ix_auth_sessions_refresh_expires_at" in session_indexes

        user_indexes = {index["name"]: index for index in inspector.get_indexes("users")}
        assert user_indexes["ix_users_email"]["unique"]

        with Operations.context(MigrationContext.configure(connection)):
            migration.downgrade()

        assert inspect(connection).get_table_names() == []
