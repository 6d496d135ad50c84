"""
RICHIEAT Backend — Migration Tests
====================================

Runs the Alembic scripts against a throwaway SQLite file. Kept synchronous:
env.py drives its own event loop with asyncio.run().
"""

from argparse import Namespace
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "alembic"


def alembic_config(db_path) -> Config:
    # No ini file, so env.py leaves the test logging setup alone.
    config = Config(cmd_opts=Namespace(x=[f"url=sqlite+aiosqlite:///{db_path}"]))
    config.set_main_option("script_location", str(ALEMBIC_DIR))
    return config


def table_names(db_path):
    engine = create_engine(f"sqlite:///{db_path}")
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


class TestMigrations:

    def test_upgrade_then_downgrade(self, tmp_path):
        db_path = tmp_path / "migrated.db"
        config = alembic_config(db_path)

        command.upgrade(config, "head")
        assert {"advisors", "clients", "alembic_version"} <= table_names(db_path)

        command.downgrade(config, "base")
        assert table_names(db_path) == {"alembic_version"}
