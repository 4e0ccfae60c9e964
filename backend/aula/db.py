from __future__ import annotations
import logging
from sqlalchemy import create_engine, event, inspect
from sqlalchemy.orm import sessionmaker, declarative_base
from .settings import settings


log = logging.getLogger(__name__)

DATABASE_URL = settings.database_url or "sqlite:///./aula.db"

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args, future=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


if DATABASE_URL.startswith("sqlite"):
	@event.listens_for(engine, "connect")
	def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
		# SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
		cursor = dbapi_connection.cursor()
		cursor.execute("PRAGMA foreign_keys=ON")
		cursor.close()


def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()


# Additive columns introduced after the first schema; applied on startup
_ADDITIVE_COLUMNS = {
	"learning_styles": {"color": "VARCHAR(32)"},
	"activities": {"subject_id": "VARCHAR(36)"},
	"interventions": {"subject": "VARCHAR(128)"},
	"profiles": {"subject": "VARCHAR(128)", "lastname": "VARCHAR(128)"},
}


def ensure_schema() -> None:
	try:
		inspector = inspect(engine)
		tables = set(inspector.get_table_names())
	except Exception:
		log.warning("Could not inspect database schema", exc_info=True)
		return
	for table, columns in _ADDITIVE_COLUMNS.items():
		if table not in tables:
			continue
		existing = {c["name"] for c in inspector.get_columns(table)}
		with engine.begin() as conn:
			for name, ddl in columns.items():
				if name not in existing:
					log.info("Adding column %s.%s", table, name)
					conn.exec_driver_sql(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}")
