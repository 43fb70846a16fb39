from shopledger.database.base import Base
from shopledger.database.engine import create_db_engine, import_all_models, init_db
from shopledger.database.session import create_session_factory, get_db, unit_of_work

__all__ = [
    "Base",
    "create_db_engine",
    "create_session_factory",
    "get_db",
    "import_all_models",
    "init_db",
    "unit_of_work",
]
