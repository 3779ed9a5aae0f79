"""Database URL resolution and engine options."""

from sqlalchemy.engine import make_url

from stockmaster.config import BACKEND_DIR, build_database_uri, build_engine_options


def _clear_db_env(monkeypatch):
    for name in ("DATABASE_URL", "DB_HOST", "DB_PORT", "DB_USER", "DB_PASSWORD", "DB_NAME"):
        monkeypatch.delenv(name, raising=False)


def test_database_url_wins(monkeypatch):
    _clear_db_env(monkeypatch)
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db/stock")
    monkeypatch.setenv("DB_HOST", "mysql.internal")
    assert build_database_uri() == "postgresql://u:p@db/stock"


def test_mysql_from_discrete_settings(monkeypatch):
    _clear_db_env(monkeypatch)
    monkeypatch.setenv("DB_HOST", "mysql.internal")
    monkeypatch.setenv("DB_USER", "stock")
    monkeypatch.setenv("DB_PASSWORD", "pw")
    monkeypatch.setenv("DB_PORT", "3307")
    assert build_database_uri() == "mysql+pymysql://stock:pw@mysql.internal:3307/StockMaster"


def test_mysql_without_password(monkeypatch):
    _clear_db_env(monkeypatch)
    monkeypatch.setenv("DB_HOST", "localhost")
    assert build_database_uri() == "mysql+pymysql://root@localhost:3306/StockMaster"


def test_mysql_password_with_reserved_characters(monkeypatch):
    _clear_db_env(monkeypatch)
    monkeypatch.setenv("DB_HOST", "db")
    monkeypatch.setenv("DB_USER", "stock")
    monkeypatch.setenv("DB_PASSWORD", "p@ss/w:rd")
    url = make_url(build_database_uri())
    assert url.drivername == "mysql+pymysql"
    assert url.username == "stock"
    assert url.password == "p@ss/w:rd"
    assert url.host == "db"
    assert url.port == 3306
    assert url.database == "StockMaster"


def test_sqlite_fallback(monkeypatch):
    _clear_db_env(monkeypatch)
    uri = build_database_uri()
    assert uri.startswith("sqlite:///")
    assert uri.endswith("stockmaster.sqlite3")
    assert BACKEND_DIR in uri


def test_pool_options_only_for_server_databases(monkeypatch):
    monkeypatch.setenv("DB_POOL_SIZE", "4")
    assert build_engine_options("sqlite:///x.db") == {}
    options = build_engine_options("mysql+pymysql://root@localhost/StockMaster")
    assert options["pool_pre_ping"] is True
    assert options["pool_recycle"] == 300
    assert options["pool_size"] == 4
