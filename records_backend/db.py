from __future__ import annotations

# records_backend/db.py
import os
import sqlite3
from dataclasses import dataclass, field
from typing import Any

import yaml
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool

# 配置解析顺序：
# 1) 环境变量 RECORDS_*（最高优先级）
# 2) config.yaml（RECORDS_CONFIG 可指定路径）；测试环境下优先 database.test_db_path
# 3) 兜底默认值：项目根 records.db
_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "records.db")

_DB_ENV_KEYS = {
    "driver": "RECORDS_DB_DRIVER",
    "path": "RECORDS_DB_PATH",
    "host": "RECORDS_DB_HOST",
    "port": "RECORDS_DB_PORT",
    "username": "RECORDS_DB_USER",
    "password": "RECORDS_DB_PASSWORD",
    "dbname": "RECORDS_DB_NAME",
    "sslmode": "RECORDS_DB_SSLMODE",
}


@dataclass
class DBConfig:
    driver: str = "sqlite"
    path: str = _ROOT_DB
    host: str = "localhost"
    port: str = "5432"
    username: str = "postgres"
    password: str = ""
    dbname: str = "postgres"
    sslmode: str = "disable"

    def conninfo(self) -> str:
        """libpq key/value connection string, values quoted as needed."""
        return make_conninfo(
            host=self.host,
            port=self.port,
            user=self.username,
            dbname=self.dbname,
            password=self.password,
            sslmode=self.sslmode,
        )


@dataclass
class Settings:
    db: DBConfig = field(default_factory=DBConfig)
    collection: str = "records"
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8080
    cors_origins: list[str] = field(default_factory=list)


def _config_path() -> str:
    return os.environ.get("RECORDS_CONFIG") or os.path.join(_PROJECT_ROOT, "config.yaml")


def _read_config_yaml(path: str | None = None) -> dict:
    cfg_path = path or _config_path()
    if not os.path.exists(cfg_path):
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"config file {cfg_path} must contain a mapping")
    return cfg


def _is_test() -> bool:
    return (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)


def load_db_config(cfg: dict | None = None) -> DBConfig:
    cfg = _read_config_yaml() if cfg is None else cfg
    section: dict[str, Any] = cfg.get("database") or {}
    out = DBConfig()
    for key in _DB_ENV_KEYS:
        v = section.get(key)
        if v is not None and str(v).strip():
            setattr(out, key, str(v).strip())

    test_path = section.get("test_db_path")
    if _is_test() and isinstance(test_path, str) and test_path.strip():
        out.path = test_path.strip()

    for key, env in _DB_ENV_KEYS.items():
        v = os.environ.get(env)
        if v:
            setattr(out, key, v)

    out.driver = out.driver.lower()
    if out.driver not in ("sqlite", "postgres"):
        raise ValueError(f"unsupported database driver: {out.driver}")
    return out


def load_settings(path: str | None = None) -> Settings:
    cfg = _read_config_yaml(path)
    s = Settings(db=load_db_config(cfg))
    s.collection = str(os.environ.get("RECORDS_COLLECTION") or cfg.get("collection") or s.collection).strip("/")
    s.log_level = str(os.environ.get("RECORDS_LOG_LEVEL") or cfg.get("log_level") or s.log_level).upper()
    s.host = str(os.environ.get("RECORDS_HOST") or cfg.get("host") or s.host)
    s.port = int(os.environ.get("RECORDS_PORT") or cfg.get("port") or s.port)
    origins = cfg.get("cors_origins") or []
    s.cors_origins = [str(o) for o in origins]
    return s


def connect_sqlite(path: str) -> sqlite3.Connection:
    """
    打开进程级 SQLite 连接。autocommit（isolation_level=None），
    允许跨线程使用（FastAPI 同步路由跑在线程池里）。
    """
    if path != ":memory:":
        dirn = os.path.dirname(path) or "."
        os.makedirs(dirn, exist_ok=True)
    conn = sqlite3.connect(
        path,
        detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
        check_same_thread=False,
        isolation_level=None,
    )
    conn.row_factory = sqlite3.Row
    return conn


def open_postgres_pool(cfg: DBConfig, min_size: int = 1, max_size: int = 10):
    """Open a psycopg connection pool; fails fast if the server is unreachable."""
    pool = ConnectionPool(
        conninfo=cfg.conninfo(),
        min_size=min_size,
        max_size=max_size,
        kwargs={"autocommit": True},
        open=False,
    )
    pool.open(wait=True)
    return pool
