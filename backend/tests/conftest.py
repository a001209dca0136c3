import os
import sys

# Add the parent directory (backend) to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import sqlite3
import tempfile
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient

from config import Settings
from core.db_connector import create_engine_from_settings
from core.schema_catalog import SchemaCatalog
from main import create_app

SESSION_TOKEN = "secret-token"

SIMPLE_DDL = [
    "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, email TEXT);",
    "CREATE TABLE orders (id INTEGER PRIMARY KEY, user_id INTEGER, "
    "CONSTRAINT fk_orders_user FOREIGN KEY (user_id) REFERENCES users(id));",
    "CREATE TABLE tags (id INTEGER PRIMARY KEY, label TEXT);",
    "CREATE TABLE empty_things (id INTEGER PRIMARY KEY, note TEXT);",
    "INSERT INTO users VALUES (1, 'Ann', 'ann@x.com');",
    "INSERT INTO orders VALUES (10, 1);",
    "INSERT INTO orders VALUES (11, 1);",
    "INSERT INTO tags VALUES (1, 'misc');",
]

RICH_DDL = [
    "CREATE TABLE users (id INTEGER PRIMARY KEY, name VARCHAR(80), email TEXT, "
    "age INTEGER, created_at TIMESTAMP);",
    "CREATE TABLE orders (id INTEGER PRIMARY KEY, user_id INTEGER, referred_by_id INTEGER, note TEXT, "
    "CONSTRAINT fk_orders_user FOREIGN KEY (user_id) REFERENCES users(id), "
    "CONSTRAINT fk_orders_referrer FOREIGN KEY (referred_by_id) REFERENCES users(id));",
    "CREATE TABLE categories (id INTEGER PRIMARY KEY, parent_id INTEGER, name TEXT, "
    "CONSTRAINT fk_categories_parent FOREIGN KEY (parent_id) REFERENCES categories(id));",
    "CREATE TABLE accounts (region TEXT, number INTEGER, owner TEXT, PRIMARY KEY (region, number));",
    "CREATE TABLE transfers (id INTEGER PRIMARY KEY, region TEXT, number INTEGER, amount REAL, "
    "CONSTRAINT fk_transfers_account FOREIGN KEY (region, number) REFERENCES accounts(region, number));",
    "CREATE TABLE otps (id INTEGER PRIMARY KEY, code TEXT, created_at TIMESTAMP);",
    "CREATE TABLE tags (id INTEGER PRIMARY KEY, label TEXT);",
    "INSERT INTO users VALUES (1, 'Ann', 'ann@x.com', 42, '2024-01-05 10:00:00');",
    "INSERT INTO users VALUES (2, 'Bob', 'bob@x.com', 30, '2024-02-05 10:00:00');",
    "INSERT INTO orders VALUES (10, 1, NULL, 'first');",
    "INSERT INTO orders VALUES (11, 1, NULL, 'second');",
    "INSERT INTO orders VALUES (12, 1, 1, 'self-referred');",
    "INSERT INTO orders VALUES (13, 2, 1, 'referred by Ann');",
    "INSERT INTO categories VALUES (1, NULL, 'root');",
    "INSERT INTO categories VALUES (2, 1, 'child a');",
    "INSERT INTO categories VALUES (3, 1, 'child b');",
    "INSERT INTO accounts VALUES ('eu', 7, 'Ann');",
    "INSERT INTO transfers VALUES (1, 'eu', 7, 12.5);",
    "INSERT INTO tags VALUES (1, 'misc');",
]

BLOB_DDL = [
    "CREATE TABLE files (id INTEGER PRIMARY KEY, name TEXT, payload BLOB);",
    "CREATE TABLE file_notes (id INTEGER PRIMARY KEY, file_id INTEGER, thumb BLOB, "
    "CONSTRAINT fk_notes_file FOREIGN KEY (file_id) REFERENCES files(id));",
    "INSERT INTO files VALUES (1, 'logo.png', X'FFFE00');",
    "INSERT INTO file_notes VALUES (5, 1, X'01AB');",
]

# 25 names containing "an" (any case), 10 without, interleaved by id
MATCHING_NAMES = [
    "Ann", "Dana", "Ivan", "Jane", "Hank", "Frank", "Andy", "Brandon", "Logan", "Megan",
    "Nathan", "Susan", "Ryan", "Hannah", "Diana", "Sanjay", "Tanya", "Morgan", "Evan", "Joan",
    "Stan", "Lana", "Oran", "Bryan", "Grant",
]
OTHER_NAMES = ["Bob", "Kit", "Lou", "Moe", "Ted", "Zoe", "Eli", "Gus", "Rex", "Sid"]


def _search_rows() -> list[tuple]:
    names = list(MATCHING_NAMES)
    others = list(OTHER_NAMES)
    rows = []
    next_id = 1
    while names or others:
        for pool in (names, names, others):
            if pool:
                name = pool.pop(0)
                rows.append((next_id, name, "mail@x.com", 20 + next_id, "2024-03-01 09:00:00"))
                next_id += 1
    return rows


SEARCH_ROWS = _search_rows()


def _make_db(statements: list[str], rows: list[tuple] | None = None):
    fd, path = tempfile.mkstemp(suffix=".db")
    conn = sqlite3.connect(path)
    cur = conn.cursor()
    for stmt in statements:
        cur.execute(stmt)
    if rows:
        cur.executemany("INSERT INTO users VALUES (?, ?, ?, ?, ?);", rows)
    conn.commit()
    conn.close()
    return fd, path


def _settings_for(path: str, **overrides) -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{path}",
        SESSION_TOKENS=f"tester:{SESSION_TOKEN}",
        DB_POOL_SIZE=5,
        **overrides,
    )


@pytest.fixture
def simple_db():
    fd, path = _make_db(SIMPLE_DDL)
    try:
        yield path
    finally:
        os.close(fd)
        os.remove(path)


@pytest.fixture
def rich_db():
    now = datetime.now(timezone.utc)
    fresh = (now - timedelta(hours=1)).strftime("%Y-%m-%d %H:%M:%S")
    stale = (now - timedelta(days=5)).strftime("%Y-%m-%d %H:%M:%S")
    statements = RICH_DDL + [
        f"INSERT INTO otps VALUES (1, '123456', '{stale}');",
        f"INSERT INTO otps VALUES (2, '654321', '{fresh}');",
    ]
    fd, path = _make_db(statements)
    try:
        yield path
    finally:
        os.close(fd)
        os.remove(path)


@pytest.fixture
def search_db():
    fd, path = _make_db(
        ["CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, email VARCHAR(120), "
         "age INTEGER, created_at TIMESTAMP);"],
        rows=SEARCH_ROWS,
    )
    try:
        yield path
    finally:
        os.close(fd)
        os.remove(path)


def _catalog(path: str):
    engine = create_engine_from_settings(_settings_for(path))
    try:
        with engine.connect() as conn:
            yield SchemaCatalog(conn)
    finally:
        engine.dispose()


@pytest.fixture
def simple_catalog(simple_db):
    yield from _catalog(simple_db)


@pytest.fixture
def rich_catalog(rich_db):
    yield from _catalog(rich_db)


@pytest.fixture
def search_catalog(search_db):
    yield from _catalog(search_db)


@pytest.fixture
def rich_settings(rich_db):
    return _settings_for(rich_db)


@pytest.fixture
def client(simple_db):
    app = create_app(_settings_for(simple_db))
    with TestClient(app, cookies={"session": SESSION_TOKEN}) as test_client:
        yield test_client


@pytest.fixture
def rich_client(rich_db):
    app = create_app(_settings_for(rich_db))
    with TestClient(app, cookies={"session": SESSION_TOKEN}) as test_client:
        yield test_client


@pytest.fixture
def search_client(search_db):
    app = create_app(_settings_for(search_db))
    with TestClient(app, cookies={"session": SESSION_TOKEN}) as test_client:
        yield test_client


@pytest.fixture
def anon_client(simple_db):
    app = create_app(_settings_for(simple_db))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def blob_db():
    fd, path = _make_db(BLOB_DDL)
    try:
        yield path
    finally:
        os.close(fd)
        os.remove(path)


@pytest.fixture
def blob_catalog(blob_db):
    yield from _catalog(blob_db)


@pytest.fixture
def blob_client(blob_db):
    app = create_app(_settings_for(blob_db))
    with TestClient(app, cookies={"session": SESSION_TOKEN}) as test_client:
        yield test_client
