#!/usr/bin/env python3
"""
Seed a local SQLite database with demo data for the schema explorer.
Usage (from the repository root):
    python scripts/seed_demo_db.py
Creates: scripts/demo.db — point DATABASE_URL=sqlite:///scripts/demo.db at it.
"""
import random
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path

DB_PATH = Path(__file__).parent / "demo.db"

DDL = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        name        TEXT    NOT NULL,
        email       TEXT    UNIQUE NOT NULL,
        country     TEXT,
        created_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    """
    CREATE TABLE IF NOT EXISTS products (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        sku         TEXT    UNIQUE NOT NULL,
        name        TEXT    NOT NULL,
        price       REAL    NOT NULL
    )""",
    """
    CREATE TABLE IF NOT EXISTS orders (
        id              INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id         INTEGER,
        referred_by_id  INTEGER,
        order_date      TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        status          TEXT,
        CONSTRAINT fk_orders_user FOREIGN KEY (user_id) REFERENCES users(id),
        CONSTRAINT fk_orders_referrer FOREIGN KEY (referred_by_id) REFERENCES users(id)
    )""",
    """
    CREATE TABLE IF NOT EXISTS order_items (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        order_id    INTEGER REFERENCES orders(id),
        product_id  INTEGER REFERENCES products(id),
        quantity    INTEGER NOT NULL
    )""",
    """
    CREATE TABLE IF NOT EXISTS otps (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id     INTEGER REFERENCES users(id),
        code        TEXT NOT NULL,
        created_at  TIMESTAMP NOT NULL
    )""",
]

STATUSES = ['PENDING', 'SHIPPED', 'CANCELLED', 'DELIVERED']
FIRST_NAMES = ['Ann', 'Dana', 'Ivan', 'Noor', 'Omar', 'Priya', 'Sven', 'Yuki']
COUNTRIES = ["US", "UK", "DE", "IN", "JP"]


def _ts(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def seed():
    conn = sqlite3.connect(DB_PATH)
    cur  = conn.cursor()

    for stmt in DDL:
        cur.execute(stmt)

    # users (60)
    for i in range(1, 61):
        cur.execute("INSERT OR IGNORE INTO users(name, email, country, created_at) VALUES (?,?,?,?)",
                    (f"{random.choice(FIRST_NAMES)} {i}", f"user{i}@example.com",
                     random.choice(COUNTRIES),
                     _ts(datetime.now() - timedelta(days=random.randint(10, 730)))))

    # products (20)
    for i in range(1, 21):
        cur.execute("INSERT OR IGNORE INTO products(sku, name, price) VALUES (?,?,?)",
                    (f"SKU-{i:04d}", f"Product {i}", round(random.uniform(5, 500), 2)))

    # orders + order_items (200 orders)
    for _ in range(200):
        referrer = random.randint(1, 60) if random.random() < 0.3 else None
        cur.execute("INSERT INTO orders(user_id, referred_by_id, order_date, status) VALUES (?,?,?,?)",
                    (random.randint(1, 60), referrer,
                     _ts(datetime.now() - timedelta(days=random.randint(0, 365))),
                     random.choice(STATUSES)))
        order_id = cur.lastrowid
        for _ in range(random.randint(1, 4)):
            cur.execute("INSERT INTO order_items(order_id, product_id, quantity) VALUES (?,?,?)",
                        (order_id, random.randint(1, 20), random.randint(1, 5)))

    # otps (30), roughly half past the 3-day retention window
    for _ in range(30):
        cur.execute("INSERT INTO otps(user_id, code, created_at) VALUES (?,?,?)",
                    (random.randint(1, 60), f"{random.randint(0, 999999):06d}",
                     _ts(datetime.now(timezone.utc) - timedelta(hours=random.randint(1, 144)))))

    conn.commit()
    conn.close()
    print(f"Demo database seeded: {DB_PATH}")
    print("   Tables: users, products, orders, order_items, otps")


if __name__ == "__main__":
    seed()
