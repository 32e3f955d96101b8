"""
db.py
SQLite helpers + initialization (creates DB/tables).
Every data row is scoped by owner_id; dependents cascade on unit/tenant delete.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone

import config

DB_FILE = config.DB_FILE


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@contextmanager
def get_conn():
    conn = sqlite3.connect(DB_FILE, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def execute(sql: str, params: tuple = ()) -> int:
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.lastrowid


def fetch_one(sql: str, params: tuple = ()):
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.fetchone()


def fetch_all(sql: str, params: tuple = ()) -> list[sqlite3.Row]:
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.fetchall()


_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS owners (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS settings (
        owner_id TEXT PRIMARY KEY REFERENCES owners(id) ON DELETE CASCADE,
        base_currency TEXT NOT NULL CHECK(base_currency IN ('JOD','ILS')),
        jod_to_ils_rate REAL NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS units (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL REFERENCES owners(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        kind TEXT NOT NULL CHECK(kind IN ('apartment','shop')),
        rent_amount REAL NOT NULL,
        rent_currency TEXT NOT NULL CHECK(rent_currency IN ('JOD','ILS'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tenants (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL REFERENCES owners(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        phone TEXT,
        unit_id TEXT NOT NULL REFERENCES units(id) ON DELETE CASCADE,
        start_date TEXT NOT NULL,
        active INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS utilities (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL REFERENCES owners(id) ON DELETE CASCADE,
        unit_id TEXT NOT NULL REFERENCES units(id) ON DELETE CASCADE,
        period TEXT NOT NULL,
        type TEXT NOT NULL CHECK(type IN ('water','electricity')),
        amount REAL NOT NULL,
        currency TEXT NOT NULL CHECK(currency IN ('JOD','ILS'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS invoices (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL REFERENCES owners(id) ON DELETE CASCADE,
        unit_id TEXT NOT NULL REFERENCES units(id) ON DELETE CASCADE,
        tenant_id TEXT NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
        period TEXT NOT NULL,
        scope TEXT NOT NULL CHECK(scope IN ('monthly','yearly')),
        rent_base REAL NOT NULL,
        utilities_base REAL NOT NULL,
        total_base REAL NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS payments (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL REFERENCES owners(id) ON DELETE CASCADE,
        tenant_id TEXT NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
        unit_id TEXT NOT NULL REFERENCES units(id) ON DELETE CASCADE,
        date TEXT NOT NULL,
        amount REAL NOT NULL,
        currency TEXT NOT NULL CHECK(currency IN ('JOD','ILS')),
        period TEXT,
        note TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS backups (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        owner_id TEXT NOT NULL REFERENCES owners(id) ON DELETE CASCADE,
        payload TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
)


def init_db() -> None:
    """Create all tables (idempotent)."""
    with get_conn() as conn:
        for ddl in _SCHEMA:
            conn.execute(ddl)


def has_owner() -> bool:
    return fetch_one("SELECT id FROM owners LIMIT 1") is not None
