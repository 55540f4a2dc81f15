"""
Database module - relational store (PostgreSQL/SQLite) and MongoDB connections.
"""
from placement_portal.db.postgres import (
    execute_raw_sql, fetch_one, get_db_session, init_schema, test_postgres_connection
)
from placement_portal.db.mongodb import get_mongo_db, test_mongo_connection

__all__ = [
    "execute_raw_sql",
    "fetch_one",
    "get_db_session",
    "init_schema",
    "test_postgres_connection",
    "get_mongo_db",
    "test_mongo_connection"
]
