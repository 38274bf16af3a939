"""
Async SQLAlchemy persistence layer.

PostgreSQL (asyncpg) in production; SQLite (aiosqlite) for local runs and tests.
"""
