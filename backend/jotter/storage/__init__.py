"""
Jotter Backend: Storage Layer
==============================

What:  The key-value contract the repositories are written against, and its
       SQL-table implementation.

Inventory:
    - KeyValueStore (abstract): get / set / delete / get_by_prefix
    - SqlKeyValueStore: async SQLAlchemy implementation over the kv_store table

The storage engine itself (PostgreSQL, SQLite) is external; only the adapter
lives here.
"""
