"""Adapters implementing the core ports (SQLite store, markup libraries)."""
