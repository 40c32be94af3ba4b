"""Durable key-value backstop for dashboard settings."""

from finz.state.store import SqliteStateStore, StateStore, create_state_store

__all__ = ["SqliteStateStore", "StateStore", "create_state_store"]
