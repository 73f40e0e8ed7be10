"""Persistence layer: declarative Base, engine and session helpers."""

from .session import Base, get_engine, get_session, transaction

__all__ = ["Base", "get_engine", "get_session", "transaction"]
