"""Database package: engine, session factory, declarative base."""

from leakguard.db.session import Base, SessionLocal, engine, get_db

__all__ = ["Base", "SessionLocal", "engine", "get_db"]
