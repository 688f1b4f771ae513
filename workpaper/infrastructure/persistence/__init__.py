"""Persistence: database engine/session, ORM models, repositories and migrations."""
