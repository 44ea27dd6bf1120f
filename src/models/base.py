"""Declarative base shared by all database models."""

import secrets

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def generate_id() -> str:
    """Return a new opaque 24-hex-character identifier."""
    return secrets.token_hex(12)
