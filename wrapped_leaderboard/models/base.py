"""Declarative base shared by every ORM model of the leaderboard service."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
