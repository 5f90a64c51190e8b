"""
bracket_engine/orm/user.py
Pool member identity

Authentication lives outside this service; only the display fields the
standings table needs are stored here.
"""
from sqlalchemy import Column, String

from bracket_engine.orm.base import BaseModel


class User(BaseModel):
    """Pool member shown on the leaderboard."""
    __tablename__ = "users"

    display_name = Column(String(200), nullable=False)
    avatar_url = Column(String(500), nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, display_name={self.display_name})>"
