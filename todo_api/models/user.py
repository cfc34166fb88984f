"""
User model - represents the 'users' table in the database.

A user owns todos. Users created through POST /users have a password;
users created directly in the database (as tests do) have none and can
only authenticate with a token minted for their id.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from todo_api.core.db import Base

# Import Todo only for type checking (avoids circular import)
if TYPE_CHECKING:
    from todo_api.models.todo import Todo


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    User account model.

    Attributes:
        id: Primary key, a string (the "id" claim of bearer tokens)
        username: Unique login name
        password_hash: Bcrypt hash of the password, None for password-less users
        created_at: When the account was created
    """

    __tablename__ = "users"

    # ==========================================================================
    # COLUMNS
    # ==========================================================================

    # PRIMARY KEY
    # -----------
    # A string rather than an integer: bearer tokens carry it in the "id"
    # claim, and callers may choose their own ids.

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=_new_user_id,
    )

    username: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    password_hash: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    # func.now() renders as CURRENT_TIMESTAMP on SQLite and now() elsewhere
    created_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=False,
        server_default=func.now(),
    )

    # ==========================================================================
    # RELATIONSHIPS
    # ==========================================================================

    todos: Mapped[list["Todo"]] = relationship(
        "Todo",
        back_populates="owner",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User id={self.id!r} username='{self.username}'>"
