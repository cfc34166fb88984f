"""
Todo model - represents the 'todos' table in the database.

Each todo belongs to one user (the owner).
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, String, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from todo_api.core.db import Base

if TYPE_CHECKING:
    from todo_api.models.user import User


class Todo(Base):
    """
    Todo item.

    Attributes:
        id: Primary key
        title: What needs doing
        is_complete: Whether it is done
        owner_id: Foreign key to the user who owns this todo
        owner: Relationship to access the User object
        created_at: When the todo was created
    """

    __tablename__ = "todos"

    id: Mapped[int] = mapped_column(primary_key=True)

    title: Mapped[str] = mapped_column(
        String(256),
        nullable=False,
    )

    is_complete: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    # OWNER (FOREIGN KEY)
    # -------------------
    # Indexed because every listing filters on it.

    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=False,
        server_default=func.now(),
    )

    owner: Mapped["User"] = relationship(
        "User",
        back_populates="todos",
    )

    def __repr__(self) -> str:
        return f"<Todo id={self.id} title='{self.title}'>"
