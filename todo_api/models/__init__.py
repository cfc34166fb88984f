"""
Database models package.

Import all models here so SQLAlchemy can resolve relationships.
Other modules can import from here: `from todo_api.models import User, Todo`
"""

from todo_api.models.user import User
from todo_api.models.todo import Todo

# Export all models
__all__ = [
    "User",
    "Todo",
]
