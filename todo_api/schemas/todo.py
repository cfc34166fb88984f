"""
Pydantic schemas for todo endpoints.
"""

from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================


class TodoCreateRequest(BaseModel):
    """
    Request body for POST /todos

    Example:
        {
            "title": "Buy milk"
        }
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=256,
        description="What needs doing",
        examples=["Buy milk"],
    )

    is_complete: bool = Field(
        default=False,
        description="Whether the todo is already done",
    )


class TodoUpdateRequest(BaseModel):
    """
    Request body for PUT /todos/{id}

    Replaces the title and completion state of the todo.
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=256,
        description="New title",
    )

    is_complete: bool = Field(
        ...,
        description="New completion state",
    )


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================


class TodoResponse(BaseModel):
    """
    Todo returned from the API.

    Example:
        {
            "id": 1,
            "title": "Buy milk",
            "is_complete": false
        }
    """

    id: int
    title: str
    is_complete: bool

    model_config = {"from_attributes": True}
