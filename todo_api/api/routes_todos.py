"""
Todo routes.

All routes require authentication (JWT token).
Users see and manage their own todos; admins may read, update and
delete any todo by id.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.api.deps import CurrentUser, get_current_user
from todo_api.core.db import get_db
from todo_api.models import Todo
from todo_api.schemas.todo import TodoCreateRequest, TodoResponse, TodoUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/todos",
    tags=["Todos"],
)


async def _get_visible_todo(
    todo_id: int,
    current_user: CurrentUser,
    db: AsyncSession,
) -> Todo:
    """
    Load a todo the caller is allowed to touch.

    Raises:
        404 Not Found: If the todo does not exist or belongs to someone else
            (and the caller is not an admin)
    """
    query = select(Todo).where(Todo.id == todo_id)
    if not current_user.is_admin:
        query = query.where(Todo.owner_id == current_user.id)

    result = await db.execute(query)
    todo = result.scalar_one_or_none()

    if todo is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Todo not found",
        )

    return todo


# =============================================================================
# LIST TODOS
# =============================================================================


@router.get(
    "",
    response_model=list[TodoResponse],
    summary="List the caller's todos",
)
async def list_todos(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[Todo]:
    """List all todos owned by the authenticated user."""
    query = (
        select(Todo)
        .where(Todo.owner_id == current_user.id)
        .order_by(Todo.id)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


# =============================================================================
# GET TODO
# =============================================================================


@router.get(
    "/{todo_id}",
    response_model=TodoResponse,
    summary="Get todo by ID",
)
async def get_todo(
    todo_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Todo:
    return await _get_visible_todo(todo_id, current_user, db)


# =============================================================================
# CREATE TODO
# =============================================================================


@router.post(
    "",
    response_model=TodoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new todo",
)
async def create_todo(
    request: TodoCreateRequest,
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Todo:
    """
    Create a new todo for the authenticated user.

    The Location header of the response points at the new todo.
    """
    todo = Todo(
        title=request.title,
        is_complete=request.is_complete,
        owner_id=current_user.id,
    )

    db.add(todo)
    await db.commit()
    await db.refresh(todo)

    logger.info("Created todo %s for user %s", todo.id, current_user.id)
    response.headers["Location"] = f"/todos/{todo.id}"
    return todo


# =============================================================================
# UPDATE TODO
# =============================================================================


@router.put(
    "/{todo_id}",
    response_model=TodoResponse,
    summary="Update todo",
)
async def update_todo(
    todo_id: int,
    request: TodoUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Todo:
    """Replace a todo's title and completion state."""
    todo = await _get_visible_todo(todo_id, current_user, db)

    todo.title = request.title
    todo.is_complete = request.is_complete

    await db.commit()
    await db.refresh(todo)

    return todo


# =============================================================================
# DELETE TODO
# =============================================================================


@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete todo",
)
async def delete_todo(
    todo_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    todo = await _get_visible_todo(todo_id, current_user, db)

    await db.delete(todo)
    await db.commit()

    logger.info("User %s deleted todo %s", current_user.id, todo_id)
