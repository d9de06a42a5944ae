"""
Todos API - CRUD de la lista de pendientes.
"""

import logging

from fastapi import APIRouter, Header
from pydantic import BaseModel

from app.domain.services import get_todo_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/todos", tags=["todos"])


class TodoCreate(BaseModel):
    title: str
    description: str = ""


class TodoUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    completed: bool | None = None


@router.post("", status_code=201)
async def create_todo(data: TodoCreate, x_user_id: str = Header(...)):
    todo = await get_todo_service().create_todo(x_user_id, data.title, data.description)
    return todo.to_dict()


@router.get("")
async def list_todos(
    completed: bool | None = None,
    search: str | None = None,
    x_user_id: str = Header(...),
):
    """Lista pendientes; filtra por estado o por término en el título."""
    service = get_todo_service()

    if search:
        todos = await service.search_todos(x_user_id, search)
    elif completed is True:
        todos = await service.get_completed_todos(x_user_id)
    elif completed is False:
        todos = await service.get_pending_todos(x_user_id)
    else:
        todos = await service.get_todos(x_user_id)

    return {"todos": [t.to_dict() for t in todos]}


@router.patch("/{todo_id}")
async def update_todo(todo_id: str, data: TodoUpdate, x_user_id: str = Header(...)):
    todo = await get_todo_service().update_todo(
        todo_id, data.model_dump(exclude_unset=True), user_id=x_user_id
    )
    return todo.to_dict()


@router.post("/{todo_id}/toggle")
async def toggle_todo(todo_id: str, x_user_id: str = Header(...)):
    todo = await get_todo_service().toggle_todo(todo_id, user_id=x_user_id)
    return todo.to_dict()


@router.delete("/{todo_id}", status_code=204)
async def delete_todo(todo_id: str, x_user_id: str = Header(...)):
    await get_todo_service().delete_todo(todo_id, user_id=x_user_id)
