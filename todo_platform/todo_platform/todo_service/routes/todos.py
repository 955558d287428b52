"""
Todo routes. None of these require authentication.
"""
from fastapi import APIRouter, Depends

from ..dependencies import get_todo_store
from ..schemas import TodoCreate, TodoEnvelope, TodoListResponse, TodoResponse, TodoUpdate
from ..todo_store import TodoStore

router = APIRouter(prefix="/todos", tags=["todos"])


@router.post("", response_model=TodoResponse)
def create_todo(payload: TodoCreate, store: TodoStore = Depends(get_todo_store)):
    todo = store.create(payload.text)
    return TodoResponse.model_validate(todo)


@router.get("", response_model=TodoListResponse)
def list_todos(store: TodoStore = Depends(get_todo_store)):
    return TodoListResponse(todos=[TodoResponse.model_validate(t) for t in store.list()])


@router.get("/{todo_id}", response_model=TodoEnvelope)
def get_todo(todo_id: str, store: TodoStore = Depends(get_todo_store)):
    return TodoEnvelope(todo=TodoResponse.model_validate(store.get(todo_id)))


@router.delete("/{todo_id}", response_model=TodoEnvelope)
def delete_todo(todo_id: str, store: TodoStore = Depends(get_todo_store)):
    return TodoEnvelope(todo=TodoResponse.model_validate(store.delete(todo_id)))


@router.patch("/{todo_id}", response_model=TodoEnvelope)
def update_todo(todo_id: str, payload: TodoUpdate, store: TodoStore = Depends(get_todo_store)):
    return TodoEnvelope(todo=TodoResponse.model_validate(store.update(todo_id, payload)))
