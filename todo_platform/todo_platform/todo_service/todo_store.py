"""
Todo store: CRUD over todo records.

Todos are not tied to users; any caller can act on any todo.
"""
import logging
import time
from typing import List

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import NotFound, StoreError, ValidationError
from .identifiers import parse_id
from .models import Todo
from .schemas import TodoUpdate

logger = logging.getLogger(__name__)


def _clean_text(text) -> str:
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("text is required and must not be empty")
    return text.strip()


def now_millis() -> int:
    return int(time.time() * 1000)


class TodoStore:
    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, exc: Exception):
        self.db.rollback()
        logger.error("Todo store failure during %s: %s", action, exc)
        raise StoreError(f"Failed to {action}") from exc

    def create(self, text) -> Todo:
        todo = Todo(text=_clean_text(text), completed=False, completed_at=None)
        self.db.add(todo)
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("create todo", exc)
        self.db.refresh(todo)
        return todo

    def list(self) -> List[Todo]:
        try:
            return list(self.db.execute(select(Todo).order_by(Todo.created_at, Todo.id)).scalars())
        except SQLAlchemyError as exc:
            self._fail("list todos", exc)

    def get(self, raw_id) -> Todo:
        todo_id = parse_id(raw_id)
        try:
            todo = self.db.get(Todo, todo_id)
        except SQLAlchemyError as exc:
            self._fail("load todo", exc)
        if todo is None:
            raise NotFound(f"Todo {todo_id} not found")
        return todo

    def delete(self, raw_id) -> Todo:
        todo = self.get(raw_id)
        self.db.delete(todo)
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("delete todo", exc)
        return todo

    def update(self, raw_id, changes: TodoUpdate) -> Todo:
        """
        Apply a partial update in a single UPDATE statement.

        ``completed=True`` stamps ``completed_at`` with the current time,
        ``completed=False`` clears it. Leaving ``completed`` out keeps the
        current completion state.
        """
        todo_id = parse_id(raw_id)

        values = {}
        if changes.text is not None:
            values["text"] = _clean_text(changes.text)
        if changes.completed is True:
            values["completed"] = True
            values["completed_at"] = now_millis()
        elif changes.completed is False:
            values["completed"] = False
            values["completed_at"] = None

        if not values:
            return self.get(todo_id)

        try:
            result = self.db.execute(
                update(Todo).where(Todo.id == todo_id).values(**values)
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("update todo", exc)
        if result.rowcount == 0:
            raise NotFound(f"Todo {todo_id} not found")
        return self.get(todo_id)
