from pydantic import BaseModel, ConfigDict, StrictBool, StrictStr

from typing import List, Optional


# Todos
class TodoCreate(BaseModel):
    text: Optional[str] = None


class TodoUpdate(BaseModel):
    """
    Fields a client may change on a todo. Anything else in the payload is
    dropped here and never reaches the store. ``None`` means "not supplied".
    """
    model_config = ConfigDict(extra="ignore")

    text: Optional[StrictStr] = None
    completed: Optional[StrictBool] = None


class TodoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    text: str
    completed: bool
    completed_at: Optional[int] = None


class TodoEnvelope(BaseModel):
    todo: TodoResponse


class TodoListResponse(BaseModel):
    todos: List[TodoResponse]


# Users
class UserCreate(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
