from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class Todo(BaseModel):
    """A one-off task, tracked alongside habits."""
    id: str = Field(..., description="Todo identifier")
    uid: str = Field(..., description="User ID who owns this todo")
    title: str = Field(..., description="Todo title")
    description: Optional[str] = Field(None, description="Todo description")
    completed: bool = Field(False, description="Whether the todo is done")
    createdAt: Optional[datetime] = Field(None, description="When the todo was created")
    updatedAt: Optional[datetime] = Field(None, description="When the todo was last updated")


class SaveTodoRequest(BaseModel):
    """Request model for creating or editing a todo."""
    title: str = Field(..., min_length=1, max_length=200, description="Todo title")
    description: Optional[str] = Field(None, max_length=2000, description="Todo description")


class TodoResponse(BaseModel):
    message: str = Field(..., description="Response message")
    todo: Todo = Field(..., description="The todo")


class TodosListResponse(BaseModel):
    message: str = Field(..., description="Response message")
    todos: List[Todo] = Field(..., description="Todos sorted by createdAt ASC")
