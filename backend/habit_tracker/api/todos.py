import logging
from typing import Dict, Any, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from datetime import datetime, timezone
import uuid

from habit_tracker.auth.dependencies import get_current_user
from habit_tracker.models.habit import MessageResponse
from habit_tracker.models.todo import SaveTodoRequest, Todo, TodoResponse, TodosListResponse
from habit_tracker.services.firestore_utils import (
    TODOS_COLLECTION,
    get_firestore_db,
    snapshot_to_dict,
    sort_by_created_at,
    stream_user_documents,
    to_utc_datetime,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/todo",
    tags=["todos"],
)


def todo_from_document(todo_data: Dict[str, Any]) -> Todo:
    return Todo(
        id=todo_data["id"],
        uid=todo_data["uid"],
        title=todo_data.get("title", ""),
        description=todo_data.get("description"),
        completed=bool(todo_data.get("completed", False)),
        createdAt=to_utc_datetime(todo_data.get("createdAt")),
        updatedAt=to_utc_datetime(todo_data.get("updatedAt")),
    )


def get_owned_todo(db, uid: str, todo_id: str) -> Optional[Dict[str, Any]]:
    doc = db.collection(TODOS_COLLECTION).document(todo_id).get()
    if not doc.exists:
        return None
    todo = snapshot_to_dict(doc)
    if todo.get("uid") != uid:
        return None
    return todo


def todo_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Todo not found"
    )


@router.get(
    "",
    response_model=TodosListResponse,
    summary="List todos",
    description="Returns all todos of the current user, oldest first.",
)
def get_todos(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> TodosListResponse:
    try:
        db = get_firestore_db()
        todos = sort_by_created_at(stream_user_documents(db, TODOS_COLLECTION, current_user["uid"]))
        return TodosListResponse(
            message="Todos fetched successfully",
            todos=[todo_from_document(todo) for todo in todos],
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TODOS] Error listing todos: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )


@router.post(
    "",
    response_model=TodoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a todo",
)
def create_todo(
    request: SaveTodoRequest,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> TodoResponse:
    try:
        uid = current_user["uid"]
        db = get_firestore_db()

        todo_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        todo_data = {
            "uid": uid,
            "title": request.title.strip(),
            "description": request.description,
            "completed": False,
            "createdAt": now,
            "updatedAt": now,
        }
        db.collection(TODOS_COLLECTION).document(todo_id).set(todo_data)

        logger.info(f"[TODOS] Created todo {todo_id} for user {uid}")
        return TodoResponse(
            message="Todo created successfully",
            todo=todo_from_document({"id": todo_id, **todo_data}),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TODOS] Error creating todo: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error"
        )


@router.put(
    "/done/{todo_id}",
    response_model=TodoResponse,
    summary="Mark a todo as done",
    responses={
        404: {
            "description": "Todo not found",
        },
    },
)
def mark_todo_done(
    todo_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> TodoResponse:
    try:
        db = get_firestore_db()
        todo = get_owned_todo(db, current_user["uid"], todo_id)
        if todo is None:
            raise todo_not_found()

        updates = {"completed": True, "updatedAt": datetime.now(timezone.utc)}
        db.collection(TODOS_COLLECTION).document(todo_id).update(updates)
        todo.update(updates)

        return TodoResponse(message="Successfully completed", todo=todo_from_document(todo))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TODOS] Error completing todo {todo_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error"
        )


@router.get(
    "/{todo_id}",
    response_model=TodoResponse,
    summary="Get a todo",
    responses={
        404: {
            "description": "Todo not found",
        },
    },
)
def get_todo_by_id(
    todo_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> TodoResponse:
    try:
        db = get_firestore_db()
        todo = get_owned_todo(db, current_user["uid"], todo_id)
        if todo is None:
            raise todo_not_found()
        return TodoResponse(message="Todo fetched successfully", todo=todo_from_document(todo))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TODOS] Error fetching todo {todo_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )


@router.put(
    "/{todo_id}",
    response_model=TodoResponse,
    summary="Update a todo",
    responses={
        404: {
            "description": "Todo not found",
        },
    },
)
def update_todo(
    todo_id: str,
    request: SaveTodoRequest,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> TodoResponse:
    try:
        db = get_firestore_db()
        todo = get_owned_todo(db, current_user["uid"], todo_id)
        if todo is None:
            raise todo_not_found()

        updates = {
            "title": request.title.strip(),
            "description": request.description,
            "updatedAt": datetime.now(timezone.utc),
        }
        db.collection(TODOS_COLLECTION).document(todo_id).update(updates)
        todo.update(updates)

        return TodoResponse(message="Todo updated successfully", todo=todo_from_document(todo))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TODOS] Error updating todo {todo_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error"
        )


@router.delete(
    "/{todo_id}",
    response_model=MessageResponse,
    summary="Delete a todo",
    responses={
        404: {
            "description": "Todo not found",
        },
    },
)
def delete_todo(
    todo_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> MessageResponse:
    try:
        db = get_firestore_db()
        if get_owned_todo(db, current_user["uid"], todo_id) is None:
            raise todo_not_found()
        db.collection(TODOS_COLLECTION).document(todo_id).delete()
        return MessageResponse(message="Todo deleted successfully")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TODOS] Error deleting todo {todo_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error"
        )
