"""Todo API endpoints."""
from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError as SchemaError

from zxsgit.database import JsonDocumentStore, get_store
from zxsgit.models import Todo
from zxsgit.utils.exceptions import validation_error

router = APIRouter(prefix="/api/todos", tags=["todos"])


@router.get("")
async def list_todos(store: JsonDocumentStore = Depends(get_store)) -> dict:
    return {"ok": True, "todos": [t.model_dump() for t in store.load_data().todos]}


@router.post("")
async def replace_todos(
    body: Any = Body(None),
    store: JsonDocumentStore = Depends(get_store),
) -> dict:
    """Replace the whole todo list with {todos: [...]}."""
    raw = body.get("todos") if isinstance(body, dict) else None
    if not isinstance(raw, list):
        raise validation_error("Invalid todos format")
    try:
        todos = [Todo(**t) for t in raw]
    except (SchemaError, TypeError):
        raise validation_error("Invalid todos format")

    with store.data() as document:
        document.todos = todos
    return {"ok": True, "message": "Todos saved"}
