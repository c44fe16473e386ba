"""Todo list with local fallback."""
from typing import Callable, List, Sequence

from zxsgit.constants import TODOS_KEY, ChangeEvent
from zxsgit.models import Todo
from zxsgit.schemas import Result
from zxsgit.services.base import EntityService
from zxsgit.utils.exceptions import ForbiddenError, NotFoundError
from zxsgit.utils.logger import logger
from zxsgit.utils.validation import require_text


class TodoService(EntityService):
    """
    Todos shared by every user.

    The REST service only lists and bulk-replaces todos, so each write reads
    the whole list, changes it and sends it back.
    """

    event = ChangeEvent.TODOS

    def _load_todos(self) -> List[Todo]:
        return self._load(TODOS_KEY, Todo)

    async def _current(self) -> List[Todo]:
        result = await self.remote.list_todos()
        if self._check(result):
            return result.value
        return self._load_todos()

    async def _commit(self, todos: List[Todo], message: str) -> str:
        """Send the list to the remote store and cache it; returns the result message."""
        result = await self.remote.replace_todos(todos)
        if self._check(result):
            return self._write_through(lambda: self._save(TODOS_KEY, todos), message)
        logger.warning("Saving todos to local storage only")
        self._save(TODOS_KEY, todos)
        return message

    async def _mutate(self, operation: str, change: Callable[[List[Todo]], Todo], message: str) -> Result[Todo]:
        async def action() -> Result[Todo]:
            self._require_session()
            async with self.lock:
                todos = await self._current()
                todo = change(todos)
                outcome = await self._commit(todos, message)
            self._notify()
            return Result.success(todo, outcome)

        return await self._run(operation, action)

    def _find_editable(self, todos: List[Todo], todo_id: str) -> int:
        index = next((i for i, t in enumerate(todos) if t.id == todo_id), None)
        if index is None:
            raise NotFoundError("Todo not found")
        if not self.sessions.current.can_edit(todos[index].userEmail):
            raise ForbiddenError("Only the creator or an admin can change this todo")
        return index

    async def list_todos(self) -> Result[List[Todo]]:
        async def action() -> Result[List[Todo]]:
            result = await self.remote.list_todos()
            if not self._check(result):
                logger.warning("Unable to fetch todos, falling back to local storage")
                return Result.success(self._load_todos())
            message = self._write_through(lambda: self._save(TODOS_KEY, result.value), "Todos loaded")
            return Result.success(result.value, message)

        return await self._run("list_todos", action)

    async def add_todo(self, text: str) -> Result[Todo]:
        """Append a todo stamped with the signed-in user."""
        def change(todos: List[Todo]) -> Todo:
            session = self.sessions.current
            todo = Todo(
                text=require_text(text, "Todo text is required"),
                userEmail=session.email,
                userName=session.name,
            )
            todos.append(todo)
            return todo

        return await self._mutate("add_todo", change, "Todo added")

    async def toggle_todo(self, todo_id: str) -> Result[Todo]:
        def change(todos: List[Todo]) -> Todo:
            index = self._find_editable(todos, todo_id)
            todos[index] = todos[index].model_copy(update={"done": not todos[index].done})
            return todos[index]

        return await self._mutate("toggle_todo", change, "Todo updated")

    async def remove_todo(self, todo_id: str) -> Result[Todo]:
        def change(todos: List[Todo]) -> Todo:
            index = self._find_editable(todos, todo_id)
            return todos.pop(index)

        return await self._mutate("remove_todo", change, "Todo removed")

    async def save_todos(self, todos: Sequence[Todo]) -> Result[List[Todo]]:
        """Replace the whole list."""
        async def action() -> Result[List[Todo]]:
            self._require_session()
            records = list(todos)
            async with self.lock:
                message = await self._commit(records, "Todos saved")
            self._notify()
            return Result.success(records, message)

        return await self._run("save_todos", action)
