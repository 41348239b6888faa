from pydantic import ValidationError

from app.core.exceptions import PersistenceError
from app.database import TaskStore
from app.models import TaskCreate, TaskResponse


class TaskService:
    @staticmethod
    async def create_task(
        task_data: TaskCreate | None, store: TaskStore
    ) -> TaskResponse:
        # an empty body creates a task from the defaults
        task_data = task_data or TaskCreate()
        document = await store.create(task_data.to_document())
        return TaskResponse.from_document(document)

    @staticmethod
    async def get_all_tasks(store: TaskStore) -> list[TaskResponse]:
        documents = await store.find_all()
        try:
            return [TaskResponse.from_document(document) for document in documents]
        except ValidationError as e:
            raise PersistenceError(f"Stored task does not match schema: {e}") from e
