"""
Base repository class with typed CRUD operations over one record store table.
Provides generic operations that can be extended by specific repositories.
"""

from typing import Any, Dict, Generic, List, Mapping, Optional, Tuple, Type, TypeVar
from app.models.common import RecordModel
from app.repositories.record_store import RecordStore, Predicate, ScanResult
from app.utils.time import utcnow_iso
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=RecordModel)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.
    Documents are validated into `model` on the way out.
    """

    def __init__(self, model: Type[ModelType], store: RecordStore, table: str):
        """
        Initialize repository with model class, store and table name.

        Args:
            model: Pydantic record model
            store: Record store collaborator
            table: Logical table name
        """
        self.model = model
        self.store = store
        self.table = table

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record."""
        await self.store.put(self.table, obj.to_item())
        logger.debug(f"Created {self.model.__name__} with id: {obj.id}")
        return obj

    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """
        Get a record by its ID.

        Returns:
            Model instance if found, None otherwise
        """
        item = await self.store.get(self.table, id)
        if item is None:
            logger.debug(f"{self.model.__name__} with id {id} not found")
            return None
        return self.model.model_validate(item)

    async def update(
        self,
        id: str,
        fields: Mapping[str, Any],
        condition: Optional[Mapping[str, Any]] = None
    ) -> ModelType:
        """
        Apply a partial update; `updatedAt` is always refreshed.

        Args:
            id: Record id
            fields: camelCase attribute -> new value (None removes the attribute)
            condition: Attribute values required for the write to happen
        """
        changes: Dict[str, Any] = dict(fields)
        changes["updatedAt"] = utcnow_iso()
        item = await self.store.update(self.table, id, changes, condition=condition)
        return self.model.model_validate(item)

    async def delete(self, id: str) -> bool:
        return await self.store.delete(self.table, id)

    async def scan(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        predicate: Optional[Predicate] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[ModelType], ScanResult]:
        """Scan the table and validate every returned document."""
        result = await self.store.scan(
            self.table,
            filters=filters,
            predicate=predicate,
            limit=limit,
            cursor=cursor
        )
        return [self.model.model_validate(item) for item in result.items], result

    async def find_all(self, **filters: Any) -> List[ModelType]:
        """Every record whose attributes equal the given camelCase filters."""
        records, _ = await self.scan(filters=filters)
        return records

    async def exists(self, **filters: Any) -> bool:
        records, result = await self.scan(filters=filters, limit=1)
        return result.count > 0
