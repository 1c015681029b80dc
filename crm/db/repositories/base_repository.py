from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

from crm.db.datastore import JsonDocumentStore

E = TypeVar("E")

Check = Callable[[Any], Any]
Mutator = Callable[[Any], None]


class BaseRepository(Generic[E]):
    """Доступ к одной коллекции документа-хранилища.

    get_all/save_all работают с сырыми записями, остальные методы - с
    доменными сущностями. Каждое изменение выполняется в одной транзакции
    хранилища; check вызывается внутри транзакции и может прервать ее
    исключением, тогда документ не записывается.
    """

    collection: str = ""

    def __init__(self, db: JsonDocumentStore):
        self.db = db

    async def get_all(self) -> List[dict]:
        """Все записи коллекции"""
        return await self.db.get_collection(self.collection)

    async def save_all(self, records: Iterable[dict]) -> None:
        """Замена всей коллекции"""
        await self.db.save_collection(self.collection, list(records))

    async def list(self) -> List[E]:
        return [self._to_domain(record) for record in await self.get_all()]

    async def get_by_id(self, record_id: str) -> Optional[E]:
        for record in await self.get_all():
            if record.get("id") == record_id:
                return self._to_domain(record)
        return None

    async def create(self, entity: E) -> E:
        async with self.db.transaction() as data:
            data[self.collection].append(self.to_record(entity))
        return entity

    async def update(
        self,
        record_id: str,
        mutate: Mutator,
        check: Optional[Check] = None
    ) -> Optional[E]:
        """Изменение записи; неизвестные поля записи сохраняются"""
        async with self.db.transaction() as data:
            records = data[self.collection]
            for index, record in enumerate(records):
                if record.get("id") != record_id:
                    continue
                entity = self._to_domain(record)
                if check:
                    check(entity)
                mutate(entity)
                records[index] = {**record, **self.to_record(entity), "id": record_id}
                return entity
        return None

    async def delete(self, record_id: str, check: Optional[Check] = None) -> bool:
        async with self.db.transaction() as data:
            records = data[self.collection]
            for index, record in enumerate(records):
                if record.get("id") != record_id:
                    continue
                if check:
                    check(self._to_domain(record))
                del records[index]
                return True
        return False

    async def delete_many(
        self,
        record_ids: Iterable[str],
        check: Optional[Check] = None
    ) -> Tuple[List[str], List[str]]:
        """Удаление нескольких записей; возвращает (удаленные, не найденные)"""
        wanted = list(dict.fromkeys(record_ids))
        async with self.db.transaction() as data:
            records = data[self.collection]
            by_id: Dict[str, dict] = {record.get("id"): record for record in records}
            found = [record_id for record_id in wanted if record_id in by_id]
            not_found = [record_id for record_id in wanted if record_id not in by_id]
            if check:
                for record_id in found:
                    check(self._to_domain(by_id[record_id]))
            removed = set(found)
            data[self.collection] = [r for r in records if r.get("id") not in removed]
        return found, not_found

    async def assign_owner(self, record_id: str, user_id: str) -> Optional[E]:
        """Смена владельца записи"""
        def _assign(entity):
            entity.user_id = user_id

        return await self.update(record_id, _assign)

    def _to_domain(self, record: dict) -> E:
        raise NotImplementedError

    def to_record(self, entity: E) -> dict:
        raise NotImplementedError
