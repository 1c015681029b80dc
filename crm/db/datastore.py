import asyncio
import enum
import json
import logging
import os
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional

from crm.core.exceptions import StorageError

logger = logging.getLogger(__name__)

COLLECTIONS = (
    "users",
    "products",
    "clients",
    "documents",
    "passwordResetTokens",
    "importLogs",
)


def empty_document() -> Dict[str, List[dict]]:
    """Пустой документ со всеми коллекциями"""
    return {name: [] for name in COLLECTIONS}


class ReadStatus(str, enum.Enum):
    OK = "ok"
    MISSING = "missing"
    CORRUPT = "corrupt"


@dataclass
class ReadResult:
    data: Dict[str, Any]
    status: ReadStatus
    error: Optional[str] = None

    @property
    def is_corrupt(self) -> bool:
        return self.status is ReadStatus.CORRUPT


class JsonDocumentStore:
    """Хранилище: один JSON-документ со всеми коллекциями.

    Чтение не бросает исключений и при ошибке возвращает пустые коллекции,
    запись бросает StorageError. Все изменения идут через transaction(),
    которая сериализует цикл чтение-изменение-запись внутри процесса.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read_sync(self) -> ReadResult:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ReadResult(empty_document(), ReadStatus.MISSING)
        except OSError as e:
            return ReadResult(empty_document(), ReadStatus.CORRUPT, str(e))

        try:
            data = json.loads(raw)
        except ValueError as e:
            return ReadResult(empty_document(), ReadStatus.CORRUPT, str(e))

        if not isinstance(data, dict):
            return ReadResult(
                empty_document(), ReadStatus.CORRUPT, "Top-level JSON value is not an object"
            )

        for name in COLLECTIONS:
            if not isinstance(data.get(name), list):
                data[name] = []
        return ReadResult(data, ReadStatus.OK)

    def _write_sync(self, data: Dict[str, Any]) -> None:
        payload = json.dumps(data, indent=2, ensure_ascii=False)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Пишем во временный файл рядом и атомарно подменяем
        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    async def read_result(self) -> ReadResult:
        """Чтение документа с явным статусом (ok / missing / corrupt)"""
        result = await asyncio.to_thread(self._read_sync)
        if result.status is ReadStatus.CORRUPT:
            logger.error(f"Data file {self.path} is unreadable, using empty data: {result.error}")
        elif result.status is ReadStatus.MISSING:
            logger.info(f"Data file {self.path} not found, using empty data")
        return result

    async def read_data(self) -> Dict[str, Any]:
        """Чтение всего документа, при ошибке - пустые коллекции"""
        result = await self.read_result()
        return result.data

    async def write_data(self, data: Dict[str, Any]) -> None:
        """Запись всего документа"""
        try:
            await asyncio.to_thread(self._write_sync, data)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write data file {self.path}: {e}")
            raise StorageError(f"Failed to save data: {e}") from e

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Dict[str, Any]]:
        """Чтение-изменение-запись под блокировкой.

        Если тело бросает исключение, документ не записывается.
        Поврежденный файл не перезаписывается пустыми коллекциями.
        """
        async with self._lock:
            result = await self.read_result()
            if result.is_corrupt:
                raise StorageError(f"Data file is unreadable, refusing to overwrite: {result.error}")
            yield result.data
            await self.write_data(result.data)

    async def get_collection(self, name: str) -> List[dict]:
        data = await self.read_data()
        return data.get(name) or []

    async def save_collection(self, name: str, records: List[dict]) -> None:
        async with self.transaction() as data:
            data[name] = list(records)

    async def initialize(self) -> None:
        """Создание файла с пустыми коллекциями, если его нет"""
        if self.path.exists():
            return
        await self.write_data(empty_document())
        logger.info(f"Created data file {self.path}")
