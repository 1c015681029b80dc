import asyncio
import logging
import re
import time
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def make_stored_name(original_name: str, prefix: Optional[str] = None) -> str:
    """Имя файла на диске: <timestamp>-<очищенное исходное имя>"""
    safe_name = re.sub(r"[^a-zA-Z0-9.-]", "_", Path(original_name or "file").name)
    stamp = int(time.time() * 1000)
    if prefix:
        return f"{prefix}-{stamp}-{safe_name}"
    return f"{stamp}-{safe_name}"


class FileStorage:
    """Каталог с загруженными файлами (связь с записями в JSON не транзакционна)"""

    def __init__(self, directory):
        self.directory = Path(directory)

    def path_for(self, file_name: str) -> Path:
        # Только имя файла, без перехода в другие каталоги
        return self.directory / Path(file_name).name

    def exists(self, file_name: str) -> bool:
        return self.path_for(file_name).is_file()

    async def save(self, content: bytes, file_name: str) -> int:
        path = self.path_for(file_name)

        def _write():
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

        await asyncio.to_thread(_write)
        return len(content)

    async def remove(self, file_name: str) -> bool:
        """Удаление файла; ошибка только логируется"""
        path = self.path_for(file_name)
        try:
            await asyncio.to_thread(path.unlink)
            return True
        except OSError as e:
            logger.warning(f"Failed to delete file {path}: {e}")
            return False


async def read_limited(upload, max_size: int, chunk_size: int = 1024 * 1024) -> bytes:
    """Чтение загружаемого файла по частям; больше max_size - ValueError"""
    size = getattr(upload, "size", None)
    if size is not None and size > max_size:
        raise ValueError("File is too large")

    chunks = []
    total = 0
    while True:
        chunk = await upload.read(chunk_size)
        if not chunk:
            break
        total += len(chunk)
        if total > max_size:
            raise ValueError("File is too large")
        chunks.append(chunk)
    return b"".join(chunks)
