from typing import Optional

from crm.core.utils import new_id, now_iso


class Document:
    """Сущность документа (запись о загруженном файле).

    Сам файл лежит в каталоге документов под именем file_name; запись и файл
    не связаны транзакционно.
    """

    def __init__(
        self,
        id: str,
        user_id: Optional[str],
        original_name: str,
        file_name: str,
        mime_type: str = "application/octet-stream",
        size: int = 0,
        client_id: Optional[str] = None,
        uploaded_at: Optional[str] = None
    ):
        self.id = id
        self.user_id = user_id
        self.client_id = client_id
        self.original_name = original_name
        self.file_name = file_name
        self.mime_type = mime_type
        self.size = size
        self.uploaded_at = uploaded_at or now_iso()

    @property
    def is_personal(self) -> bool:
        """Личный документ - не привязан к клиенту"""
        return not self.client_id

    @classmethod
    def create_document(
        cls,
        user_id: str,
        original_name: str,
        file_name: str,
        mime_type: Optional[str],
        size: int,
        client_id: Optional[str] = None
    ) -> "Document":
        """Создание записи о новом документе"""
        return cls(
            id=new_id(),
            user_id=user_id,
            client_id=client_id,
            original_name=original_name,
            file_name=file_name,
            mime_type=mime_type or "application/octet-stream",
            size=size
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Document):
            return False
        return self.id == other.id

    def __repr__(self) -> str:
        return f"Document(id={self.id}, original_name={self.original_name}, client_id={self.client_id})"
