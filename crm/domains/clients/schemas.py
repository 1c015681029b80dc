from typing import Any, List, Optional

from pydantic import Field

from crm.core.schemas import BulkImportRequest, CamelModel
from crm.domains.clients.entities import Client


class ClientBase(CamelModel):
    """Поля клиента; проверка значений выполняется в Client.build"""
    name: Optional[Any] = None
    pc: Optional[Any] = None
    phone: Optional[Any] = None
    email: Optional[Any] = None
    comments: Optional[List[Any]] = None
    reminders: Optional[List[Any]] = None
    product_ids: Optional[List[Any]] = None
    last_contacted: Optional[str] = None


class ClientCreate(ClientBase):
    """Схема для создания клиента"""
    notes: Optional[str] = None


class ClientUpdate(ClientBase):
    """Схема для частичного обновления клиента"""


class CommentCreate(CamelModel):
    text: str = Field(..., min_length=1)


class ReminderCreate(CamelModel):
    date: str = Field(..., min_length=1)
    note: str = ""


class CommentResponse(CamelModel):
    id: str
    text: str
    created_at: str
    user_id: Optional[str] = None


class ReminderResponse(CamelModel):
    id: str
    date: str
    note: str
    created_at: str
    user_id: Optional[str] = None


class ClientResponse(CamelModel):
    """Схема для ответа с данными клиента"""
    id: str
    user_id: Optional[str] = None
    name: str
    pc: str = ""
    phone: str = ""
    email: str = ""
    comments: List[CommentResponse] = []
    reminders: List[ReminderResponse] = []
    product_ids: List[str] = []
    last_contacted: Optional[str] = None

    @classmethod
    def from_entity(cls, client: Client) -> "ClientResponse":
        return cls(
            id=client.id,
            user_id=client.user_id,
            name=client.name,
            pc=client.pc,
            phone=client.phone,
            email=client.email,
            comments=[CommentResponse(**vars(c)) for c in client.comments],
            reminders=[ReminderResponse(**vars(r)) for r in client.reminders],
            product_ids=client.product_ids,
            last_contacted=client.last_contacted
        )


class ClientBulkImportRequest(BulkImportRequest):
    clients: List[Any]
