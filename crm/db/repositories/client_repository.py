from crm.db.repositories.base_repository import BaseRepository
from crm.domains.clients.entities import Client, Comment, Reminder


def _listed(value) -> list:
    # Поврежденные вложенные поля старых записей читаются как пустые
    return value if isinstance(value, list) else []


class ClientRepository(BaseRepository[Client]):
    """Репозиторий для работы с клиентами"""

    collection = "clients"

    def _to_domain(self, record: dict) -> Client:
        """Преобразование записи хранилища в доменную сущность"""
        return Client(
            id=record.get("id"),
            user_id=record.get("userId"),
            name=record.get("name") or "",
            pc=record.get("pc") or "",
            phone=record.get("phone") or "",
            email=record.get("email") or "",
            comments=[
                Comment.from_dict(c) for c in _listed(record.get("comments")) if isinstance(c, (str, dict))
            ],
            reminders=[
                Reminder.from_dict(r) for r in _listed(record.get("reminders")) if isinstance(r, dict)
            ],
            product_ids=[str(p) for p in _listed(record.get("productIds"))],
            last_contacted=record.get("lastContacted")
        )

    def to_record(self, client: Client) -> dict:
        """Преобразование доменной сущности в запись хранилища"""
        return {
            "id": client.id,
            "userId": client.user_id,
            "name": client.name,
            "pc": client.pc,
            "phone": client.phone,
            "email": client.email,
            "comments": [comment.to_dict() for comment in client.comments],
            "reminders": [reminder.to_dict() for reminder in client.reminders],
            "productIds": client.product_ids,
            "lastContacted": client.last_contacted
        }
