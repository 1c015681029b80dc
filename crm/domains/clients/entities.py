from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from crm.core.utils import clean_str, new_id, now_iso


def parse_list(value: Any, field_name: str) -> List[Any]:
    """Проверка, что поле - список (None считается пустым списком)"""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be a list")
    return value


@dataclass
class Comment:
    text: str
    user_id: Optional[str]
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=now_iso)

    @classmethod
    def from_dict(cls, data: Any, default_user_id: Optional[str] = None) -> "Comment":
        if isinstance(data, str):
            return cls(text=data, user_id=default_user_id)
        if not isinstance(data, dict):
            raise ValueError("Comment must be a string or an object")
        return cls(
            text=clean_str(data.get("text")),
            user_id=clean_str(data.get("userId")) or default_user_id,
            id=clean_str(data.get("id")) or new_id(),
            created_at=clean_str(data.get("createdAt")) or now_iso()
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "createdAt": self.created_at, "userId": self.user_id}


@dataclass
class Reminder:
    date: str
    note: str
    user_id: Optional[str]
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=now_iso)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_user_id: Optional[str] = None) -> "Reminder":
        if not isinstance(data, dict):
            raise ValueError("Reminder must be an object")
        return cls(
            date=clean_str(data.get("date")),
            note=clean_str(data.get("note")),
            user_id=clean_str(data.get("userId")) or default_user_id,
            id=clean_str(data.get("id")) or new_id(),
            created_at=clean_str(data.get("createdAt")) or now_iso()
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "note": self.note,
            "createdAt": self.created_at,
            "userId": self.user_id
        }


class Client:
    """Сущность клиента.

    Комментарии и напоминания хранят userId автора независимо от владельца
    клиента.
    """

    def __init__(
        self,
        id: str,
        user_id: Optional[str],
        name: str,
        pc: str = "",
        phone: str = "",
        email: str = "",
        comments: Optional[List[Comment]] = None,
        reminders: Optional[List[Reminder]] = None,
        product_ids: Optional[List[str]] = None,
        last_contacted: Optional[str] = None
    ):
        self.id = id
        self.user_id = user_id
        self.name = name
        self.pc = pc
        self.phone = phone
        self.email = email
        self.comments = comments or []
        self.reminders = reminders or []
        self.product_ids = product_ids or []
        self.last_contacted = last_contacted

    @staticmethod
    def _stamp_authors(items: list, author_id: Optional[str], existing: list) -> list:
        # Автор известных записей сохраняется, новые записи получают автора запроса
        known = {item.id: item.user_id for item in existing}
        for item in items:
            item.user_id = known.get(item.id, author_id)
        return items

    @staticmethod
    def _parse_product_ids(value: Any) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("productIds must be a list")
        return [str(product_id) for product_id in value]

    @classmethod
    def build(cls, data: Dict[str, Any], user_id: str) -> "Client":
        """Создание клиента из входных данных"""
        if not isinstance(data, dict):
            raise ValueError("Client row must be an object")

        name = clean_str(data.get("name"))
        if not name:
            raise ValueError("Client name is required")

        comments = [Comment.from_dict(c, user_id) for c in parse_list(data.get("comments"), "comments")]
        # Колонка notes из импорта превращается в комментарий
        notes = clean_str(data.get("notes"))
        if notes:
            comments.append(Comment(text=notes, user_id=user_id))

        return cls(
            id=new_id(),
            user_id=user_id,
            name=name,
            pc=clean_str(data.get("pc")),
            phone=clean_str(data.get("phone")),
            email=clean_str(data.get("email")),
            comments=cls._stamp_authors(comments, user_id, []),
            reminders=cls._stamp_authors(
                [Reminder.from_dict(r) for r in parse_list(data.get("reminders"), "reminders")], user_id, []
            ),
            product_ids=cls._parse_product_ids(data.get("productIds")),
            last_contacted=clean_str(data.get("lastContacted")) or now_iso()
        )

    def apply_changes(self, changes: Dict[str, Any], author_id: Optional[str] = None) -> None:
        """Частичное обновление полей клиента"""
        if "name" in changes:
            name = clean_str(changes["name"])
            if not name:
                raise ValueError("Client name is required")
            self.name = name
        for attr in ("pc", "phone", "email"):
            if attr in changes:
                setattr(self, attr, clean_str(changes[attr]))
        if "productIds" in changes:
            self.product_ids = self._parse_product_ids(changes["productIds"])
        if "lastContacted" in changes:
            self.last_contacted = clean_str(changes["lastContacted"]) or now_iso()
        if "comments" in changes:
            comments = [Comment.from_dict(c) for c in parse_list(changes["comments"], "comments")]
            self.comments = self._stamp_authors(comments, author_id, self.comments)
        if "reminders" in changes:
            reminders = [Reminder.from_dict(r) for r in parse_list(changes["reminders"], "reminders")]
            self.reminders = self._stamp_authors(reminders, author_id, self.reminders)

    def add_comment(self, text: str, author_id: str) -> Comment:
        text = clean_str(text)
        if not text:
            raise ValueError("Comment text is required")
        comment = Comment(text=text, user_id=author_id)
        self.comments.append(comment)
        self.last_contacted = comment.created_at
        return comment

    def add_reminder(self, date: str, note: str, author_id: str) -> Reminder:
        date = clean_str(date)
        if not date:
            raise ValueError("Reminder date is required")
        reminder = Reminder(date=date, note=clean_str(note), user_id=author_id)
        self.reminders.append(reminder)
        return reminder

    def __eq__(self, other) -> bool:
        if not isinstance(other, Client):
            return False
        return self.id == other.id

    def __repr__(self) -> str:
        return f"Client(id={self.id}, name={self.name}, user_id={self.user_id})"
