from crm.domains.clients.entities import Client, Comment, Reminder
from crm.domains.clients.schemas import (
    ClientCreate, ClientUpdate, ClientResponse, ClientBulkImportRequest,
    CommentCreate, ReminderCreate
)

__all__ = [
    "Client", "Comment", "Reminder",
    "ClientCreate", "ClientUpdate", "ClientResponse", "ClientBulkImportRequest",
    "CommentCreate", "ReminderCreate"
]
