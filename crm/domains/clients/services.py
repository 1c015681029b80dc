import logging
from typing import Any, Dict, Optional

from crm.db.repositories.client_repository import ClientRepository
from crm.domains.clients.entities import Client
from crm.domains.ownership.entities import OwnershipScope
from crm.domains.ownership.services import OwnedResourceService

logger = logging.getLogger(__name__)


class ClientService(OwnedResourceService[Client]):
    """Сервис для работы с клиентами"""

    repository_class = ClientRepository
    resource_name = "Client"

    async def create_client(self, client_data: Dict[str, Any], owner_id: str) -> Client:
        """Создание нового клиента"""
        client = Client.build(client_data, owner_id)
        await self.repository.create(client)
        logger.info(f"Client {client.id} created for user {owner_id}")
        return client

    async def add_comment(self, client_id: str, text: str, scope: OwnershipScope) -> Optional[Client]:
        """Комментарий к клиенту от имени текущего пользователя"""
        return await self.repository.update(
            client_id,
            lambda client: client.add_comment(text, scope.user_id),
            check=scope.check
        )

    async def add_reminder(
        self,
        client_id: str,
        date: str,
        note: str,
        scope: OwnershipScope
    ) -> Optional[Client]:
        """Напоминание по клиенту от имени текущего пользователя"""
        return await self.repository.update(
            client_id,
            lambda client: client.add_reminder(date, note, scope.user_id),
            check=scope.check
        )

    def _apply_changes(self, client: Client, changes: Dict[str, Any], scope: OwnershipScope) -> None:
        client.apply_changes(changes, author_id=scope.user_id)
