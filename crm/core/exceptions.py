class StorageError(Exception):
    """Ошибка записи хранилища (запись никогда не проглатывается)"""


class AccessDeniedError(PermissionError):
    """Запись существует, но не принадлежит пользователю"""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)
