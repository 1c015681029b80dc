from crm.core.config import settings
from crm.db.datastore import JsonDocumentStore
from crm.db.files import FileStorage

# Единственный документ-хранилище процесса
store = JsonDocumentStore(settings.data_file)

document_files = FileStorage(settings.documents_dir)
profile_picture_files = FileStorage(settings.profile_pictures_dir)


# Функции для dependency injection в FastAPI
async def get_db():
    yield store


def get_document_files() -> FileStorage:
    return document_files


def get_profile_picture_files() -> FileStorage:
    return profile_picture_files
