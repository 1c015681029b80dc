from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Хранилище
    data_file: str = "server/data.json"
    documents_dir: str = "server/documents"
    profile_pictures_dir: str = "server/uploads/profile-pictures"

    jwt_secret: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 7
    password_reset_token_ttl_minutes: int = 60

    # Администратор, создаваемый при первом запуске
    default_admin_email: str = "admin"
    default_admin_password: str = "admin"

    max_document_size: int = 50 * 1024 * 1024
    max_profile_picture_size: int = 5 * 1024 * 1024
    min_password_length: int = 6

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
