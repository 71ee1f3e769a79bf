from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Training Compliance Records"
    DATABASE_URL: str = "sqlite:///./training_records.db"
    STORAGE_KEY: str = "mlt_training_db_v2"
    BACKUP_DIRECTORY: str = "./backups"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
