import logging
from typing import Optional, List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Charger les variables d'environnement AVANT de définir la classe Settings
load_dotenv()

# Classe de configuration utilisant Pydantic BaseSettings
class Settings(BaseSettings):
    # --- Application ---
    APP_TITLE: str = "Screenprint Orders API"
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # --- Base de Données ---
    POSTGRES_DB: str = "screenprint"
    POSTGRES_USER: str = "screenprint"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"
    # Si défini, prend le pas sur les variables POSTGRES_*
    DATABASE_URL: Optional[str] = None
    DB_ECHO_LOG: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    # Crée les tables manquantes au démarrage (développement)
    DB_AUTO_CREATE_TABLES: bool = False

    # --- Pagination ---
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = 'ignore' # Ignorer les variables d'env non définies dans le modèle

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

# Instancier la classe de configuration
settings = Settings()

if not settings.DATABASE_URL and not settings.POSTGRES_PASSWORD:
    logger.warning("POSTGRES_PASSWORD n'est pas défini. La connexion à la base de données risque d'échouer.")

logger.info(f"Configuration chargée: DB={settings.POSTGRES_DB}@{settings.POSTGRES_HOST}, API={settings.API_V1_PREFIX}")
