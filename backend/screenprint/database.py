import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
# Toutes les tables sont déclarées via SQLModel et partagent ses métadonnées
from sqlmodel import SQLModel

from screenprint.config import settings

logger = logging.getLogger(__name__)

try:
    # Créer le moteur de base de données asynchrone
    engine_kwargs = {}
    if not settings.database_url.startswith("sqlite"):
        engine_kwargs = {"pool_size": settings.DB_POOL_SIZE, "max_overflow": settings.DB_MAX_OVERFLOW}

    engine = create_async_engine(
        settings.database_url,
        echo=settings.DB_ECHO_LOG,
        future=True, # Utilise l'API 2.0 de SQLAlchemy
        **engine_kwargs
    )

    # Créer une classe de session asynchrone
    AsyncSessionLocal = sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False # Empêche les objets d'expirer après commit
    )

    logger.info("Moteur et Session Factory SQLAlchemy Async configurés.")

except Exception as e:
    logger.critical(f"Erreur lors de la configuration de SQLAlchemy Async: {e}", exc_info=True)
    engine = None
    AsyncSessionLocal = None

# Fonction dépendance pour obtenir une session de base de données asynchrone
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that provides an async database session."""
    if AsyncSessionLocal is None:
        logger.error("La factory de session SQLAlchemy n'est pas initialisée.")
        raise RuntimeError("Database session factory is not initialized.")

    async with AsyncSessionLocal() as session:
        try:
            yield session
            # Les commits sont gérés par les repositories / services
        except Exception as e:
            logger.error(f"Erreur durant la session DB, rollback: {e}", exc_info=True)
            await session.rollback()
            raise
        finally:
            await session.close()
            logger.debug("Session DB fermée.")

async def create_tables():
    """Crée toutes les tables définies par les modèles SQLModel."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
