import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from sqlalchemy.exc import InterfaceError, OperationalError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Erreurs considérées comme transitoires (connexion perdue, timeout...)
TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (
    OperationalError,
    InterfaceError,
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    delay: float = 0.2,
    backoff: float = 2.0,
    retry_on: Tuple[Type[BaseException], ...] = TRANSIENT_ERRORS,
    label: str = "operation",
) -> T:
    """
    Exécute `operation` avec un nombre borné de tentatives.

    Seules les exceptions listées dans `retry_on` déclenchent une nouvelle
    tentative; toute autre exception (validation, domaine) est propagée
    immédiatement.
    """
    if attempts < 1:
        raise ValueError("attempts doit être >= 1")

    current_delay = delay
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            if attempt == attempts:
                logger.error(f"[Retry] {label}: échec après {attempts} tentatives: {e}")
                raise
            logger.warning(f"[Retry] {label}: tentative {attempt}/{attempts} échouée ({e}), nouvelle tentative dans {current_delay:.2f}s")
            await asyncio.sleep(current_delay)
            current_delay *= backoff
    # Inatteignable: la boucle retourne ou lève
    raise RuntimeError(f"{label}: aucune tentative exécutée")
