"""
Cache mémoire à durée de vie limitée (TTL).

L'horloge est injectée pour pouvoir tester l'expiration sans attendre.
Une instance est créée par application (voir `screenprint.main`), jamais au
niveau d'un module.
"""
import logging
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

logger = logging.getLogger(__name__)


class TTLCache:
    """Cache clé/valeur simple avec expiration par entrée."""

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic, name: str = "cache"):
        if ttl < 0:
            raise ValueError("ttl doit être positif ou nul")
        self.ttl = ttl
        self.clock = clock
        self.name = name
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        """Retourne la valeur si elle est encore fraîche, sinon None (et l'évince)."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self.clock() - stored_at >= self.ttl:
            logger.debug(f"[{self.name}] Entrée expirée pour la clé {key!r}")
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = (self.clock(), value)

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Invalide une clé, ou tout le cache si aucune clé n'est fournie."""
        if key is None:
            logger.debug(f"[{self.name}] Invalidation complète ({len(self._entries)} entrées)")
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
