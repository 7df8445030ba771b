# marketplace/services/settings_cache.py
import threading
import time
from typing import Any, Callable, Dict

from marketplace.utils.logging import get_logger
from marketplace.utils.settings import SETTINGS_CACHE_TTL_SECONDS

logger = get_logger(__name__)


class SettingsCache:
    """
    Cache ustawien z TTL.
    Tworzony raz przy starcie aplikacji i wstrzykiwany jako zaleznosc.
    Po wygasnieciu albo invalidate() kolejny odczyt przeladowuje wszystko przez loader.
    """

    def __init__(
        self,
        loader: Callable[[], Dict[str, Any]],
        ttl_seconds: float = SETTINGS_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._values: Dict[str, Any] | None = None
        self._expires_at = 0.0
        #podbijane przy invalidate, wynik loadera sprzed invalidate nie trafia do cache
        self._generation = 0

    def get_all(self) -> Dict[str, Any]:
        with self._lock:
            values, expires_at, generation = self._values, self._expires_at, self._generation

        if values is None or self._clock() >= expires_at:
            logger.info("Settings cache miss, reloading")
            values = self._loader()
            with self._lock:
                if generation == self._generation:
                    self._values = values
                    self._expires_at = self._clock() + self._ttl

        return dict(values)

    def get(self, key: str, default: Any = None) -> Any:
        return self.get_all().get(key, default)

    def invalidate(self, key: str | None = None) -> None:
        # snapshot jest jeden, wiec zmiana dowolnego klucza wygasza calosc
        with self._lock:
            self._values = None
            self._expires_at = 0.0
            self._generation += 1
        logger.info(f"Settings cache invalidated ({key or 'all'})")
