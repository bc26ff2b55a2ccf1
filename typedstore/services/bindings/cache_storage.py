"""
Reactive binding over a shared memory cache.
"""

from typing import Any, Optional, TypeVar

from typedstore.services.bindings.binding import StorageBinding
from typedstore.services.cache.memory_cache import MemoryCache
from typedstore.services.cache.registry import SharedMemoryCache
from typedstore.utils.optional import MISSING

T = TypeVar('T')


class CacheStorage(StorageBinding[T]):
    """
    Binding over the shared ``MemoryCache`` for ``(type(key), value_type)``.

    The binding keeps a local copy of the value, synchronized from the cache
    when it is created. Reads return the local copy. Writes update the local
    copy first, notify subscribers so the UI can re-render, then write
    through to the cache. The cache is not persistent and may drop the
    entry at any time; ``refresh()`` re-reads it.

    Example::

        theme = CacheStorage("userTheme", default="Light")
        session = CacheStorage("userSession", value_type=Optional[str])
        toggle.bind(theme.binding)
    """

    def __init__(
        self,
        key: Any,
        default: Any = MISSING,
        *,
        value_type: Any = None,
        cache: Optional[MemoryCache] = None
    ):
        super().__init__(key, default, value_type=value_type)
        self.cache = cache if cache is not None else SharedMemoryCache.get_cache(
            type(key), self.value_type
        )
        self._local = self._read_cache()

    def _read_cache(self) -> Any:
        value = self.cache.get(self.key)
        return self.default if value is None else value

    def _read(self) -> Any:
        return self._local

    def _write(self, value: Any) -> None:
        self.cache[self.key] = value

    def _delete(self) -> None:
        self.cache.remove(self.key)

    def _apply(self, value: Any, remove: bool) -> None:
        self._local = self.default if remove else value
        self._notify(self._local)
        if remove:
            self._delete()
        else:
            self._write(value)

    def refresh(self) -> T:
        """
        Re-synchronize the local copy from the cache.

        Subscribers are notified when the value changed.

        Returns:
            The refreshed value
        """
        previous = self._local
        self._local = self._read_cache()
        if self._local is not previous and self._local != previous:
            self._notify(self._local)
        return self._local
