import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from wirebox.domain import IShareManager

logger = logging.getLogger(__name__)


class _Unmaterialized:
    """Placeholder stored for shared keys whose instance does not exist yet."""

    def __repr__(self) -> str:
        return "<unmaterialized>"


UNMATERIALIZED = _Unmaterialized()


class ShareManager(IShareManager):
    """Keeps the shared (singleton) marks and their cached instances.

    Instances cached while a transaction is open are journaled, so a failed
    top-level resolution can drop everything it cached.

    Attributes:
        _shares: Mapping from TypeKey to its cached instance or ``UNMATERIALIZED``.
        _journal: Previous values of keys stored during the open transaction.
    """

    def __init__(self) -> None:
        """Initialize the share manager with an empty share table."""
        self._shares: Dict[str, Any] = {}
        self._journal: Optional[List[Tuple[str, bool, Any]]] = None

    def mark(self, type_key: str) -> None:
        """Mark a TypeKey shared.

        Marking is idempotent: an already cached instance is kept.
        """
        if type_key not in self._shares:
            self._shares[type_key] = UNMATERIALIZED

    def unmark(self, type_key: str) -> None:
        """Forget a share mark and any instance cached for it."""
        self._shares.pop(type_key, None)

    def is_shared(self, type_key: str) -> bool:
        return type_key in self._shares

    def has_instance(self, type_key: str) -> bool:
        return self._shares.get(type_key, UNMATERIALIZED) is not UNMATERIALIZED

    def get(self, type_key: str) -> Any:
        """Return the cached instance for a TypeKey.

        Raises:
            KeyError: If no instance has been materialized for the key.
        """
        instance = self._shares.get(type_key, UNMATERIALIZED)
        if instance is UNMATERIALIZED:
            raise KeyError(type_key)
        return instance

    def store(self, type_key: str, instance: Any) -> None:
        """Cache an instance, journaling the previous value when a transaction is open."""
        if self._journal is not None:
            had_previous = type_key in self._shares
            self._journal.append((type_key, had_previous, self._shares.get(type_key)))
        self._shares[type_key] = instance

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Open a transaction unless one is already open on this manager.

        Only the outermost transaction rolls back; nested ones defer to it.

        Example:
            >>> with manager.transaction():
            ...     manager.store("app.mailer", Mailer())
            ...     raise RuntimeError()  # "app.mailer" is uncached again
        """
        if self._journal is not None:
            yield
            return

        self._journal = []
        try:
            yield
        except BaseException:
            self._rollback()
            raise
        finally:
            self._journal = None

    def _rollback(self) -> None:
        for type_key, had_previous, previous in reversed(self._journal or []):
            if had_previous:
                self._shares[type_key] = previous
            else:
                self._shares.pop(type_key, None)
            logger.debug("Rolled back shared instance for %s", type_key)

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._shares)

    def restore(self, shares: Dict[str, Any]) -> None:
        """Replace the share table with a previously taken snapshot."""
        self._shares = dict(shares)

    def clear_cache(self) -> None:
        """Forget all shares and cached instances.

        Useful for testing or resetting injector state.
        """
        self._shares.clear()
