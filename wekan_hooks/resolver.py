"""Resolution of the Materiais board id and its custom-field ids."""

import logging
import threading
import time
from dataclasses import dataclass

from .errors import ConfigurationError, NotFoundError
from .store import Store

logger = logging.getLogger("wekan_hooks.resolver")

DEFAULT_BOARD_TITLE = "Materiais"

# Custom fields that must exist on the board before any field hook runs
REQUIRED_FIELDS = ("ipl", "registro", "solicitacao", "auto", "item", "erro", "path")


@dataclass(frozen=True)
class ResolvedFields:
    """Board id and custom-field ids, keyed by field name."""

    board_id: str
    field_ids: dict[str, str]

    def __getitem__(self, name: str) -> str:
        return self.field_ids[name]


class FieldResolver:
    """
    Resolves the board and custom-field ids once and caches them.

    Resolution happens on first use and is kept for the process lifetime,
    or for ``ttl`` seconds when set. A failed resolution caches nothing,
    so the next event tries again.
    Safe to share between concurrent dispatches.
    """

    def __init__(
        self,
        store: Store,
        board_title: str = DEFAULT_BOARD_TITLE,
        field_names: tuple[str, ...] = REQUIRED_FIELDS,
        ttl: float | None = None,
    ):
        self.store = store
        self.board_title = board_title
        self.field_names = field_names
        self.ttl = ttl
        self._lock = threading.Lock()
        self._resolved: ResolvedFields | None = None
        self._resolved_at = 0.0

    def resolve(self) -> ResolvedFields:
        """
        Return the cached ids, resolving them first if needed.

        Raises:
            ConfigurationError: If the board or a required field is missing
            StoreError: If the store fails while resolving
        """
        resolved = self._resolved
        if resolved is not None and not self._expired():
            return resolved
        with self._lock:
            if self._resolved is None or self._expired():
                self._resolved = self._resolve()
                self._resolved_at = time.monotonic()
            return self._resolved

    def _expired(self) -> bool:
        return self.ttl is not None and time.monotonic() - self._resolved_at >= self.ttl

    def _resolve(self) -> ResolvedFields:
        try:
            board_id = self.store.find_board_id(self.board_title)
        except NotFoundError as e:
            raise ConfigurationError(f"Board {self.board_title} not found") from e

        field_ids = {}
        for name in self.field_names:
            try:
                field_ids[name] = self.store.find_custom_field_id(name, board_id)
            except NotFoundError as e:
                raise ConfigurationError(
                    f"custom field not found on board {self.board_title}: {name}"
                ) from e

        logger.info(f"Resolved board '{self.board_title}' ({board_id}) and {len(field_ids)} fields")
        return ResolvedFields(board_id=board_id, field_ids=field_ids)
