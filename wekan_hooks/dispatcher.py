"""Runs every registered hook, in order, for an incoming event."""

import logging
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field, replace

from .child import child_archived, child_created
from .fields import fill_path, propagate_ipl
from .hooks import Hook, HookContext, Outcome, RuleResult

logger = logging.getLogger("wekan_hooks.dispatcher")


def default_hooks() -> list[Hook]:
    """Hooks in the order they run for every event."""
    return [child_created, child_archived, propagate_ipl, fill_path]


@dataclass
class DispatchReport:
    """Results of the hooks that ran for one event."""

    kind: str
    card_id: str
    results: list[RuleResult] = field(default_factory=list)

    @property
    def applied(self) -> list[RuleResult]:
        return [r for r in self.results if r.outcome is Outcome.APPLIED]

    @property
    def failed(self) -> bool:
        return any(r.outcome is Outcome.FAILED for r in self.results)


class Dispatcher:
    """
    Dispatches events to hooks.

    Hooks run in registration order. The first hook that raises stops the
    dispatch: its exception is re-raised unchanged and the remaining hooks
    are not called. Effects of hooks that already ran are kept.

    Events for the same card are serialized within the process, so two
    deliveries for one card never interleave their read-then-write steps.
    """

    def __init__(self, context: HookContext, hooks: Sequence[Hook] | None = None):
        self.context = context
        self.hooks = list(hooks) if hooks is not None else default_hooks()
        self._locks_guard = threading.Lock()
        # card_id → (lock, number of dispatches holding or waiting on it)
        self._card_locks: dict[str, list] = {}

    @contextmanager
    def _card_lock(self, card_id: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._card_locks.setdefault(card_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._card_locks[card_id]

    def dispatch(
        self, kind: str, card_id: str, report: DispatchReport | None = None
    ) -> DispatchReport:
        """
        Run every hook for one event.

        Args:
            kind: Wekan activity kind (e.g. "act-moveCard")
            card_id: Id of the card the event is about
            report: Report to fill in; pass one to keep the results of
                the hooks that ran when a hook raises

        Returns:
            Report with one result per hook that ran

        Raises:
            Exception: The first exception raised by a hook, unchanged
        """
        if report is None:
            report = DispatchReport(kind=kind, card_id=card_id)
        with self._card_lock(card_id):
            for hook in self.hooks:
                name = getattr(hook, "__name__", repr(hook))
                try:
                    result = hook(kind, card_id, self.context)
                except Exception as e:
                    report.results.append(RuleResult(Outcome.FAILED, str(e), hook=name))
                    logger.warning(f"Hook {name} failed for {kind} on card {card_id}: {e}")
                    raise
                result = replace(result, hook=name)
                report.results.append(result)
                if result.outcome is Outcome.APPLIED:
                    logger.info(f"{result} for {kind} on card {card_id}")
                else:
                    logger.debug(f"{result} for {kind} on card {card_id}")
        return report
