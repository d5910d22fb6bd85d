"""Shared types for hooks: the context they run with and what they report."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .resolver import FieldResolver
from .store import Store

DEFAULT_CHECKLIST_TITLE = "Pronto"


class Outcome(Enum):
    """What a hook did with an event."""

    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class RuleResult:
    """Outcome of one hook for one event."""

    outcome: Outcome
    reason: str | None = None
    hook: str = ""

    def __str__(self) -> str:
        text = f"{self.hook}: {self.outcome.value}"
        if self.reason:
            text += f" ({self.reason})"
        return text


def applied(reason: str | None = None) -> RuleResult:
    return RuleResult(Outcome.APPLIED, reason)


def skipped(reason: str) -> RuleResult:
    return RuleResult(Outcome.SKIPPED, reason)


@dataclass
class HookContext:
    """Collaborators handed to every hook call."""

    store: Store
    resolver: FieldResolver
    checklist_title: str = DEFAULT_CHECKLIST_TITLE


# A hook receives the event kind and the subject card id. It must return
# skipped() straight away for kinds it does not handle, and raise on failure.
Hook = Callable[[str, str, HookContext], RuleResult]
