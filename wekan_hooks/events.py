"""Wekan activity kinds and the outgoing-webhook envelope."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

ACT_CREATE_CARD = "act-createCard"
ACT_ARCHIVED_CARD = "act-archivedCard"
ACT_MOVE_CARD = "act-moveCard"

# Kinds that trigger a dispatch. Everything else is acknowledged and dropped.
HANDLED_EVENTS = frozenset({ACT_CREATE_CARD, ACT_ARCHIVED_CARD, ACT_MOVE_CARD})

# All activity kinds Wekan sends through outgoing webhooks.
# Used for logging only. Hooks compare against the constants above.
KNOWN_EVENTS = frozenset(
    {
        # Board events
        "act-addBoardMember",
        "act-joinMember",
        "act-unjoinMember",
        # Card events
        ACT_CREATE_CARD,
        ACT_ARCHIVED_CARD,
        ACT_MOVE_CARD,
        "act-restoredCard",
        # Checklist events
        "act-addChecklist",
        "act-removeChecklist",
        "act-completeChecklist",
        "act-uncompleteChecklist",
        "act-addChecklistItem",
        "act-removedChecklistItem",
        "act-checkedItem",
        "act-uncheckedItem",
        # Label events
        "act-addedLabel",
        "act-removedLabel",
        # Custom field events
        "act-createCustomField",
        "act-setCustomField",
        "act-unsetCustomField",
        # List and swimlane events
        "act-createList",
        "act-archivedList",
        "act-createSwimlane",
        "act-archivedSwimlane",
    }
)


def is_handled(kind: str) -> bool:
    """Return True if events of this kind are dispatched to the hooks."""
    return kind in HANDLED_EVENTS


@dataclass(frozen=True)
class Event:
    """A board change notification: what happened and to which card."""

    kind: str
    card_id: str


class HookMessage(BaseModel):
    """JSON body of a Wekan outgoing webhook delivery."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    text: str | None = None
    card_id: str | None = Field(default=None, alias="cardId")
    list_id: str | None = Field(default=None, alias="listId")
    board_id: str | None = Field(default=None, alias="boardId")
    user: str | None = None
    card: str | None = None
    swimlane_id: str | None = Field(default=None, alias="swimlaneId")
    description: str | None = None

    def to_event(self) -> Event:
        """Extract the event kind (carried in ``description``) and subject card."""
        return Event(kind=self.description or "", card_id=self.card_id or "")
