"""Keeps a parent's "Pronto" checklist in sync with its child cards."""

from .events import ACT_ARCHIVED_CARD, ACT_CREATE_CARD
from .hooks import HookContext, RuleResult, applied, skipped


def _sync_parent_item(card_id: str, ctx: HookContext, is_finished: bool) -> RuleResult:
    card = ctx.store.find_card(card_id)
    if not card.has_parent:
        return skipped("card has no parent")
    ctx.store.upsert_checklist_item(card.parent_id, ctx.checklist_title, card.title, is_finished)
    return applied(f"'{card.title}' on parent {card.parent_id} finished={is_finished}")


def child_created(kind: str, card_id: str, ctx: HookContext) -> RuleResult:
    """Add an unfinished item for a new child card to its parent's checklist."""
    if kind != ACT_CREATE_CARD:
        return skipped(f"not {ACT_CREATE_CARD}")
    return _sync_parent_item(card_id, ctx, is_finished=False)


def child_archived(kind: str, card_id: str, ctx: HookContext) -> RuleResult:
    """Mark an archived child card's item on its parent's checklist as finished."""
    if kind != ACT_ARCHIVED_CARD:
        return skipped(f"not {ACT_ARCHIVED_CARD}")
    return _sync_parent_item(card_id, ctx, is_finished=True)
