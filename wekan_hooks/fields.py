"""Hooks that fill custom fields of cards on the Materiais board.

Both hooks run on ``act-moveCard`` and never overwrite a field that
already holds a value:

- propagate_ipl copies the title of the card's grandparent into ``ipl``.
- fill_path computes the storage path of the material into ``path``.
"""

import re

from .errors import PathBuildError
from .events import ACT_MOVE_CARD
from .hooks import HookContext, RuleResult, applied, skipped
from .models import Card
from .resolver import ResolvedFields

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]+")

PATH_ROOT = "/operacoes/"
PATH_EXTENSION = ".dd"


def normalize(value: str) -> str:
    """Reduce a value to a filesystem-safe token.

    Everything from the first ``/`` on is dropped, then every character
    outside ``[a-zA-Z0-9_-]`` is removed.
    """
    return _UNSAFE_CHARS.sub("", value.split("/", 1)[0])


def build_path(card: Card, ids: ResolvedFields) -> str:
    """
    Compute the storage path of a material card.

    The layout is
    ``/operacoes/<ipl|registro>/[auto_<auto>/][item<item>_<title>/item<item>_]<title>.dd``.
    The first segment is ``ipl`` when it holds a value, else ``registro``.
    The auto and item segments appear whenever the card carries the field.

    Args:
        card: The material card
        ids: Resolved custom-field ids

    Returns:
        The path, with every interpolated value normalized

    Raises:
        PathBuildError: If the card has neither ipl nor registro
    """
    values = card.custom_fields
    title = normalize(card.title)

    if values.has_value(ids["ipl"]):
        root = values[ids["ipl"]]
    elif values.has_value(ids["registro"]):
        root = values[ids["registro"]]
    else:
        raise PathBuildError(f"card {card.id} does not have ipl or registro in custom fields")

    parts = [PATH_ROOT, normalize(root), "/"]

    auto = values.get(ids["auto"])
    if auto is not None:
        parts += ["auto_", normalize(auto), "/"]

    item = values.get(ids["item"])
    if item is not None:
        item = normalize(item)
        parts += [f"item{item}_{title}/", f"item{item}_"]

    parts += [title, PATH_EXTENSION]
    return "".join(parts)


def _load_material(card_id: str, ctx: HookContext) -> tuple[Card | None, ResolvedFields, str]:
    """Resolve ids and load the card, or return a skip reason if it is off-board."""
    ids = ctx.resolver.resolve()
    card = ctx.store.find_card(card_id)
    if card.board_id != ids.board_id:
        return None, ids, f"card is not on board {ctx.resolver.board_title}"
    return card, ids, ""


def propagate_ipl(kind: str, card_id: str, ctx: HookContext) -> RuleResult:
    """Copy the grandparent's title into the card's ``ipl`` field."""
    if kind != ACT_MOVE_CARD:
        return skipped(f"not {ACT_MOVE_CARD}")

    card, ids, reason = _load_material(card_id, ctx)
    if card is None:
        return skipped(reason)
    if card.custom_fields.has_value(ids["ipl"]):
        return skipped("ipl already filled")
    if not card.has_parent:
        return skipped("material has no parent")

    parent = ctx.store.find_card(card.parent_id)
    if not parent.has_parent:
        return skipped("material has no grandparent")
    grandparent = ctx.store.find_card(parent.parent_id)

    ctx.store.set_custom_field(card.id, ids["ipl"], grandparent.title)
    return applied(f"ipl={grandparent.title!r}")


def fill_path(kind: str, card_id: str, ctx: HookContext) -> RuleResult:
    """Store the computed storage path in the card's ``path`` field."""
    if kind != ACT_MOVE_CARD:
        return skipped(f"not {ACT_MOVE_CARD}")

    card, ids, reason = _load_material(card_id, ctx)
    if card is None:
        return skipped(reason)
    if card.custom_fields.has_value(ids["path"]):
        return skipped("path already filled")

    path = build_path(card, ids)
    ctx.store.set_custom_field(card.id, ids["path"], path)
    return applied(f"path={path!r}")
