"""
Inventory check state machine.

One operator counts one item at a time:

    SEARCHING --query/scan--> SEARCHING (candidates)
    SEARCHING --scan exact SKU / select--> VERIFYING (count pre-filled)
    VERIFYING --submit, count == recorded--> SEARCHING (count verified)
    VERIFYING --submit, count != recorded--> VERIFYING (dispatching)
    VERIFYING --dispatch ok--> SEARCHING
    VERIFYING --dispatch failed--> VERIFYING (error kept, retry or cancel)
    VERIFYING --cancel--> SEARCHING

transition() is pure: it takes the current session, an event and the item
list, and returns the next session plus at most one effect for the caller to
carry out. Nothing here talks to the store.
"""

import re
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Union

from models.identity import PayloadSource
from models.inventory import InventoryItem, ReasonCode
from models.reconciliation import CheckMode, MutationKind, NotificationLevel
from services.identity_payload_service import decode_payload, extract_search_term
from utils.text_utils import contains_ci, fold
from exceptions import InvalidTransitionError

DEFAULT_SEARCH_LIMIT = 5

_COUNT_PATTERN = re.compile(r"^\d+$")


@dataclass(frozen=True)
class MutationIntent:
    """Stock change derived from a submitted count. Quantity is never negative."""
    kind: MutationKind
    quantity: int
    reason_code: ReasonCode
    note: str


@dataclass(frozen=True)
class CheckSession:
    """State of one inventory check."""
    mode: CheckMode = CheckMode.SEARCHING
    search_term: str = ""
    candidates: tuple[InventoryItem, ...] = ()
    selected_item: Optional[InventoryItem] = None
    entered_count: str = ""
    pending_intent: Optional[MutationIntent] = None
    dispatching: bool = False
    last_error: Optional[str] = None

    @property
    def can_submit(self) -> bool:
        """Submit is enabled only for a whole-number count with nothing in flight."""
        return (
            self.mode == CheckMode.VERIFYING
            and not self.dispatching
            and parse_count(self.entered_count) is not None
        )


# ===================
# EVENTS
# ===================

@dataclass(frozen=True)
class QueryEntered:
    term: str


@dataclass(frozen=True)
class ScanReceived:
    content: str


@dataclass(frozen=True)
class CandidateSelected:
    item: InventoryItem


@dataclass(frozen=True)
class CountEntered:
    text: str


@dataclass(frozen=True)
class CountSubmitted:
    pass


@dataclass(frozen=True)
class DispatchSucceeded:
    pass


@dataclass(frozen=True)
class DispatchFailed:
    message: str


@dataclass(frozen=True)
class Cancelled:
    pass


Event = Union[
    QueryEntered, ScanReceived, CandidateSelected, CountEntered,
    CountSubmitted, DispatchSucceeded, DispatchFailed, Cancelled,
]


# ===================
# EFFECTS
# ===================

@dataclass(frozen=True)
class Notify:
    """Message for the operator."""
    level: NotificationLevel
    title: str
    message: str


@dataclass(frozen=True)
class Dispatch:
    """Ask the store to apply a stock mutation."""
    item: InventoryItem
    intent: MutationIntent


Effect = Union[Notify, Dispatch]


# ===================
# HELPERS
# ===================

def parse_count(text: Optional[str]) -> Optional[int]:
    """Whole, non-negative count, or None while the input is not one."""
    text = (text or "").strip()
    if not _COUNT_PATTERN.match(text):
        return None
    return int(text)


def derive_intent(recorded: int, counted: int) -> MutationIntent:
    """
    Map the counted-minus-recorded delta to a mutation.

    The sign selects the kind; the quantity is always the magnitude.
    """
    delta = counted - recorded

    if delta == 0:
        return MutationIntent(MutationKind.NO_OP, 0, ReasonCode.RECOUNT, "")
    if delta > 0:
        return MutationIntent(
            MutationKind.ADD_STOCK,
            delta,
            ReasonCode.RECOUNT,
            f"Inventory check - found {delta} extra units",
        )
    return MutationIntent(
        MutationKind.DEDUCT_STOCK,
        -delta,
        ReasonCode.RECOUNT,
        f"Inventory check - missing {-delta} units",
    )


def search_items(
    items: Sequence[InventoryItem],
    term: str,
    limit: int = DEFAULT_SEARCH_LIMIT
) -> list[InventoryItem]:
    """Case-insensitive substring match on name or SKU, first `limit` hits."""
    term = (term or "").strip()
    if not term:
        return []
    matches = [
        item for item in items
        if contains_ci(item.name, term) or contains_ci(item.sku, term)
    ]
    return matches[:limit]


def _verify(item: InventoryItem, search_term: str = "") -> CheckSession:
    """Start counting an item; the count starts at the recorded quantity."""
    return CheckSession(
        mode=CheckMode.VERIFYING,
        search_term=search_term,
        selected_item=item,
        entered_count=str(item.quantity),
    )


def _reject(session: CheckSession, event: Event, reason: str) -> InvalidTransitionError:
    return InvalidTransitionError(session.mode.value, type(event).__name__, reason)


# ===================
# TRANSITION
# ===================

def transition(
    session: CheckSession,
    event: Event,
    items: Sequence[InventoryItem] = (),
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> tuple[CheckSession, Optional[Effect]]:
    """
    Apply one event.

    Args:
        session: Current state
        event: What happened
        items: Recorded inventory to search in
        limit: Maximum candidates to keep

    Returns:
        (next session, effect or None)

    Raises:
        InvalidTransitionError: If the event is not allowed right now
    """
    if session.mode == CheckMode.SEARCHING:
        return _searching(session, event, items, limit)
    return _verifying(session, event)


def _searching(
    session: CheckSession,
    event: Event,
    items: Sequence[InventoryItem],
    limit: int,
) -> tuple[CheckSession, Optional[Effect]]:
    if isinstance(event, QueryEntered):
        candidates = tuple(search_items(items, event.term, limit))
        return replace(session, search_term=event.term, candidates=candidates), None

    if isinstance(event, ScanReceived):
        decoded = decode_payload(event.content)
        if decoded and decoded.source == PayloadSource.ENVELOPE and decoded.sku:
            term = decoded.sku
        else:
            # Untagged JSON still offers sku/id/name to search by
            term = extract_search_term(event.content)

        if not term:
            return session, Notify(NotificationLevel.INFO, "No results", "Scanned label was empty")

        exact = [item for item in items if fold(item.sku) == fold(term)]
        if len(exact) == 1:
            return _verify(exact[0], search_term=term), None

        candidates = tuple(search_items(items, term, limit))
        next_session = replace(session, search_term=term, candidates=candidates)
        if not candidates:
            return next_session, Notify(
                NotificationLevel.INFO,
                "No results",
                f'No items found for "{term}"',
            )
        return next_session, None

    if isinstance(event, CandidateSelected):
        return _verify(event.item, search_term=session.search_term), None

    raise _reject(session, event, "select an item first")


def _verifying(
    session: CheckSession,
    event: Event,
) -> tuple[CheckSession, Optional[Effect]]:
    item = session.selected_item

    if isinstance(event, DispatchSucceeded):
        if not session.dispatching:
            raise _reject(session, event, "no stock update in progress")
        intent = session.pending_intent
        title = "Stock Added" if intent.kind == MutationKind.ADD_STOCK else "Inventory Updated"
        return CheckSession(), Notify(
            NotificationLevel.SUCCESS,
            title,
            f"{item.name}: {intent.note}",
        )

    if isinstance(event, DispatchFailed):
        if not session.dispatching:
            raise _reject(session, event, "no stock update in progress")
        next_session = replace(session, dispatching=False, last_error=event.message)
        return next_session, Notify(NotificationLevel.ERROR, "Error", event.message)

    if session.dispatching:
        raise _reject(session, event, "stock update in progress")

    if isinstance(event, CountEntered):
        return replace(session, entered_count=event.text), None

    if isinstance(event, Cancelled):
        return CheckSession(), None

    if isinstance(event, CountSubmitted):
        counted = parse_count(session.entered_count)
        if counted is None:
            raise _reject(session, event, "enter a whole-number count")

        intent = derive_intent(item.quantity, counted)

        if intent.kind == MutationKind.NO_OP:
            return CheckSession(), Notify(
                NotificationLevel.SUCCESS,
                "Count Verified",
                f"{item.name} count is correct ({counted})",
            )

        next_session = replace(
            session,
            pending_intent=intent,
            dispatching=True,
            last_error=None,
        )
        return next_session, Dispatch(item=item, intent=intent)

    raise _reject(session, event, "finish or cancel the current count first")
