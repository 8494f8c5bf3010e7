"""
Inventory check workflow.

Drives the state machine in services.reconciliation_machine: loads the item
list, feeds operator events through transition() and carries out the Dispatch
effect against the inventory store.

Store calls are synchronous Supabase requests, so they run in the threadpool
to keep the event loop free.
"""

import time
from typing import Callable, Optional
from uuid import uuid4
import structlog
from fastapi.concurrency import run_in_threadpool

from config import settings
from models.inventory import InventoryItem
from models.reconciliation import (
    CheckSessionResponse,
    MutationIntentResponse,
    MutationKind,
    NotificationResponse,
)
from services.inventory_store_service import STOCK_CHANGED_CODE, get_inventory_store_service
from services.reconciliation_machine import (
    CheckSession,
    Cancelled,
    CandidateSelected,
    CountEntered,
    CountSubmitted,
    Dispatch,
    DispatchFailed,
    DispatchSucceeded,
    Effect,
    Event,
    Notify,
    QueryEntered,
    ScanReceived,
    transition,
)
from exceptions import AppError, CheckSessionNotFoundError

logger = structlog.get_logger(__name__)


class ReconciliationWorkflow:
    """
    One operator's inventory check.

    Owns its session exclusively. Only one stock update can be in flight;
    submitting again before it resolves is rejected by the state machine.
    """

    def __init__(
        self,
        store=None,
        operator_id: Optional[str] = None,
        search_limit: Optional[int] = None,
        session_id: Optional[str] = None,
    ):
        self.store = store or get_inventory_store_service()
        self.operator_id = operator_id
        self.search_limit = search_limit or settings.check_search_limit
        self.session_id = session_id or str(uuid4())
        self.session = CheckSession()
        self.items: list[InventoryItem] = []
        self.notifications: list[Notify] = []

    # ===================
    # OPERATOR ACTIONS
    # ===================

    async def open(self) -> CheckSession:
        """Load the recorded inventory to search in."""
        self.items = await run_in_threadpool(self.store.get_items)
        logger.info(
            "inventory_check_opened",
            session_id=self.session_id,
            items=len(self.items)
        )
        return self.session

    async def query(self, term: str) -> CheckSession:
        """Free-text search by name or SKU."""
        self._apply(QueryEntered(term))
        return self.session

    async def scan(self, content: str) -> CheckSession:
        """Scanned label content; an exact single SKU match starts the count."""
        self._apply(ScanReceived(content))
        logger.info(
            "inventory_check_scanned",
            session_id=self.session_id,
            mode=self.session.mode.value,
            candidates=len(self.session.candidates)
        )
        return self.session

    async def select(self, item_id: str) -> CheckSession:
        """
        Pick an item to count.

        The item is re-read so the count starts from the current recorded
        quantity, not the one loaded when the check was opened.

        Raises:
            InventoryItemNotFoundError: If the id is unknown to the store
        """
        item = await self._refresh_item(item_id)
        self._apply(CandidateSelected(item))
        return self.session

    async def enter_count(self, text: str) -> CheckSession:
        """Record the physical count as typed."""
        self._apply(CountEntered(text))
        return self.session

    async def cancel(self) -> CheckSession:
        """Back to searching without changing stock."""
        self._apply(Cancelled())
        logger.info("inventory_check_cancelled", session_id=self.session_id)
        return self.session

    async def submit(self) -> CheckSession:
        """
        Confirm the count.

        Equal counts finish immediately; otherwise waits for the stock update
        and ends back in searching (success) or still verifying (failure).
        """
        effect = self._apply(CountSubmitted())
        if isinstance(effect, Dispatch):
            await self._dispatch(effect)
        return self.session

    # ===================
    # INTERNALS
    # ===================

    def _apply(self, event: Event) -> Optional[Effect]:
        self.session, effect = transition(
            self.session, event, self.items, self.search_limit
        )
        if isinstance(effect, Notify):
            self.notifications.append(effect)
        return effect

    async def _dispatch(self, effect: Dispatch) -> None:
        intent = effect.intent
        item = effect.item

        if intent.kind == MutationKind.ADD_STOCK:
            operation = self.store.add_stock
        else:
            operation = self.store.adjust_stock

        logger.info(
            "inventory_check_dispatching",
            session_id=self.session_id,
            item_id=item.id,
            kind=intent.kind.value,
            quantity=intent.quantity
        )

        try:
            updated = await run_in_threadpool(
                operation,
                item.id,
                intent.quantity,
                intent.reason_code,
                intent.note,
                self.operator_id,
                expected_quantity=item.quantity,
            )
        except AppError as e:
            logger.warning(
                "inventory_check_dispatch_failed",
                session_id=self.session_id,
                item_id=item.id,
                code=e.code,
                error=e.message
            )
            self._apply(DispatchFailed(e.message))
            if e.code == STOCK_CHANGED_CODE:
                await self._refresh_cached(item.id)
            return
        except Exception as e:
            logger.error(
                "inventory_check_dispatch_error",
                session_id=self.session_id,
                item_id=item.id,
                error=str(e),
                error_type=type(e).__name__
            )
            self._apply(DispatchFailed(str(e) or type(e).__name__))
            return

        self._apply(DispatchSucceeded())

        if isinstance(updated, InventoryItem):
            self._cache(updated)

        logger.info(
            "inventory_check_dispatched",
            session_id=self.session_id,
            item_id=item.id,
            kind=intent.kind.value,
            quantity=intent.quantity
        )

    async def _refresh_item(self, item_id: str) -> InventoryItem:
        item = await run_in_threadpool(self.store.get_by_id, item_id)
        self._cache(item)
        return item

    async def _refresh_cached(self, item_id: str) -> None:
        """Reload one cached item after a conflict; the session is unaffected."""
        try:
            await self._refresh_item(item_id)
        except AppError as e:
            logger.warning(
                "inventory_check_refresh_failed",
                session_id=self.session_id,
                item_id=item_id,
                error=e.message
            )

    def _cache(self, item: InventoryItem) -> None:
        self.items = [item if i.id == item.id else i for i in self.items]

    def to_response(self) -> CheckSessionResponse:
        """Serialize the session; pending notifications are handed over once."""
        session = self.session
        notifications, self.notifications = self.notifications, []

        return CheckSessionResponse(
            session_id=self.session_id,
            mode=session.mode,
            search_term=session.search_term,
            candidates=list(session.candidates),
            selected_item=session.selected_item,
            entered_count=session.entered_count,
            can_submit=session.can_submit,
            dispatching=session.dispatching,
            pending_intent=(
                MutationIntentResponse.model_validate(session.pending_intent)
                if session.pending_intent else None
            ),
            last_error=session.last_error,
            notifications=[NotificationResponse.model_validate(n) for n in notifications],
        )


class CheckSessionManager:
    """
    In-memory registry of open inventory checks.

    Each check is independent; nothing is shared between them. Checks idle
    for longer than the TTL are dropped whenever the registry is used.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.ttl_seconds = ttl_seconds or settings.check_session_ttl_seconds
        self._clock = clock
        self._workflows: dict[str, ReconciliationWorkflow] = {}
        self._last_activity: dict[str, float] = {}

    async def create(
        self,
        operator_id: Optional[str] = None,
        store=None
    ) -> ReconciliationWorkflow:
        """Open a new check with a fresh item list."""
        self.prune()
        workflow = ReconciliationWorkflow(store=store, operator_id=operator_id)
        await workflow.open()
        self._workflows[workflow.session_id] = workflow
        self._last_activity[workflow.session_id] = self._clock()
        return workflow

    def get(self, session_id: str) -> ReconciliationWorkflow:
        """
        Look up an open check and mark it active.

        Raises:
            CheckSessionNotFoundError: If no such session is open (or it expired)
        """
        self.prune()
        workflow = self._workflows.get(session_id)
        if workflow is None:
            raise CheckSessionNotFoundError(session_id)
        self._last_activity[session_id] = self._clock()
        return workflow

    def close(self, session_id: str) -> None:
        """Discard a check. Raises CheckSessionNotFoundError if unknown."""
        if self._workflows.pop(session_id, None) is None:
            raise CheckSessionNotFoundError(session_id)
        self._last_activity.pop(session_id, None)
        logger.info("inventory_check_closed", session_id=session_id)

    def prune(self) -> int:
        """
        Drop checks idle past the TTL.

        A check with a stock update in flight is kept until it resolves.

        Returns:
            Number of checks dropped
        """
        cutoff = self._clock() - self.ttl_seconds
        expired = [
            session_id for session_id, seen in self._last_activity.items()
            if seen < cutoff and not self._workflows[session_id].session.dispatching
        ]

        for session_id in expired:
            del self._workflows[session_id]
            del self._last_activity[session_id]

        if expired:
            logger.info("inventory_checks_expired", count=len(expired), open=len(self._workflows))

        return len(expired)

    def __len__(self) -> int:
        return len(self._workflows)


# Singleton instance for convenience
_check_session_manager: Optional[CheckSessionManager] = None


def get_check_session_manager() -> CheckSessionManager:
    """Get or create CheckSessionManager instance."""
    global _check_session_manager
    if _check_session_manager is None:
        _check_session_manager = CheckSessionManager()
    return _check_session_manager
