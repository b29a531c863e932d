"""
Persistence of display order for sortable tables.
"""
from dataclasses import dataclass, field
from typing import List, Sequence
import logging

from studio_cms.errors import RowStoreError
from studio_cms.services.row_store import RowStore
from studio_cms.utils.reorder import OrderUpdate, reorder

logger = logging.getLogger(__name__)


@dataclass
class OrderResult:
    applied: int = 0
    failed_ids: List[str] = field(default_factory=list)


async def apply_order_updates(store: RowStore, model, updates: Sequence[OrderUpdate]) -> OrderResult:
    """
    Persist order updates as independent single-row writes.

    A failed write is logged and reported; it does not stop the others. The
    list may be briefly inconsistent until the next fetch re-sorts it.
    """
    result = OrderResult()
    for update in updates:
        try:
            await store.update(model, update.id, {"order": update.order})
            result.applied += 1
        except RowStoreError as e:
            logger.warning(f"Failed to set order={update.order} on {model.__tablename__} {update.id}: {e.message}")
            result.failed_ids.append(update.id)

    if result.failed_ids:
        logger.warning(
            f"Partial reorder of {model.__tablename__}: "
            f"{result.applied} applied, {len(result.failed_ids)} failed"
        )
    else:
        logger.info(f"Reordered {result.applied} {model.__tablename__} row(s)")
    return result


async def reorder_siblings(store: RowStore, model, moved_id: str, target_id: str, *criteria):
    """
    Load a sibling set in display order, move one record onto another's
    position and persist the resulting order.

    Returns:
        (updates, OrderResult): updates is empty for a no-op move

    Raises:
        RowStoreError: If the siblings cannot be read or no write succeeded
    """
    siblings = await store.select(model, *criteria, order_by=[model.order.asc(), model.id.asc()])
    updates = reorder(siblings, moved_id, target_id)
    if not updates:
        logger.info(f"Reorder of {model.__tablename__} is a no-op (moved={moved_id}, target={target_id})")
        return updates, OrderResult()

    result = await apply_order_updates(store, model, updates)
    if result.applied == 0:
        raise RowStoreError(f"Failed to persist order for {model.__tablename__}", code="reorder_failed")
    return updates, result


async def next_order(store: RowStore, model, *criteria) -> int:
    """Order value that appends a new record after its siblings."""
    current_max = await store.max(model.order, *criteria)
    return 0 if current_max is None else current_max + 1
