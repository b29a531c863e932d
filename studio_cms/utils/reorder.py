"""
Drag-and-drop reordering of sibling records.
"""
from typing import Any, List, NamedTuple, Sequence


class OrderUpdate(NamedTuple):
    id: str
    order: int


def _record_id(record: Any) -> Any:
    if isinstance(record, dict):
        return record.get("id")
    return getattr(record, "id", None)


def reorder(records: Sequence[Any], moved_id: Any, target_id: Any) -> List[OrderUpdate]:
    """
    Move one record onto another's position and re-sequence the whole list.

    The moved record is taken out and reinserted at the index the target
    occupied, then every record gets order = index (0-based). One update is
    returned per record, unchanged ones included, since persistence is a batch
    of independent writes rather than a diff.

    Args:
        records: Sibling records in current display order (objects or dicts with an id)
        moved_id: Id of the dragged record
        target_id: Id of the record it was dropped on

    Returns:
        List[OrderUpdate]: Empty when the ids are equal or either is missing.
    """
    if moved_id == target_id:
        return []

    ids = [_record_id(record) for record in records]
    if moved_id not in ids or target_id not in ids:
        return []

    moved_index = ids.index(moved_id)
    target_index = ids.index(target_id)

    ids.pop(moved_index)
    ids.insert(target_index, moved_id)

    return [OrderUpdate(id=record_id, order=index) for index, record_id in enumerate(ids)]
