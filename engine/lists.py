"""Copy-on-write helpers for id-keyed record lists (debts, uses of funds, affiliates)

Every function returns a new tuple and leaves its input untouched.
"""
from dataclasses import fields, replace
from typing import Iterable, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


def next_id(items: Sequence) -> str:
    """One past the largest numeric id in the list"""
    numeric = [int(item.id) for item in items if str(item.id).isdigit()]
    return str(max(numeric) + 1 if numeric else 1)


def get_item(items: Sequence[T], item_id: str) -> Optional[T]:
    for item in items:
        if item.id == item_id:
            return item
    return None


def add_item(items: Sequence[T], item: T) -> Tuple[T, ...]:
    return tuple(items) + (item,)


def check_fields(record, changes: Iterable[str]) -> None:
    """Raise ValueError for any name that is not a field of the record"""
    names = {f.name for f in fields(record)}
    unknown = sorted(set(changes) - names)
    if unknown:
        raise ValueError(f"Unknown field(s) for {type(record).__name__}: {', '.join(unknown)}")


def update_item(items: Sequence[T], item_id: str, **changes) -> Tuple[T, ...]:
    """Replace fields on the item with the given id"""
    updated = []
    for item in items:
        if item.id == item_id:
            check_fields(item, changes)
            item = replace(item, **changes)
        updated.append(item)
    return tuple(updated)


def remove_item(items: Sequence[T], item_id: str, min_items: int = 1) -> Tuple[T, ...]:
    """Drop the item with the given id unless that leaves fewer than min_items"""
    if len(items) <= min_items:
        return tuple(items)
    return tuple(item for item in items if item.id != item_id)


def clear_record(record: T, keep: Iterable[str] = ()) -> T:
    """Reset a record to its field defaults, keeping the named fields"""
    kept = {name: getattr(record, name) for name in keep}
    return type(record)(**kept)


def clear_item(items: Sequence[T], item_id: str, keep: Iterable[str] = ("id",)) -> Tuple[T, ...]:
    keep = tuple(keep)
    return tuple(
        clear_record(item, keep) if item.id == item_id else item
        for item in items
    )


def reorder_items(items: Sequence[T], from_index: int, to_index: int) -> Tuple[T, ...]:
    """Move one item to a new position"""
    if not (0 <= from_index < len(items)) or not (0 <= to_index < len(items)):
        raise ValueError(f"Index out of range: {from_index} -> {to_index} (size {len(items)})")
    reordered = list(items)
    reordered.insert(to_index, reordered.pop(from_index))
    return tuple(reordered)
