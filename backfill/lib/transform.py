"""Record to write-instruction mapping."""

from __future__ import annotations

from typing import Iterable, List, Optional

from backfill.lib.models import Record, WriteInstruction

__all__ = ["Transformer", "transform", "transform_all"]


def transform(
    record: Record,
    target_field: str,
    unique_key: str = "id",
) -> Optional[WriteInstruction]:
    """Map a record to a set-update of ``target_field``.

    Returns None to skip records whose source value is missing or blank.
    """
    if record.source_value is None:
        return None

    value = record.source_value.strip()
    if not value:
        return None

    return WriteInstruction(
        id=record.id,
        target_field=target_field,
        values=(value,),
        unique_key=unique_key,
    )


def transform_all(
    records: Iterable[Record],
    target_field: str,
    unique_key: str = "id",
) -> List[WriteInstruction]:
    """Transform records in order, dropping the ones that yield nothing."""
    instructions = []
    for record in records:
        instruction = transform(record, target_field, unique_key)
        if instruction is not None:
            instructions.append(instruction)
    return instructions


class Transformer:
    """Transformer bound to one target field and document key."""

    def __init__(self, target_field: str, unique_key: str = "id") -> None:
        self.target_field = target_field
        self.unique_key = unique_key

    def transform(self, record: Record) -> Optional[WriteInstruction]:
        return transform(record, self.target_field, self.unique_key)

    def transform_all(self, records: Iterable[Record]) -> List[WriteInstruction]:
        return transform_all(records, self.target_field, self.unique_key)
