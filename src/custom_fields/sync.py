"""Whole-set synchronisation of an event's field definitions.

The host always submits the complete list of fields. ``plan_field_sync``
compares it with what is stored and says what to insert, update and delete.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from src.custom_fields.dtos import CustomFieldDraftDTO, CustomFieldDTO


@dataclass(frozen=True)
class FieldSyncPlan:
    to_insert: list[CustomFieldDraftDTO] = field(default_factory=list)
    # (stored field, incoming draft) pairs
    to_update: list[tuple[CustomFieldDTO, CustomFieldDraftDTO]] = field(default_factory=list)
    to_delete: list[CustomFieldDTO] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.to_insert or self.to_update or self.to_delete)


def plan_field_sync(
    existing: Sequence[CustomFieldDTO], incoming: Sequence[CustomFieldDraftDTO]
) -> FieldSyncPlan:
    """Three-way diff of stored definitions against the submitted set.

    Drafts whose id matches a stored field update it. Drafts without an id,
    with an id from another event, or repeating an id already used in this
    set are inserted as new fields. Stored fields nobody claimed are deleted.
    """
    existing_by_id = {custom_field.id: custom_field for custom_field in existing}
    plan = FieldSyncPlan()
    matched = set()
    for draft in incoming:
        stored = existing_by_id.get(draft.id) if draft.id is not None else None
        if stored is None or stored.id in matched:
            plan.to_insert.append(draft)
            continue
        matched.add(stored.id)
        plan.to_update.append((stored, draft))

    plan.to_delete.extend(
        custom_field for custom_field in existing if custom_field.id not in matched
    )
    return plan


def dropped_options(stored: CustomFieldDTO, draft: CustomFieldDraftDTO) -> list[str]:
    """Options of the stored field that the draft no longer offers."""
    kept = {option.strip().lower() for option in draft.options or []}
    return [option for option in stored.options or [] if option.strip().lower() not in kept]
