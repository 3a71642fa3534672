from __future__ import annotations
"""In-memory draft of a staff member's permission overrides.

The editor holds only pairs the operator touched (or that were already
overridden when the staff member was loaded). Everything else inherits the
merged baseline. to_save_list() is the exact payload for the save endpoint.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .permissions import (
    ACCESS_VIEW,
    SOURCE_ROLE,
    SOURCE_STAFF,
    MergedPermission,
    check_access_kind,
    clamp,
    lookup,
)


@dataclass
class OverrideEntry:
    """Working values for one pair. Edit access is cleared whenever view is off."""
    view_access: bool = False
    edit_access: bool = False
    from_role: bool = False
    # edit value cleared by the last view-off cascade; restored on view-on
    held_edit: bool = field(default=False, repr=False, compare=False)

    def __setattr__(self, name, value):
        if name == 'view_access':
            value = bool(value)
            if not value and 'edit_access' in self.__dict__:
                object.__setattr__(self, 'edit_access', False)
        elif name == 'edit_access':
            value = bool(value) and self.__dict__.get('view_access', False)
        object.__setattr__(self, name, value)

    def as_dict(self) -> Dict[str, bool]:
        return {'view_access': self.view_access, 'edit_access': self.edit_access, 'from_role': self.from_role}


class OverrideEditor:
    def __init__(self, staff_id: Optional[str] = None):
        self.staff_id = staff_id
        self.overrides: Dict[str, Dict[str, OverrideEntry]] = {}

    @classmethod
    def from_merged(cls, merged: Iterable[MergedPermission], staff_id: Optional[str] = None) -> 'OverrideEditor':
        """Seed the working map with the pairs that are already overridden."""
        editor = cls(staff_id)
        for perm in merged:
            if perm.source != SOURCE_STAFF:
                continue
            editor.overrides.setdefault(perm.sub_module_id, {})[perm.category_id] = OverrideEntry(
                perm.view_access, perm.edit_access, from_role=False
            )
        return editor

    def get(self, sub_module_id: str, category_id: str) -> Optional[OverrideEntry]:
        return self.overrides.get(sub_module_id, {}).get(category_id)

    def is_overridden(self, sub_module_id: str, category_id: str) -> bool:
        return self.get(sub_module_id, category_id) is not None

    def effective(self, sub_module_id: str, category_id: str, merged_baseline: Iterable[MergedPermission]):
        """(view_access, edit_access) as the operator currently sees it."""
        entry = self.get(sub_module_id, category_id)
        if entry is not None:
            return entry.view_access, entry.edit_access
        base = lookup(merged_baseline, sub_module_id, category_id)
        return clamp(base.view_access, base.edit_access)

    def toggle(self, sub_module_id: str, category_id: str, kind: str, merged_baseline: Iterable[MergedPermission]) -> OverrideEntry:
        check_access_kind(kind)
        entry = self.get(sub_module_id, category_id)
        if entry is None:
            base = lookup(merged_baseline, sub_module_id, category_id)
            entry = OverrideEntry(base.view_access, base.edit_access, from_role=base.source == SOURCE_ROLE)
            self.overrides.setdefault(sub_module_id, {})[category_id] = entry

        if kind == ACCESS_VIEW:
            if entry.view_access:
                entry.held_edit = entry.edit_access
                entry.view_access = False
            else:
                entry.view_access = True
                entry.edit_access = entry.held_edit
                entry.held_edit = False
        else:
            # no-op while view is off
            entry.edit_access = not entry.edit_access
            entry.held_edit = False
        return entry

    def remove_override(self, sub_module_id: str, category_id: str) -> None:
        per_sub = self.overrides.get(sub_module_id)
        if not per_sub or category_id not in per_sub:
            return
        del per_sub[category_id]
        if not per_sub:
            del self.overrides[sub_module_id]

    def to_save_list(self) -> List[Dict[str, object]]:
        return [
            {
                'sub_module_id': sub_module_id,
                'category_id': category_id,
                'view_access': entry.view_access,
                'edit_access': entry.edit_access,
            }
            for sub_module_id, per_sub in self.overrides.items()
            for category_id, entry in per_sub.items()
        ]

    def clear(self) -> None:
        self.overrides = {}

    def __len__(self) -> int:
        return sum(len(per_sub) for per_sub in self.overrides.values())


__all__ = ['OverrideEditor', 'OverrideEntry']
