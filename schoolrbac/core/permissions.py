from __future__ import annotations
"""Permission resolution: role-derived access merged with per-staff overrides.

A staff member's access to a (sub_module_id, category_id) pair is two flags,
view_access and edit_access. Role rows give the baseline; an override row for
the same pair replaces it entirely. The merged list is derived on every load
and never persisted.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

SOURCE_ROLE = 'role'
SOURCE_STAFF = 'staff'
SOURCE_NONE = 'none'
SOURCES = (SOURCE_ROLE, SOURCE_STAFF, SOURCE_NONE)

ACCESS_VIEW = 'view'
ACCESS_EDIT = 'edit'
ACCESS_KINDS = (ACCESS_VIEW, ACCESS_EDIT)

PairKey = Tuple[str, str]


class DuplicatePermissionError(ValueError):
    """Raised when one input list carries the same pair twice."""


@dataclass(frozen=True)
class RolePermission:
    sub_module_id: str
    category_id: str
    view_access: bool = False
    edit_access: bool = False

    @property
    def key(self) -> PairKey:
        return (self.sub_module_id, self.category_id)


@dataclass(frozen=True)
class StaffOverride:
    staff_id: str
    sub_module_id: str
    category_id: str
    view_access: bool = False
    edit_access: bool = False

    @property
    def key(self) -> PairKey:
        return (self.sub_module_id, self.category_id)


@dataclass(frozen=True)
class MergedPermission:
    sub_module_id: str
    category_id: str
    view_access: bool
    edit_access: bool
    source: str

    @property
    def key(self) -> PairKey:
        return (self.sub_module_id, self.category_id)

    def to_dict(self) -> Dict[str, object]:
        return {
            'sub_module_id': self.sub_module_id,
            'category_id': self.category_id,
            'view_access': self.view_access,
            'edit_access': self.edit_access,
            'source': self.source,
        }


def check_access_kind(kind: str) -> str:
    if kind not in ACCESS_KINDS:
        raise ValueError(f"access kind must be one of {ACCESS_KINDS}, got {kind!r}")
    return kind


def _index_unique(rows: Iterable, label: str) -> Dict[PairKey, object]:
    out: Dict[PairKey, object] = {}
    for row in rows:
        if row.key in out:
            raise DuplicatePermissionError(f"duplicate {label} for pair {row.key}")
        out[row.key] = row
    return out


def resolve(
    role_permissions: Iterable[RolePermission],
    staff_overrides: Iterable[StaffOverride],
) -> List[MergedPermission]:
    """Merge role rows with overrides for a single staff member.

    Overrides are emitted first (source 'staff') in input order, then every
    role row whose pair is not overridden (source 'role'). Pairs absent from
    both inputs are not emitted; use lookup() for the 'none' placeholder.
    Role rows must already be collapsed to one per pair.
    """
    by_pair = _index_unique(role_permissions, 'role permission')
    overrides = _index_unique(staff_overrides, 'staff override')

    merged: List[MergedPermission] = []
    for key, ov in overrides.items():
        by_pair.pop(key, None)
        merged.append(MergedPermission(ov.sub_module_id, ov.category_id, ov.view_access, ov.edit_access, SOURCE_STAFF))
    for rp in by_pair.values():
        merged.append(MergedPermission(rp.sub_module_id, rp.category_id, rp.view_access, rp.edit_access, SOURCE_ROLE))
    return merged


def lookup(merged: Iterable[MergedPermission], sub_module_id: str, category_id: str) -> MergedPermission:
    """Return the merged entry for a pair, or the (False, False, 'none') placeholder."""
    for perm in merged:
        if perm.sub_module_id == sub_module_id and perm.category_id == category_id:
            return perm
    return MergedPermission(sub_module_id, category_id, False, False, SOURCE_NONE)


def has_access(merged: Iterable[MergedPermission], sub_module_id: str, category_id: str, kind: str) -> bool:
    check_access_kind(kind)
    perm = lookup(merged, sub_module_id, category_id)
    return perm.view_access if kind == ACCESS_VIEW else perm.edit_access


def clamp(view_access: bool, edit_access: bool) -> Tuple[bool, bool]:
    """Edit access never survives without view access."""
    return bool(view_access), bool(edit_access) and bool(view_access)


__all__ = [
    'RolePermission', 'StaffOverride', 'MergedPermission', 'DuplicatePermissionError',
    'resolve', 'lookup', 'has_access', 'clamp', 'check_access_kind',
    'SOURCE_ROLE', 'SOURCE_STAFF', 'SOURCE_NONE', 'SOURCES',
    'ACCESS_VIEW', 'ACCESS_EDIT', 'ACCESS_KINDS',
]
