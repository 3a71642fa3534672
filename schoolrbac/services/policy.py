from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Tuple
import logging
from flask import abort
from flask_jwt_extended import get_jwt, get_jwt_identity
from sqlalchemy import select, delete
from schoolrbac import get_db
from schoolrbac.core.context import ActorContext
from schoolrbac.core.permissions import (
    ACCESS_VIEW,
    MergedPermission,
    RolePermission as RoleGrant,
    StaffOverride,
    check_access_kind,
    clamp,
    resolve,
)
from schoolrbac.models.authz import Staff, Role, StaffRole, RolePermission, StaffPermission
from schoolrbac.models.catalog import SubModule, PermissionCategory

logger = logging.getLogger(__name__)


def current_actor() -> ActorContext:
    return ActorContext.from_claims(get_jwt_identity(), get_jwt())


def load_staff_in_school(actor: ActorContext, staff_id: str) -> Staff:
    """Staff row for staff_id, or 404 when it belongs to another school."""
    session = get_db()
    staff = session.execute(select(Staff).where(Staff.id == staff_id)).scalar_one_or_none()
    if not staff or staff.school_code != actor.school_code:
        abort(404, description='Staff not found')
    return staff


def load_role_in_school(actor: ActorContext, role_id: str) -> Role:
    session = get_db()
    role = session.execute(select(Role).where(Role.id == role_id)).scalar_one_or_none()
    if not role or role.school_code != actor.school_code:
        abort(404, description='Role not found')
    return role


def active_role_ids(staff_id: str) -> List[str]:
    session = get_db()
    rows = session.execute(
        select(StaffRole.role_id)
        .join(Role, Role.id == StaffRole.role_id)
        .where(StaffRole.staff_id == staff_id, StaffRole.is_active.is_(True), Role.is_active.is_(True))
    ).scalars().all()
    return list(rows)


def role_permissions_for_staff(staff_id: str) -> List[RoleGrant]:
    """Role-derived access for a staff member, one row per pair.

    When several active roles cover the same pair a flag is granted if any
    role grants it. Edit never survives without view.
    """
    role_ids = active_role_ids(staff_id)
    if not role_ids:
        return []
    session = get_db()
    rows = session.execute(
        select(RolePermission)
        .where(RolePermission.role_id.in_(role_ids))
        .order_by(RolePermission.sub_module_id, RolePermission.category_id)
    ).scalars().all()
    collapsed: Dict[Tuple[str, str], Tuple[bool, bool]] = {}
    for rp in rows:
        key = (rp.sub_module_id, rp.category_id)
        view, edit = collapsed.get(key, (False, False))
        collapsed[key] = (view or bool(rp.view_access), edit or bool(rp.edit_access))
    return [RoleGrant(sm, cat, *clamp(view, edit)) for (sm, cat), (view, edit) in collapsed.items()]


def staff_overrides_for(staff_id: str) -> List[StaffOverride]:
    session = get_db()
    rows = session.execute(
        select(StaffPermission)
        .where(StaffPermission.staff_id == staff_id)
        .order_by(StaffPermission.sub_module_id, StaffPermission.category_id)
    ).scalars().all()
    return [StaffOverride(sp.staff_id, sp.sub_module_id, sp.category_id, bool(sp.view_access), bool(sp.edit_access)) for sp in rows]


def merged_permissions_for(actor: ActorContext, staff_id: str) -> List[MergedPermission]:
    staff = load_staff_in_school(actor, staff_id)
    return resolve(role_permissions_for_staff(staff.id), staff_overrides_for(staff.id))


def _pair_for_keys(sub_module_key: str, category_key: str) -> Optional[Tuple[str, str]]:
    session = get_db()
    row = session.execute(
        select(SubModule.id, PermissionCategory.id)
        .join(PermissionCategory, PermissionCategory.sub_module_id == SubModule.id)
        .where(SubModule.sub_module_key == sub_module_key, PermissionCategory.category_key == category_key)
    ).first()
    return (row[0], row[1]) if row else None


def check_access(staff_id: str, sub_module_key: str, category_key: str, kind: str) -> bool:
    """Override first, then any active role, else deny."""
    check_access_kind(kind)
    pair = _pair_for_keys(sub_module_key, category_key)
    if pair is None:
        return False
    sub_module_id, category_id = pair
    session = get_db()
    override = session.execute(
        select(StaffPermission).where(
            StaffPermission.staff_id == staff_id,
            StaffPermission.sub_module_id == sub_module_id,
            StaffPermission.category_id == category_id,
        )
    ).scalar_one_or_none()
    if override is not None:
        view, edit = clamp(override.view_access, override.edit_access)
        return view if kind == ACCESS_VIEW else edit
    for grant in role_permissions_for_staff(staff_id):
        if grant.key == (sub_module_id, category_id):
            return grant.view_access if kind == ACCESS_VIEW else grant.edit_access
    return False


def actor_can(actor: ActorContext, sub_module_key: str, category_key: str, kind: str) -> bool:
    if actor.is_principal:
        return True
    return check_access(actor.staff_id, sub_module_key, category_key, kind)


def assert_pairs_exist(rows: Iterable) -> None:
    """400 unless every row names a category that belongs to its sub-module."""
    rows = list(rows)
    if not rows:
        return
    session = get_db()
    cat_ids = {r.category_id for r in rows}
    owners = dict(session.execute(
        select(PermissionCategory.id, PermissionCategory.sub_module_id).where(PermissionCategory.id.in_(list(cat_ids)))
    ).all())
    bad = sorted(f"{r.sub_module_id}/{r.category_id}" for r in rows if owners.get(r.category_id) != r.sub_module_id)
    if bad:
        abort(400, description=f'Unknown permission pairs: {bad}')


def replace_staff_overrides(actor: ActorContext, staff_id: str, rows: List, assigned_by: Optional[str] = None) -> Dict[str, int]:
    """Make the staff member's overrides exactly `rows`.

    Pairs in rows are upserted; existing overrides for pairs not in rows are
    deleted. Caller commits.
    """
    staff = load_staff_in_school(actor, staff_id)
    assert_pairs_exist(rows)
    session = get_db()
    existing = {
        (sp.sub_module_id, sp.category_id): sp
        for sp in session.execute(select(StaffPermission).where(StaffPermission.staff_id == staff.id)).scalars()
    }
    wanted = {(r.sub_module_id, r.category_id): r for r in rows}
    deleted = 0
    for key, sp in existing.items():
        if key not in wanted:
            session.delete(sp)
            deleted += 1
    assigner = assigned_by or actor.staff_id
    for key, r in wanted.items():
        view, edit = clamp(r.view_access, r.edit_access)
        sp = existing.get(key)
        if sp is None:
            session.add(StaffPermission(
                staff_id=staff.id, sub_module_id=r.sub_module_id, category_id=r.category_id,
                view_access=view, edit_access=edit, assigned_by=assigner,
            ))
        else:
            sp.view_access, sp.edit_access, sp.assigned_by = view, edit, assigner
    session.flush()
    logger.info('Replaced overrides for staff %s: %d saved, %d removed', staff.id, len(wanted), deleted)
    return {'saved': len(wanted), 'removed': deleted}


def replace_role_permissions(role: Role, rows: List) -> int:
    assert_pairs_exist(rows)
    session = get_db()
    session.execute(delete(RolePermission).where(RolePermission.role_id == role.id))
    for r in rows:
        view, edit = clamp(r.view_access, r.edit_access)
        if not view:
            continue  # absence already means no access
        session.add(RolePermission(role_id=role.id, sub_module_id=r.sub_module_id, category_id=r.category_id, view_access=view, edit_access=edit))
    session.flush()
    session.expire(role, ['permissions'])
    return len(rows)


def set_staff_roles(actor: ActorContext, staff: Staff, role_ids: Iterable[str], assigned_by: Optional[str] = None) -> List[str]:
    """Deactivate current assignments and activate exactly role_ids."""
    role_ids = set(role_ids)
    session = get_db()
    roles = session.execute(select(Role).where(Role.id.in_(list(role_ids)))).scalars().all() if role_ids else []
    missing = role_ids - {r.id for r in roles}
    if missing:
        abort(404, description=f'Unknown role ids: {sorted(missing)}')
    if any(r.school_code != staff.school_code for r in roles):
        abort(400, description='One or more roles do not belong to this school')
    if any(not r.is_active for r in roles):
        abort(400, description='One or more roles are inactive')
    existing = {sr.role_id: sr for sr in session.execute(select(StaffRole).where(StaffRole.staff_id == staff.id)).scalars()}
    for rid, sr in existing.items():
        sr.is_active = rid in role_ids
    for rid in role_ids - set(existing):
        session.add(StaffRole(staff_id=staff.id, role_id=rid, is_active=True, assigned_by=assigned_by or actor.staff_id))
    session.flush()
    return sorted(role_ids)
