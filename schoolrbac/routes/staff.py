from flask import Blueprint, request, abort
from sqlalchemy import select, func, or_
from schoolrbac import get_db
from schoolrbac.config.pagination import normalize_pagination
from schoolrbac.constants.catalog import ROLE_MANAGEMENT, CATEGORY_VIEW, CATEGORY_EDIT
from schoolrbac.decorators.audit import audit_log
from schoolrbac.decorators.auth import require_access
from schoolrbac.models.authz import Staff, StaffRole, Role
from schoolrbac.schemas import StaffRolesIn
from schoolrbac.services.policy import current_actor, load_staff_in_school, set_staff_roles

staff_bp = Blueprint('staff', __name__)


def serialize_staff(s: Staff) -> dict:
    return {'id': s.id, 'staff_id': s.staff_id, 'full_name': s.full_name, 'email': s.email, 'designation': s.designation}


@staff_bp.get('')
@require_access(ROLE_MANAGEMENT, CATEGORY_VIEW, 'view')
def list_staff():
    """Roster for the acting staff member's school; `q` filters name, staff id and email."""
    actor = current_actor()
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))
    stmt = select(Staff).where(Staff.school_code == actor.school_code, Staff.is_active.is_(True))
    q = (request.args.get('q') or '').strip()
    if q:
        like = f'%{q.lower()}%'
        stmt = stmt.where(or_(
            func.lower(Staff.full_name).like(like),
            func.lower(Staff.staff_id).like(like),
            func.lower(Staff.email).like(like),
        ))
    session = get_db()
    total = session.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    rows = session.execute(stmt.order_by(Staff.full_name.asc(), Staff.id.asc()).offset(offset).limit(limit)).scalars().all()
    return {
        'data': [serialize_staff(s) for s in rows],
        'pagination': {'total': total, 'limit': limit, 'offset': offset, 'returned': len(rows)},
    }


@staff_bp.get('/<staff_id>/roles')
@require_access(ROLE_MANAGEMENT, CATEGORY_VIEW, 'view')
def list_staff_roles(staff_id: str):
    staff = load_staff_in_school(current_actor(), staff_id)
    session = get_db()
    rows = session.execute(
        select(StaffRole, Role)
        .join(Role, Role.id == StaffRole.role_id)
        .where(StaffRole.staff_id == staff.id, StaffRole.is_active.is_(True))
        .order_by(Role.name.asc())
    ).all()
    return {'data': [
        {'role_id': role.id, 'role_name': role.name, 'is_system': role.is_system, 'assigned_by': sr.assigned_by}
        for sr, role in rows
    ]}


@staff_bp.put('/<staff_id>/roles')
@require_access(ROLE_MANAGEMENT, CATEGORY_EDIT, 'edit')
@audit_log('STAFF.ROLES.SET', entity='Staff', entity_id_arg='staff_id', meta_keys=['role_ids'])
def replace_staff_roles(staff_id: str):
    actor = current_actor()
    body = StaffRolesIn.model_validate(request.get_json(silent=True) or {})
    staff = load_staff_in_school(actor, staff_id)
    role_ids = set_staff_roles(actor, staff, body.role_ids, body.assigned_by)
    return {'staff_id': staff.id, 'role_ids': role_ids}
