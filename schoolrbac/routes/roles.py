from flask import Blueprint, request, abort
from sqlalchemy import select
from schoolrbac import get_db
from schoolrbac.constants.catalog import ROLE_MANAGEMENT, CATEGORY_VIEW, CATEGORY_EDIT
from schoolrbac.decorators.audit import audit_log
from schoolrbac.decorators.auth import require_access
from schoolrbac.models.authz import Role, RolePermission
from schoolrbac.schemas import RoleCreateIn, RolePermissionsIn
from schoolrbac.services.policy import current_actor, load_role_in_school, replace_role_permissions

roles_bp = Blueprint('roles', __name__)


def serialize_role_permission(rp: RolePermission) -> dict:
    return {
        'sub_module_id': rp.sub_module_id,
        'category_id': rp.category_id,
        'view_access': bool(rp.view_access),
        'edit_access': bool(rp.edit_access),
    }


@roles_bp.get('')
@require_access(ROLE_MANAGEMENT, CATEGORY_VIEW, 'view')
def list_roles():
    actor = current_actor()
    session = get_db()
    rows = session.execute(
        select(Role).where(Role.school_code == actor.school_code).order_by(Role.name.asc())
    ).scalars().all()
    return {'data': [
        {
            'id': r.id,
            'name': r.name,
            'description': r.description,
            'is_system': r.is_system,
            'is_active': r.is_active,
            'permission_count': len(r.permissions),
        }
        for r in rows
    ]}


@roles_bp.post('')
@require_access(ROLE_MANAGEMENT, CATEGORY_EDIT, 'edit')
@audit_log('ROLE.CREATE', entity='Role', entity_id_key='id', meta_keys=['name'])
def create_role():
    actor = current_actor()
    body = RoleCreateIn.model_validate(request.get_json(silent=True) or {})
    session = get_db()
    exists = session.execute(
        select(Role).where(Role.school_code == actor.school_code, Role.name == body.name)
    ).scalar_one_or_none()
    if exists:
        abort(400, description='role exists')
    role = Role(school_code=actor.school_code, name=body.name, description=body.description, is_system=False)
    session.add(role)
    session.flush()
    return {'id': role.id, 'name': role.name}, 201


@roles_bp.get('/<role_id>/permissions')
@require_access(ROLE_MANAGEMENT, CATEGORY_VIEW, 'view')
def get_role_permissions(role_id: str):
    role = load_role_in_school(current_actor(), role_id)
    rows = get_db().execute(
        select(RolePermission)
        .where(RolePermission.role_id == role.id)
        .order_by(RolePermission.sub_module_id, RolePermission.category_id)
    ).scalars().all()
    return {'id': role.id, 'data': [serialize_role_permission(rp) for rp in rows]}


@roles_bp.put('/<role_id>/permissions')
@require_access(ROLE_MANAGEMENT, CATEGORY_EDIT, 'edit')
@audit_log(
    'ROLE.PERM.REPLACE',
    entity='Role',
    entity_id_key='id',
    meta_builder=lambda data, a, kw: {'count': data.get('count')},
)
def put_role_permissions(role_id: str):
    role = load_role_in_school(current_actor(), role_id)
    body = RolePermissionsIn.model_validate(request.get_json(silent=True) or {})
    count = replace_role_permissions(role, body.permissions)
    return {'id': role.id, 'count': count}
