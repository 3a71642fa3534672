from flask import Blueprint, request, abort
from schoolrbac.constants.catalog import ROLE_MANAGEMENT, CATEGORY_VIEW, CATEGORY_EDIT
from schoolrbac.core.permissions import ACCESS_KINDS
from schoolrbac.decorators.audit import audit_log
from schoolrbac.decorators.auth import require_access
from schoolrbac.schemas import SaveOverridesIn
from schoolrbac.services.policy import (
    current_actor,
    check_access,
    load_staff_in_school,
    merged_permissions_for,
    replace_staff_overrides,
)

perms_bp = Blueprint('permissions', __name__)


@perms_bp.get('/<staff_id>/permissions')
@require_access(ROLE_MANAGEMENT, CATEGORY_VIEW, 'view')
def get_merged_permissions(staff_id: str):
    """Role-derived access merged with the staff member's overrides."""
    merged = merged_permissions_for(current_actor(), staff_id)
    return {'data': [p.to_dict() for p in merged]}


@perms_bp.post('/<staff_id>/permissions')
@require_access(ROLE_MANAGEMENT, CATEGORY_EDIT, 'edit')
@audit_log(
    'STAFF.OVERRIDES.REPLACE',
    entity='Staff',
    entity_id_arg='staff_id',
    meta_builder=lambda data, a, kw: {'saved': data.get('saved'), 'removed': data.get('removed')},
)
def save_overrides(staff_id: str):
    """Replace the staff member's overrides with the submitted list.

    Pairs previously overridden but absent from the payload are deleted.
    """
    body = SaveOverridesIn.model_validate(request.get_json(silent=True) or {})
    result = replace_staff_overrides(current_actor(), staff_id, body.permissions, body.assigned_by)
    return {'message': 'Permissions updated successfully', **result}


@perms_bp.get('/<staff_id>/access')
@require_access(ROLE_MANAGEMENT, CATEGORY_VIEW, 'view')
def get_access(staff_id: str):
    staff = load_staff_in_school(current_actor(), staff_id)
    sub_module = request.args.get('sub_module')
    category = request.args.get('category')
    kind = request.args.get('access', 'view')
    if not sub_module or not category:
        abort(400, description='sub_module and category required')
    if kind not in ACCESS_KINDS:
        abort(400, description=f'access must be one of {list(ACCESS_KINDS)}')
    allowed = check_access(staff.id, sub_module, category, kind)
    return {'staff_id': staff.id, 'sub_module': sub_module, 'category': category, 'access': kind, 'allowed': allowed}
