from flask import Blueprint, request, abort
from sqlalchemy import select, func
from schoolrbac import get_db
from schoolrbac.config.pagination import normalize_pagination
from schoolrbac.constants.catalog import ROLE_MANAGEMENT, CATEGORY_VIEW
from schoolrbac.decorators.auth import require_access
from schoolrbac.models.audit import AuditLog
from schoolrbac.services.policy import current_actor

audit_bp = Blueprint('audit', __name__)


@audit_bp.get('/logs')
@require_access(ROLE_MANAGEMENT, CATEGORY_VIEW, 'view')
def list_audit_logs():
    actor = current_actor()
    stmt = select(AuditLog).where(AuditLog.school_code == actor.school_code)
    for arg, column in (('action', AuditLog.action), ('entity', AuditLog.entity), ('entity_id', AuditLog.entity_id), ('actor_staff_id', AuditLog.actor_staff_id)):
        value = request.args.get(arg)
        if value:
            stmt = stmt.where(column == value)
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))
    session = get_db()
    total = session.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    rows = session.execute(stmt.order_by(AuditLog.id.desc()).offset(offset).limit(limit)).scalars().all()
    return {
        'data': [
            {
                'id': r.id,
                'actor_staff_id': r.actor_staff_id,
                'action': r.action,
                'entity': r.entity,
                'entity_id': r.entity_id,
                'meta': r.meta,
                'created_at': r.created_at.isoformat() if r.created_at else None,
            }
            for r in rows
        ],
        'pagination': {'total': total, 'limit': limit, 'offset': offset, 'returned': len(rows)},
    }
