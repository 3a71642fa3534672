from __future__ import annotations
from typing import Any, Dict, Optional
from schoolrbac import get_db
from schoolrbac.core.context import ActorContext
from schoolrbac.models.audit import AuditLog


def add_audit(actor: ActorContext, action: str, entity: Optional[str] = None, entity_id: Optional[str] = None, meta: Optional[Dict[str, Any]] = None):
    """Persist an audit log entry within the current DB session.

    Parameters:
      actor: who performed the change; its school_code scopes the entry
      action: short action code e.g. ROLE.CREATE, STAFF.OVERRIDES.REPLACE
      entity: optional entity name (Role, Staff)
      entity_id: optional primary key string
      meta: additional JSON-safe dictionary (will be shallow copied)
    """
    session = get_db()
    log = AuditLog(
        school_code=actor.school_code,
        actor_staff_id=actor.staff_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        meta=dict(meta or {}),
    )
    session.add(log)
    # No commit here; caller's transaction boundary controls durability.
    return log
