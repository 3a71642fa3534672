from __future__ import annotations
"""Audit logging decorator for mutating route handlers.

Usage:

@audit_log('ROLE.CREATE', entity='Role', entity_id_key='id', meta_keys=['name'])
def create_role():
    ... return {'id': role.id, 'name': role.name}, 201

@audit_log('STAFF.OVERRIDES.REPLACE', entity='Staff', entity_id_arg='staff_id',
           meta_builder=lambda data, args, kwargs: {'saved': data.get('saved')})
def save_overrides(staff_id): ...

The entry is written only when the view returns a 2xx payload; it is added
to the same session and committed together with the handler's own changes.
"""
from functools import wraps
from typing import Any, Callable, Iterable, Optional
import logging

from schoolrbac import get_db
from schoolrbac.services.audit import add_audit
from schoolrbac.services.policy import current_actor

logger = logging.getLogger(__name__)


def _split_return(rv: Any):
    """Return (data, status) from dict / (dict, status) / (dict, status, headers)."""
    if isinstance(rv, tuple) and rv:
        status = rv[1] if len(rv) > 1 and isinstance(rv[1], int) else 200
        return rv[0], status
    return rv, 200


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    meta_builder: Optional[Callable[[dict, tuple, dict], dict]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            rv = fn(*args, **kwargs)
            data, status = _split_return(rv)
            if not (200 <= status < 300) or not isinstance(data, dict):
                return rv
            entity_id = None
            if entity_id_key and entity_id_key in data:
                entity_id = data.get(entity_id_key)
            elif entity_id_arg and entity_id_arg in kwargs:
                entity_id = kwargs.get(entity_id_arg)
            if meta_builder:
                meta = meta_builder(data, args, kwargs)
            elif meta_keys:
                meta = {k: data.get(k) for k in meta_keys if k in data}
            else:
                meta = None
            add_audit(current_actor(), action, entity, entity_id, meta)
            get_db().commit()
            logger.debug('audit %s %s %s', action, entity, entity_id)
            return rv
        return wrapper
    return outer
