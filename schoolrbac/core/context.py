from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Mapping

ROLE_PRINCIPAL = 'principal'
ROLE_STAFF = 'staff'
ACTOR_ROLES = (ROLE_PRINCIPAL, ROLE_STAFF)


@dataclass(frozen=True)
class ActorContext:
    """Who is acting, and for which school. Passed explicitly, never global."""
    staff_id: str
    school_code: str
    role: str = ROLE_STAFF

    @property
    def is_principal(self) -> bool:
        return self.role == ROLE_PRINCIPAL

    def to_claims(self) -> Dict[str, Any]:
        return {'school_code': self.school_code, 'role': self.role}

    @classmethod
    def from_claims(cls, identity: str, claims: Mapping[str, Any]) -> 'ActorContext':
        return cls(staff_id=str(identity), school_code=claims.get('school_code') or '', role=claims.get('role') or ROLE_STAFF)
