from __future__ import annotations
"""Request and response shapes exchanged over the HTTP API.

The server validates every request body with these models and the client
parses every response with them, so malformed payloads never reach the
permission core.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .core.catalog import Catalog, Module, PermissionCategory, SubModule
from .core.permissions import MergedPermission


def first_error_message(exc) -> str:
    errors = exc.errors()
    if not errors:
        return 'invalid payload'
    err = errors[0]
    loc = '.'.join(str(p) for p in err.get('loc', ()) if p != '__root__')
    msg = err.get('msg', 'invalid value')
    return f"{loc}: {msg}" if loc else msg


# ---------------- Requests ---------------- #
class LoginIn(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
    school_code: str = Field(min_length=1)


class AccessRow(BaseModel):
    """One (sub_module, category) pair with its two flags."""
    model_config = ConfigDict(extra='ignore')

    sub_module_id: str = Field(min_length=1)
    category_id: str = Field(min_length=1)
    view_access: bool = False
    edit_access: bool = False

    @model_validator(mode='after')
    def _edit_requires_view(self):
        if self.edit_access and not self.view_access:
            raise ValueError('edit_access requires view_access')
        return self


class SaveOverridesIn(BaseModel):
    permissions: List[AccessRow]
    assigned_by: Optional[str] = None

    @field_validator('permissions')
    @classmethod
    def _unique_pairs(cls, rows: List[AccessRow]):
        seen = set()
        for r in rows:
            key = (r.sub_module_id, r.category_id)
            if key in seen:
                raise ValueError(f"duplicate pair {r.sub_module_id}/{r.category_id}")
            seen.add(key)
        return rows


class RolePermissionsIn(SaveOverridesIn):
    pass


class RoleCreateIn(BaseModel):
    name: str = Field(min_length=1, max_length=64)
    description: Optional[str] = None


class StaffRolesIn(BaseModel):
    role_ids: List[str]
    assigned_by: Optional[str] = None


# ---------------- Responses ---------------- #
class CategoryOut(BaseModel):
    model_config = ConfigDict(extra='ignore')

    id: str
    sub_module_id: str
    category_key: str
    category_name: str
    category_type: str = ''


class SubModuleOut(BaseModel):
    model_config = ConfigDict(extra='ignore')

    id: str
    module_id: str
    sub_module_key: str
    sub_module_name: str
    route_path: Optional[str] = None
    permission_categories: List[CategoryOut] = []


class ModuleOut(BaseModel):
    model_config = ConfigDict(extra='ignore')

    id: str
    module_key: str
    module_name: str
    sub_modules: List[SubModuleOut] = []


class StaffOut(BaseModel):
    model_config = ConfigDict(extra='ignore')

    id: str
    staff_id: str
    full_name: str
    email: Optional[str] = None
    designation: Optional[str] = None


class MergedPermissionOut(BaseModel):
    model_config = ConfigDict(extra='ignore')

    sub_module_id: str
    category_id: str
    view_access: bool
    edit_access: bool
    source: Literal['role', 'staff', 'none']

    def to_core(self) -> MergedPermission:
        return MergedPermission(self.sub_module_id, self.category_id, self.view_access, self.edit_access, self.source)


class LoginOut(BaseModel):
    access_token: str
    staff_id: str
    school_code: str
    role: Literal['principal', 'staff']


def catalog_from_modules(modules: List[ModuleOut]) -> Catalog:
    return Catalog([
        Module(
            id=m.id,
            name=m.module_name,
            key=m.module_key,
            sub_modules=tuple(
                SubModule(
                    id=sm.id,
                    module_id=sm.module_id,
                    name=sm.sub_module_name,
                    key=sm.sub_module_key,
                    categories=tuple(
                        PermissionCategory(c.id, c.sub_module_id, c.category_name, c.category_key, c.category_type)
                        for c in sm.permission_categories
                    ),
                )
                for sm in m.sub_modules
            ),
        )
        for m in modules
    ])


__all__ = [
    'LoginIn', 'AccessRow', 'SaveOverridesIn', 'RolePermissionsIn', 'RoleCreateIn', 'StaffRolesIn',
    'CategoryOut', 'SubModuleOut', 'ModuleOut', 'StaffOut', 'MergedPermissionOut', 'LoginOut',
    'catalog_from_modules', 'first_error_message',
]
