from __future__ import annotations
import uuid
from sqlalchemy.orm import declarative_base, relationship, Mapped, mapped_column
from sqlalchemy import String, Boolean, ForeignKey, UniqueConstraint, DateTime, text, func
from typing import Optional

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


# --- Staff & roles ---
class Staff(Base):
    __tablename__ = 'staff'
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    school_code: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    staff_id: Mapped[str] = mapped_column(String(64), nullable=False)
    full_name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(128), index=True)
    designation: Mapped[Optional[str]] = mapped_column(String(64))
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False, default='')
    is_principal: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    staff_roles = relationship('StaffRole', back_populates='staff', cascade='all, delete-orphan')
    overrides = relationship('StaffPermission', back_populates='staff', cascade='all, delete-orphan')

    __table_args__ = (UniqueConstraint('school_code', 'staff_id', name='uq_staff_school_staff_id'),)

    def set_password(self, raw: str):
        from werkzeug.security import generate_password_hash
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        from werkzeug.security import check_password_hash
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, raw)


class Role(Base):
    __tablename__ = 'roles'
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    school_code: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(255))
    is_system: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    permissions = relationship('RolePermission', back_populates='role', cascade='all, delete-orphan')
    staff_roles = relationship('StaffRole', back_populates='role', cascade='all, delete-orphan')

    __table_args__ = (UniqueConstraint('school_code', 'name', name='uq_role_school_name'),)


class StaffRole(Base):
    __tablename__ = 'staff_roles'
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    staff_id: Mapped[str] = mapped_column(ForeignKey('staff.id', ondelete='CASCADE'), nullable=False, index=True)
    role_id: Mapped[str] = mapped_column(ForeignKey('roles.id', ondelete='CASCADE'), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    assigned_by: Mapped[Optional[str]] = mapped_column(String(36))
    assigned_at = mapped_column(DateTime(timezone=True), server_default=func.now())
    staff = relationship('Staff', back_populates='staff_roles')
    role = relationship('Role', back_populates='staff_roles')

    __table_args__ = (UniqueConstraint('staff_id', 'role_id', name='uq_staff_role'),)


# --- Permission rows ---
class RolePermission(Base):
    __tablename__ = 'role_permissions'
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    role_id: Mapped[str] = mapped_column(ForeignKey('roles.id', ondelete='CASCADE'), nullable=False, index=True)
    sub_module_id: Mapped[str] = mapped_column(ForeignKey('sub_modules.id', ondelete='CASCADE'), nullable=False)
    category_id: Mapped[str] = mapped_column(ForeignKey('permission_categories.id', ondelete='CASCADE'), nullable=False)
    view_access: Mapped[bool] = mapped_column(Boolean, default=False)
    edit_access: Mapped[bool] = mapped_column(Boolean, default=False)
    updated_at = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

    role = relationship('Role', back_populates='permissions')

    __table_args__ = (UniqueConstraint('role_id', 'sub_module_id', 'category_id', name='uq_role_permission'),)


class StaffPermission(Base):
    """Per-staff override; supersedes role-derived access for its pair."""
    __tablename__ = 'staff_permissions'
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    staff_id: Mapped[str] = mapped_column(ForeignKey('staff.id', ondelete='CASCADE'), nullable=False, index=True)
    sub_module_id: Mapped[str] = mapped_column(ForeignKey('sub_modules.id', ondelete='CASCADE'), nullable=False)
    category_id: Mapped[str] = mapped_column(ForeignKey('permission_categories.id', ondelete='CASCADE'), nullable=False)
    view_access: Mapped[bool] = mapped_column(Boolean, default=False)
    edit_access: Mapped[bool] = mapped_column(Boolean, default=False)
    assigned_by: Mapped[Optional[str]] = mapped_column(String(36))
    updated_at = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

    staff = relationship('Staff', back_populates='overrides')

    __table_args__ = (UniqueConstraint('staff_id', 'sub_module_id', 'category_id', name='uq_staff_permission'),)
