from __future__ import annotations
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy import String, Integer, Boolean, ForeignKey, UniqueConstraint
from typing import Optional

from .authz import Base, _uuid  # reuse same metadata


class Module(Base):
    __tablename__ = 'modules'
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    module_key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    module_name: Mapped[str] = mapped_column(String(128), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    sub_modules = relationship('SubModule', back_populates='module', cascade='all, delete-orphan')


class SubModule(Base):
    __tablename__ = 'sub_modules'
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    module_id: Mapped[str] = mapped_column(ForeignKey('modules.id', ondelete='CASCADE'), nullable=False, index=True)
    sub_module_key: Mapped[str] = mapped_column(String(64), nullable=False)
    sub_module_name: Mapped[str] = mapped_column(String(128), nullable=False)
    route_path: Mapped[Optional[str]] = mapped_column(String(255))
    display_order: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    module = relationship('Module', back_populates='sub_modules')
    categories = relationship('PermissionCategory', back_populates='sub_module', cascade='all, delete-orphan')

    __table_args__ = (UniqueConstraint('module_id', 'sub_module_key', name='uq_sub_module_key'),)


class PermissionCategory(Base):
    __tablename__ = 'permission_categories'
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    sub_module_id: Mapped[str] = mapped_column(ForeignKey('sub_modules.id', ondelete='CASCADE'), nullable=False, index=True)
    category_key: Mapped[str] = mapped_column(String(64), nullable=False)
    category_name: Mapped[str] = mapped_column(String(128), nullable=False)
    category_type: Mapped[str] = mapped_column(String(32), default='')
    display_order: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    sub_module = relationship('SubModule', back_populates='categories')

    __table_args__ = (UniqueConstraint('sub_module_id', 'category_key', name='uq_category_key'),)
