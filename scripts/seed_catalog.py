#!/usr/bin/env python
"""Idempotent seed script for the module catalog and a school's role presets.

Usage:
    python scripts/seed_catalog.py --school-code SCH001               # seed normally
    python scripts/seed_catalog.py --school-code SCH001 --show-roles  # print role -> pair counts
    python scripts/seed_catalog.py --school-code SCH001 --dry-run     # run logic then rollback
"""
from __future__ import annotations
import os, sys, argparse, textwrap
from sqlalchemy import select, text

# Allow running from repo root
sys.path.append(os.path.abspath('.'))

from schoolrbac import create_app, get_db  # type: ignore
from schoolrbac.constants.catalog import MODULE_CATALOG, DEFAULT_CATEGORIES, ROLE_PRESETS
from schoolrbac.models.authz import Base, Role, RolePermission, Staff, StaffRole
from schoolrbac.models.catalog import Module, SubModule, PermissionCategory


def ensure_catalog(session):
    """Create missing modules, sub-modules and categories; returns number of rows created."""
    created = 0
    modules = {m.module_key: m for m in session.execute(select(Module)).scalars().all()}
    for m_order, (module_key, (module_name, subs)) in enumerate(MODULE_CATALOG.items(), start=1):
        module = modules.get(module_key)
        if module is None:
            module = Module(module_key=module_key, module_name=module_name, display_order=m_order)
            session.add(module); session.flush()
            created += 1
        existing_subs = {sm.sub_module_key: sm for sm in module.sub_modules}
        for sm_order, (sub_key, sub_name, route_path) in enumerate(subs, start=1):
            sub = existing_subs.get(sub_key)
            if sub is None:
                sub = SubModule(module_id=module.id, sub_module_key=sub_key, sub_module_name=sub_name, route_path=route_path, display_order=sm_order)
                session.add(sub); session.flush()
                created += 1
            existing_cats = {c.category_key for c in sub.categories}
            for cat_key, cat_name, cat_type, cat_order in DEFAULT_CATEGORIES:
                if cat_key not in existing_cats:
                    session.add(PermissionCategory(sub_module_id=sub.id, category_key=cat_key, category_name=cat_name, category_type=cat_type, display_order=cat_order))
                    created += 1
    session.flush()
    return created


def pair_index(session):
    """(sub_module_key, category_key) -> (sub_module_id, category_id)"""
    rows = session.execute(
        select(SubModule.sub_module_key, PermissionCategory.category_key, SubModule.id, PermissionCategory.id)
        .join(PermissionCategory, PermissionCategory.sub_module_id == SubModule.id)
    ).all()
    return {(sk, ck): (sid, cid) for sk, ck, sid, cid in rows}


def ensure_roles(session, school_code):
    existing = {r.name: r for r in session.execute(select(Role).where(Role.school_code == school_code)).scalars().all()}
    pairs = pair_index(session)
    created = 0
    for role_name, grants in ROLE_PRESETS.items():
        role = existing.get(role_name)
        if role is None:
            role = Role(school_code=school_code, name=role_name, description=role_name, is_system=True)
            session.add(role); session.flush()
            existing[role_name] = role
            created += 1
        if any(sk == '*' for sk, _, _, _ in grants):
            desired = {key: (True, True) for key in pairs}
        else:
            desired = {(sk, ck): (view, edit and view) for sk, ck, view, edit in grants}
        current = {(rp.sub_module_id, rp.category_id) for rp in role.permissions}
        for key, (view, edit) in desired.items():
            ids = pairs.get(key)
            if ids is None:
                print(f"[WARN] Missing pair referenced by role {role_name}: {key[0]}/{key[1]}")
                continue
            if ids in current:
                continue
            session.add(RolePermission(role_id=role.id, sub_module_id=ids[0], category_id=ids[1], view_access=view, edit_access=edit))
    session.flush()
    return created


def ensure_principal(session, school_code):
    email = os.getenv('SEED_PRINCIPAL_EMAIL', f'principal@{school_code.lower()}.local')
    existing = session.execute(
        select(Staff).where(Staff.school_code == school_code, Staff.email == email)
    ).scalar_one_or_none()
    if existing:
        return
    principal = Staff(school_code=school_code, staff_id='PRINCIPAL', full_name='Principal', email=email, designation='Principal', is_principal=True)
    principal.set_password(os.getenv('SEED_PRINCIPAL_PASSWORD', 'ChangeMe123!'))
    session.add(principal); session.flush()
    admin = session.execute(
        select(Role).where(Role.school_code == school_code, Role.name == 'Administrator')
    ).scalar_one_or_none()
    if admin:
        session.add(StaffRole(staff_id=principal.id, role_id=admin.id, assigned_by=principal.id))
    print(f"[INFO] Created principal {email} with temporary password.")


def print_role_summary(session, school_code):
    roles = session.execute(select(Role).where(Role.school_code == school_code).order_by(Role.name)).scalars().all()
    if not roles:
        print("[INFO] No roles present.")
        return
    name_w = max(len(r.name) for r in roles)
    print(f"{'Role'.ljust(name_w)} | Pairs | Editable")
    print('-' * (name_w + 20))
    for role in roles:
        total = len(role.permissions)
        editable = sum(1 for rp in role.permissions if rp.edit_access)
        print(f"{role.name.ljust(name_w)} | {str(total).rjust(5)} | {str(editable).rjust(8)}")


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed the module catalog and role presets for a school",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed: seed_catalog.py --school-code SCH001\n  dry run: seed_catalog.py --school-code SCH001 --dry-run\n""")
    )
    p.add_argument('--school-code', required=True, help='School whose roles are seeded')
    p.add_argument('--show-roles', action='store_true', help='Print role pair counts after seeding')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--no-principal', action='store_true', help='Skip creating the initial principal account')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        try:
            session.execute(text('SELECT 1 FROM modules LIMIT 1'))
        except Exception:
            # bootstrap only; prefer `alembic upgrade head`
            session.rollback()
            Base.metadata.create_all(session.get_bind())
        finally:
            session.commit()

    with app.app_context():
        session = get_db()
        try:
            created_c = ensure_catalog(session)
            created_r = ensure_roles(session, args.school_code)
            if not args.no_principal:
                ensure_principal(session, args.school_code)
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) Catalog rows would create: {created_c}, Roles would create: {created_r}")
            else:
                session.commit()
                print(f"[DONE] Catalog rows created: {created_c}, Roles created: {created_r}")
            if args.show_roles:
                print('\nRole Summary:')
                print_role_summary(session, args.school_code)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


if __name__ == '__main__':
    main()
