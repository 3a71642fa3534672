from flask import Blueprint
from flask_jwt_extended import jwt_required
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from schoolrbac import get_db
from schoolrbac.models.catalog import Module, SubModule

catalog_bp = Blueprint('catalog', __name__)


def _by_order(items):
    return sorted((i for i in items if i.is_active), key=lambda i: (i.display_order or 0, i.id))


def serialize_module(m: Module) -> dict:
    return {
        'id': m.id,
        'module_key': m.module_key,
        'module_name': m.module_name,
        'sub_modules': [
            {
                'id': sm.id,
                'module_id': sm.module_id,
                'sub_module_key': sm.sub_module_key,
                'sub_module_name': sm.sub_module_name,
                'route_path': sm.route_path,
                'permission_categories': [
                    {
                        'id': c.id,
                        'sub_module_id': c.sub_module_id,
                        'category_key': c.category_key,
                        'category_name': c.category_name,
                        'category_type': c.category_type or '',
                    }
                    for c in _by_order(sm.categories)
                ],
            }
            for sm in _by_order(m.sub_modules)
        ],
    }


@catalog_bp.get('/modules')
@jwt_required()
def list_modules():
    session = get_db()
    rows = session.execute(
        select(Module)
        .where(Module.is_active.is_(True))
        .options(selectinload(Module.sub_modules).selectinload(SubModule.categories))
        .order_by(Module.display_order.asc(), Module.id.asc())
    ).scalars().all()
    return {'data': [serialize_module(m) for m in rows]}
