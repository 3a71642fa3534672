from schoolrbac.core.catalog import Catalog, Module, SubModule, PermissionCategory
from schoolrbac.core.context import ActorContext, ROLE_PRINCIPAL
from schoolrbac.constants.catalog import MODULE_CATALOG, DEFAULT_CATEGORIES, ROLE_PRESETS, all_pair_keys
from schoolrbac.schemas import ModuleOut, catalog_from_modules


def _catalog():
    fees = SubModule('sm-fees', 'm-fin', 'Collect Payment', 'fee_collection', (
        PermissionCategory('c-fees-view', 'sm-fees', 'View', 'view', 'view'),
        PermissionCategory('c-fees-edit', 'sm-fees', 'Edit', 'edit', 'edit'),
    ))
    routes = SubModule('sm-routes', 'm-tr', 'Routes', 'routes', (
        PermissionCategory('c-routes-view', 'sm-routes', 'View', 'view', 'view'),
    ))
    return Catalog([
        Module('m-fin', 'Fee Management', 'fee_management', (fees,)),
        Module('m-tr', 'Transport', 'transport', (routes,)),
    ])


def test_iter_pairs_in_display_order():
    cat = _catalog()
    assert [(sm.key, c.key) for _, sm, c in cat.iter_pairs()] == [
        ('fee_collection', 'view'), ('fee_collection', 'edit'), ('routes', 'view'),
    ]
    assert len(cat) == 3


def test_contains_pair_checks_ownership():
    cat = _catalog()
    assert cat.contains_pair('sm-fees', 'c-fees-edit')
    assert not cat.contains_pair('sm-routes', 'c-fees-edit')
    assert not cat.contains_pair('sm-fees', 'missing')


def test_lookups_by_id_and_key():
    cat = _catalog()
    assert cat.sub_module('sm-routes').name == 'Routes'
    assert cat.category('c-fees-view').sub_module_id == 'sm-fees'
    assert cat.find('fee_collection', 'edit').id == 'c-fees-edit'
    assert cat.find('fee_collection', 'delete') is None
    assert cat.sub_module('nope') is None


def test_catalog_from_api_payload():
    payload = {
        'id': 'm1', 'module_key': 'marks', 'module_name': 'Marks',
        'sub_modules': [{
            'id': 'sm1', 'module_id': 'm1', 'sub_module_key': 'marks_entry', 'sub_module_name': 'Mark Entry',
            'route_path': '/marks-entry',
            'permission_categories': [
                {'id': 'c1', 'sub_module_id': 'sm1', 'category_key': 'edit', 'category_name': 'Edit', 'category_type': 'edit'},
            ],
        }],
    }
    cat = catalog_from_modules([ModuleOut.model_validate(payload)])
    assert cat.contains_pair('sm1', 'c1')
    assert cat.find('marks_entry', 'edit').name == 'Edit'


def test_constants_are_consistent():
    keys = all_pair_keys()
    assert len(keys) == len(set(keys))
    assert len(keys) == sum(len(subs) for _, subs in MODULE_CATALOG.values()) * len(DEFAULT_CATEGORIES)
    known = set(keys)
    for role, grants in ROLE_PRESETS.items():
        for sub_key, cat_key, view, edit in grants:
            if sub_key == '*':
                continue
            assert (sub_key, cat_key) in known, f'{role} references {sub_key}/{cat_key}'
            assert view or not edit


def test_actor_context_claims_roundtrip():
    actor = ActorContext('staff-1', 'SCH001', ROLE_PRINCIPAL)
    again = ActorContext.from_claims('staff-1', actor.to_claims())
    assert again == actor
    assert again.is_principal
    assert not ActorContext.from_claims('x', {'school_code': 'SCH001'}).is_principal
