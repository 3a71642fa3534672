import pytest
from schoolrbac.core.permissions import (
    RolePermission, StaffOverride, MergedPermission, DuplicatePermissionError,
    resolve, lookup, has_access, clamp, SOURCE_ROLE, SOURCE_STAFF, SOURCE_NONE,
)


def test_role_only_pair_falls_back_to_role():
    merged = resolve([RolePermission('attendance', 'mark', True, False)], [])
    assert merged == [MergedPermission('attendance', 'mark', True, False, SOURCE_ROLE)]


def test_override_wins_over_role():
    merged = resolve(
        [RolePermission('fees', 'collect', True, False)],
        [StaffOverride('s1', 'fees', 'collect', True, True)],
    )
    assert len(merged) == 1
    assert merged[0].source == SOURCE_STAFF
    assert merged[0].edit_access is True


def test_override_can_revoke_role_access():
    merged = resolve(
        [RolePermission('fees', 'collect', True, True)],
        [StaffOverride('s1', 'fees', 'collect', False, False)],
    )
    assert merged == [MergedPermission('fees', 'collect', False, False, SOURCE_STAFF)]


def test_output_order_overrides_then_roles():
    roles = [RolePermission('a', 'view', True, False), RolePermission('b', 'view', True, False), RolePermission('c', 'view', True, True)]
    overrides = [StaffOverride('s1', 'c', 'view', True, False), StaffOverride('s1', 'z', 'edit', True, True)]
    merged = resolve(roles, overrides)
    assert [(m.key, m.source) for m in merged] == [
        (('c', 'view'), SOURCE_STAFF),
        (('z', 'edit'), SOURCE_STAFF),
        (('a', 'view'), SOURCE_ROLE),
        (('b', 'view'), SOURCE_ROLE),
    ]


def test_precedence_and_fallback_over_mixed_inputs():
    roles = [RolePermission(f'sm{i}', 'cat', True, i % 2 == 0) for i in range(6)]
    overrides = [StaffOverride('s1', f'sm{i}', 'cat', False, False) for i in range(0, 6, 3)]
    merged = {m.key: m for m in resolve(roles, overrides)}
    assert len(merged) == 6
    for rp in roles:
        m = merged[rp.key]
        if rp.sub_module_id in ('sm0', 'sm3'):
            assert (m.view_access, m.edit_access, m.source) == (False, False, SOURCE_STAFF)
        else:
            assert (m.view_access, m.edit_access, m.source) == (rp.view_access, rp.edit_access, SOURCE_ROLE)


def test_empty_inputs_give_empty_result():
    assert resolve([], []) == []


def test_duplicate_role_pair_rejected():
    with pytest.raises(DuplicatePermissionError):
        resolve([RolePermission('a', 'view', True, False), RolePermission('a', 'view', False, False)], [])


def test_duplicate_override_pair_rejected():
    with pytest.raises(ValueError):
        resolve([], [StaffOverride('s1', 'a', 'view', True, False), StaffOverride('s1', 'a', 'view', True, True)])


def test_lookup_missing_pair_is_none_placeholder():
    perm = lookup([], 'transport', 'routes')
    assert perm == MergedPermission('transport', 'routes', False, False, SOURCE_NONE)


def test_has_access_reads_requested_flag():
    merged = resolve([RolePermission('marks', 'entry', True, False)], [])
    assert has_access(merged, 'marks', 'entry', 'view') is True
    assert has_access(merged, 'marks', 'entry', 'edit') is False
    assert has_access(merged, 'marks', 'other', 'view') is False
    with pytest.raises(ValueError):
        has_access(merged, 'marks', 'entry', 'delete')


def test_clamp_drops_edit_without_view():
    assert clamp(False, True) == (False, False)
    assert clamp(True, True) == (True, True)
    assert clamp(True, False) == (True, False)


def test_merged_to_dict_shape():
    d = MergedPermission('a', 'b', True, False, SOURCE_ROLE).to_dict()
    assert d == {'sub_module_id': 'a', 'category_id': 'b', 'view_access': True, 'edit_access': False, 'source': 'role'}
