import httpx
import pytest
from schoolrbac.client import ApiError, PermissionsApiClient
from schoolrbac.core.context import ActorContext
from schoolrbac.core.permissions import MergedPermission
from schoolrbac.workflow import OverridesSession, SaveInProgressError, SessionStateError
from tests.test_utils_seed import ensure_pair, ensure_staff, ensure_role, assign_role, seed_role_manager


def _api(app_instance, email='manager@school.test'):
    api = PermissionsApiClient('http://testserver', transport=httpx.WSGITransport(app=app_instance))
    out = api.login(email, 'pw', 'SCH001')
    return api, ActorContext(out.staff_id, out.school_code, out.role)


def test_edit_save_reload_roundtrip(client, app_instance):
    seed_role_manager(client)
    mark = ensure_pair('mark_attendance', 'edit', module_key='student_management')
    teacher = ensure_staff('teacher@school.test', full_name='Teacher One')
    assign_role(teacher, ensure_role('Teacher', [(mark, True, False)]))

    api, actor = _api(app_instance)
    session = OverridesSession(api, actor)
    assert session.load_catalog() is True
    assert session.catalog.contains_pair(*mark)
    assert [s.full_name for s in api.fetch_staff(q='teacher')] == ['Teacher One']

    assert session.select_staff(teacher.id) is True
    assert session.effective(*mark) == (True, False)
    session.toggle(*mark, 'edit')
    assert session.effective(*mark) == (True, True)

    assert session.save() is True
    assert session.success == 'Permissions updated successfully'
    assert session.error is None
    # working map rebuilt from the server
    assert session.editor.is_overridden(*mark)
    assert session.merged == [MergedPermission(mark[0], mark[1], True, True, 'staff')]

    session.remove_override(*mark)
    assert session.save() is True
    assert session.merged == [MergedPermission(mark[0], mark[1], True, False, 'role')]
    assert len(session.editor) == 0


def test_failed_save_keeps_working_map(client, app_instance):
    seed_role_manager(client, email='viewer@school.test', edit=False)
    pair = ensure_pair('vehicles', 'edit')
    s = ensure_staff('driver@school.test')

    api, actor = _api(app_instance, 'viewer@school.test')
    session = OverridesSession(api, actor)
    session.select_staff(s.id)
    session.toggle(*pair, 'view')
    before = session.editor.to_save_list()

    assert session.save() is False
    assert 'Access denied' in session.error
    assert session.editor.to_save_list() == before
    session.dismiss_error()
    assert session.error is None


def test_catalog_failure_leaves_catalog_unset(app_instance):
    api = PermissionsApiClient('http://testserver', transport=httpx.WSGITransport(app=app_instance))
    session = OverridesSession(api, ActorContext('nobody', 'SCH001'))
    assert session.load_catalog() is False
    assert session.catalog is None
    assert session.error.startswith('Failed to load modules')


def test_selecting_unknown_staff_leaves_no_editor(client, app_instance):
    seed_role_manager(client)
    api, actor = _api(app_instance)
    session = OverridesSession(api, actor)
    assert session.select_staff('missing') is False
    assert session.editor is None
    with pytest.raises(SessionStateError):
        session.toggle('a', 'b', 'view')


def test_login_failure_raises_api_error(client, app_instance):
    ensure_staff('t@school.test')
    api = PermissionsApiClient('http://testserver', transport=httpx.WSGITransport(app=app_instance))
    with pytest.raises(ApiError) as exc:
        api.login('t@school.test', 'wrong', 'SCH001')
    assert exc.value.status == 401


class _ReentrantClient:
    """Calls back into save() while the first save is still running."""

    def __init__(self):
        self.session = None
        self.nested_error = None

    def fetch_merged_permissions(self, staff_id):
        return []

    def save_overrides(self, staff_id, rows, assigned_by=None):
        try:
            self.session.save()
        except SaveInProgressError as e:
            self.nested_error = e
        return {'saved': len(rows), 'removed': 0}


def test_second_save_while_in_flight_is_rejected():
    fake = _ReentrantClient()
    session = OverridesSession(fake, ActorContext('s0', 'SCH001'))
    fake.session = session
    session.select_staff('s1')
    session.toggle('a', 'b', 'view')
    assert session.save() is True
    assert isinstance(fake.nested_error, SaveInProgressError)
    assert not session.saving


# ---------------- Error bodies and malformed payloads ---------------- #
def _module(categories):
    return {
        'id': 'm1', 'module_key': 'fee_management', 'module_name': 'Fee Management',
        'sub_modules': [{
            'id': 'sm1', 'module_id': 'm1', 'sub_module_key': 'fee_collection', 'sub_module_name': 'Collect Payment',
            'permission_categories': categories,
        }],
    }


GOOD_CATEGORY = {'id': 'c1', 'sub_module_id': 'sm1', 'category_key': 'edit', 'category_name': 'Edit', 'category_type': 'edit'}


def _mocked(routes):
    """routes: (method, path) -> list of httpx.Response served in order; the last one repeats."""
    calls = []

    def handler(request):
        key = (request.method, request.url.path)
        calls.append(key)
        queue = routes[key]
        served = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(served.status_code, headers=served.headers, content=served.content)

    api = PermissionsApiClient('http://testserver', token='t', transport=httpx.MockTransport(handler))
    return api, calls


def test_plain_string_error_body_becomes_session_error():
    api, _ = _mocked({('GET', '/catalog/modules'): [httpx.Response(500, json={'error': 'Failed to fetch modules'})]})
    session = OverridesSession(api, ActorContext('s0', 'SCH001'))
    assert session.load_catalog() is False
    assert session.error == 'Failed to load modules: Failed to fetch modules'
    assert session.catalog is None


def test_error_message_variants():
    api, _ = _mocked({
        ('GET', '/staff/a/permissions'): [httpx.Response(404, json={'error': {'status': 404, 'title': 'Not Found', 'detail': 'Staff not found'}})],
        ('GET', '/staff/b/permissions'): [httpx.Response(401, json={'msg': 'Missing Authorization Header'})],
        ('GET', '/staff/c/permissions'): [httpx.Response(502, text='<html>bad gateway</html>')],
    })
    messages = {}
    for staff_id in ('a', 'b', 'c'):
        with pytest.raises(ApiError) as exc:
            api.fetch_merged_permissions(staff_id)
        messages[staff_id] = (exc.value.status, exc.value.message)
    assert messages['a'] == (404, 'Staff not found')
    assert messages['b'] == (401, 'Missing Authorization Header')
    assert messages['c'] == (502, 'GET /staff/c/permissions returned 502')


def test_failed_catalog_reload_keeps_previous_catalog():
    api, _ = _mocked({('GET', '/catalog/modules'): [
        httpx.Response(200, json={'data': [_module([GOOD_CATEGORY])]}),
        # one category lacks its key; the whole tree is rejected
        httpx.Response(200, json={'data': [_module([GOOD_CATEGORY, {'id': 'c2', 'sub_module_id': 'sm1', 'category_name': 'View'}])]}),
    ]})
    session = OverridesSession(api, ActorContext('s0', 'SCH001'))
    assert session.load_catalog() is True
    first = session.catalog
    assert session.load_catalog() is False
    assert session.catalog is first
    assert len(session.catalog) == 1
    assert session.error.startswith('Failed to load modules: malformed catalog')


@pytest.mark.parametrize('response', [
    httpx.Response(200, json={'data': [{'sub_module_id': 'a', 'category_id': 'b', 'view_access': True, 'edit_access': False, 'source': 'group'}]}),
    httpx.Response(200, json={'permissions': []}),
    httpx.Response(200, json=[]),
    httpx.Response(200, text='not json'),
])
def test_malformed_permissions_rejected(response):
    api, _ = _mocked({('GET', '/staff/s1/permissions'): [response]})
    with pytest.raises(ApiError):
        api.fetch_merged_permissions('s1')
    session = OverridesSession(api, ActorContext('s0', 'SCH001'))
    assert session.select_staff('s1') is False
    assert session.editor is None
    assert session.error.startswith('Failed to load permissions')


def test_malformed_staff_roster_rejected():
    api, _ = _mocked({('GET', '/staff'): [httpx.Response(200, json={'data': [{'id': 'x', 'staff_id': 'X1'}]})]})
    with pytest.raises(ApiError):
        api.fetch_staff()


def test_reload_failure_after_save_drops_stale_editor():
    override = {'sub_module_id': 'fees', 'category_id': 'collect', 'view_access': True, 'edit_access': True, 'source': 'staff'}
    api, calls = _mocked({
        ('GET', '/staff/s1/permissions'): [
            httpx.Response(200, json={'data': [override]}),
            httpx.Response(503, json={'error': 'Service unavailable'}),
        ],
        ('POST', '/staff/s1/permissions'): [httpx.Response(200, json={'saved': 0, 'removed': 1})],
    })
    session = OverridesSession(api, ActorContext('s0', 'SCH001'))
    assert session.select_staff('s1') is True
    session.remove_override('fees', 'collect')

    assert session.save() is True
    assert ('POST', '/staff/s1/permissions') in calls
    assert session.editor is None
    assert session.merged == []
    assert session.success is None
    assert session.error == 'Failed to load permissions: Service unavailable'
    with pytest.raises(SessionStateError):
        session.effective('fees', 'collect')
