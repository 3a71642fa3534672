from tests.test_utils_seed import ensure_staff, login, auth_headers


def test_login_and_me(client):
    staff = ensure_staff('t@school.test', full_name='T Teacher')

    resp = client.post('/auth/login', json={'email': 't@school.test', 'password': 'pw', 'school_code': 'SCH001'})
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    assert body['staff_id'] == staff.id
    assert body['school_code'] == 'SCH001'
    assert body['role'] == 'staff'

    me = client.get('/auth/me', headers=auth_headers(body['access_token']))
    assert me.status_code == 200
    assert me.get_json()['email'] == 't@school.test'


def test_principal_login_carries_role_claim(client):
    ensure_staff('head@school.test', principal=True)
    resp = client.post('/auth/login', json={'email': 'head@school.test', 'password': 'pw', 'school_code': 'SCH001'})
    assert resp.get_json()['role'] == 'principal'


def test_login_wrong_password_or_school(client):
    ensure_staff('t@school.test')
    bad_pw = client.post('/auth/login', json={'email': 't@school.test', 'password': 'nope', 'school_code': 'SCH001'})
    assert bad_pw.status_code == 401
    other_school = client.post('/auth/login', json={'email': 't@school.test', 'password': 'pw', 'school_code': 'SCH999'})
    assert other_school.status_code == 401


def test_login_missing_fields_is_400(client):
    resp = client.post('/auth/login', json={'email': 't@school.test'})
    assert resp.status_code == 400
    assert resp.get_json()['error']['status'] == 400


def test_me_requires_token(client):
    resp = client.get('/auth/me')
    assert resp.status_code == 401


def test_catalog_lists_active_modules(client):
    from tests.test_utils_seed import ensure_pair
    ensure_pair('fee_collection', 'view', module_key='fee_management')
    ensure_pair('fee_collection', 'edit', module_key='fee_management')
    ensure_staff('t@school.test')
    headers = auth_headers(login(client, 't@school.test'))
    resp = client.get('/catalog/modules', headers=headers)
    assert resp.status_code == 200
    modules = resp.get_json()['data']
    assert [m['module_key'] for m in modules] == ['fee_management']
    cats = modules[0]['sub_modules'][0]['permission_categories']
    assert {c['category_key'] for c in cats} == {'view', 'edit'}
