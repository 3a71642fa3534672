from tests.test_utils_seed import ensure_staff, login, auth_headers, seed_role_manager


def test_unknown_path_returns_error_json(client):
    resp = client.get('/non-existent-path')
    # Flask default 404 should be wrapped by error handler
    assert resp.status_code == 404
    body = resp.get_json()
    assert 'error' in body
    assert body['error']['status'] == 404
    assert 'detail' in body['error']


def test_healthz(client):
    assert client.get('/healthz').get_json() == {'status': 'ok'}


def test_internal_error_shape(client, monkeypatch):
    _, headers = seed_role_manager(client)
    # Monkeypatch AFTER login so auth works; only break roles listing
    import schoolrbac.routes.roles as roles_mod
    class BoomSession:
        def execute(self, *a, **k):
            raise RuntimeError('explode')
    monkeypatch.setattr(roles_mod, 'get_db', lambda: BoomSession())
    resp = client.get('/roles', headers=headers)
    assert resp.status_code == 500
    body = resp.get_json()
    assert body['error']['status'] == 500
    assert body['error']['title'] == 'Internal Server Error'


def test_audit_log_listing_is_school_scoped(client):
    manager, headers = seed_role_manager(client)
    client.post('/roles', json={'name': 'Librarian'}, headers=headers)
    ensure_staff('head@other.test', school_code='SCH002', principal=True)
    other_headers = auth_headers(login(client, 'head@other.test', school_code='SCH002'))
    client.post('/roles', json={'name': 'Other Role'}, headers=other_headers)

    resp = client.get('/audit/logs', query_string={'action': 'ROLE.CREATE'}, headers=headers)
    assert resp.status_code == 200
    logs = resp.get_json()['data']
    assert len(logs) == 1
    assert logs[0]['actor_staff_id'] == manager.id
    assert logs[0]['meta'] == {'name': 'Librarian'}
