import os, sys, pytest
# Ensure project root is on path so 'schoolrbac' can be imported without installing
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
import schoolrbac
from schoolrbac import create_app, get_db
from schoolrbac.models.authz import Base

@pytest.fixture(scope='session')
def app_instance():
    app = create_app({
        'DATABASE_URL': 'sqlite+pysqlite:///:memory:',
        'JWT_SECRET_KEY': 'test-secret-key-that-is-long-enough-for-hs256',
        'TESTING': True,
    })
    with app.app_context():
        Base.metadata.create_all(get_db().get_bind())
    yield app

@pytest.fixture(autouse=True)
def clean_db(request):
    """Fresh tables for every test that touches the app; pure core tests skip this."""
    if 'app_instance' not in request.fixturenames:
        yield
        return
    app = request.getfixturevalue('app_instance')
    yield
    schoolrbac.SessionLocal.remove()
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.drop_all(engine)
        Base.metadata.create_all(engine)
    schoolrbac.SessionLocal.remove()

@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()
