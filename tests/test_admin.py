import pytest

from societyhub import create_app
from societyhub.cli import seed_permissions
from societyhub.gateway import RestGateway
from config import TestConfig
from models import db, User, Audit, RolePermission, log_action
from fakes import FakeResponse, FakeSession


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    with app.app_context():
        yield app.test_client()


def ensure_user(username, role='viewer', password='pass'):
    if not User.query.filter_by(username=username).first():
        u = User(username=username, role=role)
        u.set_password(password)
        db.session.add(u)
        db.session.commit()
    return User.query.filter_by(username=username).first()


def login(client, username='admin', role='admin'):
    ensure_user(username, role)
    client.post('/login', data={'username': username, 'password': 'pass'}, follow_redirects=True)


def test_login_failure(client):
    ensure_user('alice')
    rv = client.post('/login', data={'username': 'alice', 'password': 'wrong'}, follow_redirects=True)
    assert b'Invalid username or password' in rv.data


def test_admin_creates_user(client):
    login(client)
    rv = client.post('/admin/users/create', data={'username': 'bob', 'password': 'pw', 'role': 'ehs_officer'},
                     follow_redirects=True)
    assert b'User bob (ehs_officer) created successfully' in rv.data
    bob = User.query.filter_by(username='bob').one()
    assert bob.role == 'ehs_officer'
    assert bob.check_password('pw')
    assert Audit.query.filter_by(action='user.create', target_id=str(bob.id)).count() == 1


def test_create_user_rejects_duplicates_and_bad_roles(client):
    login(client)
    rv = client.post('/admin/users/create', data={'username': 'admin', 'password': 'pw'}, follow_redirects=True)
    assert b'Username is already taken' in rv.data
    rv = client.post('/admin/users/create', data={'username': 'carol', 'password': 'pw', 'role': 'operator'},
                     follow_redirects=True)
    assert b'Please select a valid role' in rv.data
    assert User.query.filter_by(username='carol').first() is None


def test_admin_edits_user(client):
    login(client)
    bob = ensure_user('bob')
    rv = client.post(f'/admin/users/{bob.id}/edit', data={'username': 'robert', 'password': 'new', 'role': 'manager'},
                     follow_redirects=True)
    assert b'User robert updated successfully' in rv.data
    robert = db.session.get(User, bob.id)
    assert robert.username == 'robert'
    assert robert.role == 'manager'
    assert robert.check_password('new')


def test_create_user_requires_password(client):
    login(client)
    rv = client.post('/admin/users/create', data={'username': 'dave', 'role': 'viewer'}, follow_redirects=True)
    assert b'Password is required' in rv.data
    rv = client.post('/admin/users/create', data={'username': 'bad name', 'password': 'pw'}, follow_redirects=True)
    assert b'Username may contain letters' in rv.data
    assert User.query.count() == 1


def test_edit_user_rejects_taken_name_and_keeps_password(client):
    login(client)
    bob = ensure_user('bob', 'manager')
    rv = client.post(f'/admin/users/{bob.id}/edit', data={'username': 'admin', 'password': '', 'role': 'manager'})
    assert rv.status_code == 200
    assert b'Username is already taken' in rv.data
    assert db.session.get(User, bob.id).username == 'bob'

    rv = client.post(f'/admin/users/{bob.id}/edit', data={'username': 'bobby', 'password': '', 'role': ''},
                     follow_redirects=True)
    assert b'User bobby updated successfully' in rv.data
    bobby = db.session.get(User, bob.id)
    assert bobby.role == 'manager'
    assert bobby.check_password('pass')
    audit = Audit.query.filter_by(action='user.update', target_id=str(bob.id)).one()
    assert 'password_changed' not in audit.details


def test_admin_cannot_delete_self(client):
    login(client)
    me = User.query.filter_by(username='admin').one()
    rv = client.post(f'/admin/users/{me.id}/delete', follow_redirects=True)
    assert b'You cannot delete yourself' in rv.data
    assert db.session.get(User, me.id) is not None


def test_admin_deletes_user(client):
    login(client)
    bob = ensure_user('bob')
    rv = client.post(f'/admin/users/{bob.id}/delete', follow_redirects=True)
    assert b'User bob deleted' in rv.data
    assert User.query.filter_by(username='bob').first() is None


def test_non_admin_cannot_manage_users(client):
    login(client, 'mgr', 'manager')
    rv = client.get('/admin/users', follow_redirects=True)
    assert b'Access denied' in rv.data


def test_audit_log_filters(client):
    login(client)
    me = User.query.filter_by(username='admin').one()
    log_action(me.id, 'societies.create', 'societies', 1, 'Green Acres')
    log_action(me.id, 'debit_notes.print', 'debit_notes', 4, 'DN/2025/04')

    rv = client.get('/admin/audit')
    assert b'societies.create' in rv.data and b'debit_notes.print' in rv.data

    rv = client.get('/admin/audit?target_type=debit_notes')
    assert b'debit_notes.print' in rv.data
    assert b'societies.create' not in rv.data

    rv = client.get('/admin/audit?action=create')
    assert b'societies.create' in rv.data
    assert b'debit_notes.print' not in rv.data


def test_permission_matrix_page(client):
    login(client)
    rv = client.get('/admin/permissions')
    assert rv.status_code == 200
    assert b'ehs_officer' in rv.data
    assert b'debit notes' in rv.data


def test_permission_page_on_rest_backend(app, client):
    login(client)
    me = FakeResponse(200, {'result': {'modulePermissions': [{'module': 'all', 'actions': ['all']}]}})
    session = FakeSession(me, me, me)
    app.extensions['gateway'] = RestGateway('http://backend.test/', session=session)

    rv = client.get('/admin/permissions')

    assert rv.status_code == 200
    assert b'not available from this backend' in rv.data
    assert b'<table' not in rv.data
    assert all(url.endswith('permissions/me') for _, url, _ in session.requests)


def test_seed_permissions(app):
    written = seed_permissions()
    assert written == RolePermission.query.count()
    assert seed_permissions() == 0

    row = RolePermission.query.filter_by(role='viewer', module='sites').one()
    row.actions = 'view,add'
    db.session.commit()
    seed_permissions(replace=True)
    assert db.session.get(RolePermission, row.id).actions == 'view'


def test_cli_create_admin(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['create-admin', 'root', 'secret'])
    assert 'Created admin user root' in result.output
    assert User.query.filter_by(username='root').one().role == 'admin'

    result = runner.invoke(args=['create-user', 'root', 'secret', 'viewer'])
    assert 'User already exists.' in result.output


def test_login_returns_to_requested_page(client):
    ensure_user('mgr', 'manager')
    rv = client.get('/buildings/societies')
    assert rv.status_code == 302
    assert 'next=' in rv.headers['Location']

    rv = client.post('/login?next=/buildings/societies', data={'username': 'mgr', 'password': 'pass'})
    assert rv.headers['Location'].endswith('/buildings/societies')


def test_login_ignores_foreign_next(client):
    ensure_user('mgr', 'manager')
    rv = client.post('/login?next=//evil.example/', data={'username': 'mgr', 'password': 'pass'})
    assert rv.headers['Location'].endswith('/')
    assert 'evil' not in rv.headers['Location']
