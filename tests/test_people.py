from datetime import date

import pytest

from societyhub import create_app
from config import TestConfig
from models import db, User, Employee, Society, SocietyAdmin


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


def test_society_admin_without_society_is_super_admin(client):
    login(client)
    rv = client.post('/people/society-admins/new', data={
        'first_name': 'Meera', 'last_name': 'Iyer', 'email': 'meera@example.com',
        'password': 'secret1', 'society_id': '', 'is_active': '1',
    }, follow_redirects=True)
    assert b'Super admin created successfully' in rv.data

    admin = SocietyAdmin.query.filter_by(email='meera@example.com').one()
    assert admin.role == 'super_admin'
    assert admin.society_id is None
    assert admin.password_hash != 'secret1'


def test_society_admin_with_society(client):
    login(client)
    society = Society(name='Green Acres')
    db.session.add(society)
    db.session.commit()

    rv = client.post('/people/society-admins/new', data={
        'first_name': 'Ravi', 'last_name': 'Menon', 'email': 'ravi@example.com',
        'password': 'secret1', 'society_id': str(society.id), 'is_active': '1',
    }, follow_redirects=True)
    assert b'Society admin created successfully' in rv.data
    assert SocietyAdmin.query.one().role == 'society_admin'


def test_society_admin_edit_keeps_password(client):
    login(client)
    rv = client.post('/people/society-admins/new', data={
        'first_name': 'Meera', 'last_name': 'Iyer', 'email': 'meera@example.com', 'password': 'secret1',
    }, follow_redirects=True)
    admin = SocietyAdmin.query.one()
    old_hash = admin.password_hash

    rv = client.post(f'/people/society-admins/{admin.id}/edit', data={
        'first_name': '', 'last_name': '', 'email': '', 'password': '', 'phone': '9876543210',
    }, follow_redirects=True)
    assert b'Super admin updated successfully' in rv.data
    admin = db.session.get(SocietyAdmin, admin.id)
    assert admin.password_hash == old_hash
    assert admin.first_name == 'Meera'
    assert admin.phone == '9876543210'


def test_employee_requires_manager_below_manager_role(client):
    login(client)
    boss = Employee(name='Kiran Patil', role='Manager', mobile='9876543210', dob=date(1980, 1, 1))
    db.session.add(boss)
    db.session.commit()

    data = {'name': 'Asha Rao', 'mobile': '9123456780', 'role': 'Employee', 'status': 'Active',
            'dob': '1995-05-05', 'reporting_manager_id': ''}
    rv = client.post('/people/employees/new', data=data, follow_redirects=True)
    assert b'Reporting Manager is required' in rv.data
    assert Employee.query.count() == 1

    rv = client.post('/people/employees/new', data=dict(data, reporting_manager_id=str(boss.id)),
                     follow_redirects=True)
    assert b'Employee created successfully' in rv.data
    asha = Employee.query.filter_by(name='Asha Rao').one()
    assert asha.reporting_manager_id == boss.id
    assert asha.branch == 'Head Office'


def test_employee_list_hides_admin_accounts(client):
    login(client)
    db.session.add_all([
        Employee(name='Root Account', role='Admin', status='Active'),
        Employee(name='Asha Rao', role='Employee', status='Active'),
    ])
    db.session.commit()

    rv = client.get('/people/employees')
    assert b'Asha Rao' in rv.data
    assert b'Root Account' not in rv.data


def test_employee_form_offers_managers_only(client):
    login(client)
    db.session.add_all([
        Employee(name='Kiran Patil', role='Manager', status='Active'),
        Employee(name='Asha Rao', role='Employee', status='Active'),
    ])
    db.session.commit()
    rv = client.get('/people/employees/new')
    assert b'Kiran Patil' in rv.data
    assert b'Asha Rao' not in rv.data
