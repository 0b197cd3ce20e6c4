import datetime

import pytest

from societyhub import create_app
from societyhub.forms import FormController
from societyhub.gateway import Ok, Err
from societyhub.blueprints.people.forms import EmployeeForm, SocietyAdminForm
from societyhub.blueprints.community.forms import EventForm
from societyhub.blueprints.buildings.forms import SocietyForm, UnitForm
from config import TestConfig
from models import db


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


class RecordingGateway:
    """Fake gateway remembering every call."""

    def __init__(self, result=None):
        self.calls = []
        self.result = result or Ok({'id': '99', 'name': 'Saved'})

    def create(self, resource, payload):
        self.calls.append(('create', resource, payload))
        return self.result

    def update(self, resource, record_id, payload):
        self.calls.append(('update', resource, record_id, payload))
        return self.result


def years_ago(years):
    today = datetime.date.today()
    return today.replace(year=today.year - years) - datetime.timedelta(days=1)


def employee_data(**overrides):
    data = {
        'name': 'Kiran Patil',
        'mobile': '9876543210',
        'branch': '',
        'department': 'Security',
        'role': 'Manager',
        'reporting_manager_id': '',
        'dob': years_ago(30).isoformat(),
        'status': 'Active',
    }
    data.update(overrides)
    return data


def test_employee_below_manager_requires_reporting_manager(app):
    gateway = RecordingGateway()
    form = EmployeeForm(employee_data(role='Employee'))
    result = FormController('employees', gateway).submit(form)

    assert not result.ok
    assert result.status == 422
    assert 'reporting_manager_id' in result.errors
    # blocked before any network call
    assert gateway.calls == []


def test_employee_manager_needs_no_reporting_manager(app):
    gateway = RecordingGateway()
    form = EmployeeForm(employee_data(role='Manager'))
    result = FormController('employees', gateway).submit(form)

    assert result.ok
    action, resource, payload = gateway.calls[0]
    assert (action, resource) == ('create', 'employees')
    assert payload['branch'] == 'Head Office'
    assert payload['dob'] == years_ago(30)


def test_employee_must_be_adult(app):
    gateway = RecordingGateway()
    form = EmployeeForm(employee_data(dob=years_ago(17).isoformat()))
    result = FormController('employees', gateway).submit(form)

    assert not result.ok
    assert 'dob' in result.errors
    assert gateway.calls == []


def test_employee_collects_all_violations():
    form = EmployeeForm(employee_data(name='  ', mobile='12', role='Supervisor', dob=years_ago(10).isoformat()))
    assert not form.validate()
    assert set(form.errors) == {'name', 'mobile', 'reporting_manager_id', 'dob'}


def test_employee_cannot_report_to_self():
    form = EmployeeForm(employee_data(role='Employee', reporting_manager_id='5'), record={'id': '5', 'name': 'X'})
    assert not form.validate()
    assert 'reporting_manager_id' in form.errors


def test_backend_error_keeps_form_open(app):
    gateway = RecordingGateway(result=Err('Mobile already registered', status=409))
    form = EmployeeForm(employee_data())
    result = FormController('employees', gateway).submit(form)

    assert not result.ok
    assert form.backend_error == 'Mobile already registered'


def test_society_admin_without_society_is_valid():
    form = SocietyAdminForm({'first_name': 'Meera', 'last_name': 'Iyer', 'email': 'meera@example.com',
                             'password': 'secret1', 'society_id': ''})
    assert form.validate(), form.errors
    assert form.payload()['society_id'] is None


def test_society_admin_create_rules():
    form = SocietyAdminForm({'first_name': '', 'last_name': 'Iyer', 'email': 'not-an-email', 'password': '123'})
    assert not form.validate()
    assert set(form.errors) == {'first_name', 'email', 'password'}


def test_society_admin_edit_validates_only_provided_values():
    record = {'id': '3', 'first_name': 'Meera', 'last_name': 'Iyer', 'email': 'meera@example.com'}
    form = SocietyAdminForm({'first_name': '', 'last_name': '', 'email': '', 'password': '', 'is_active': '1'},
                            record=record)
    assert form.validate(), form.errors
    payload = form.payload()
    assert 'password' not in payload
    assert 'email' not in payload
    assert payload['is_active'] is True

    form = SocietyAdminForm({'email': 'broken', 'password': '12'}, record=record)
    assert not form.validate()
    assert set(form.errors) == {'email', 'password'}


def test_event_end_not_before_start():
    form = EventForm({'society_id': '1', 'title': 'Holi', 'starts_on': '2025-03-14',
                      'ends_on': '2025-03-13', 'status': 'Scheduled'})
    assert not form.validate()
    assert 'ends_on' in form.errors


def test_society_pincode_and_counts():
    form = SocietyForm({'name': 'Green Acres', 'pincode': '4110', 'total_blocks': '-1'})
    assert not form.validate()
    assert set(form.errors) == {'pincode', 'total_blocks'}


def test_unit_floor_must_belong_to_block():
    lookups = {'floor_blocks': {'10': '1', '11': '2'}}
    data = {'block_id': '1', 'floor_id': '11', 'unit_number': 'A-1', 'unit_type': '2 BHK', 'status': 'Active'}
    form = UnitForm(data, lookups=lookups)
    assert not form.validate()
    assert 'floor_id' in form.errors

    form = UnitForm(dict(data, floor_id='10'), lookups=lookups)
    assert form.validate(), form.errors


def test_edit_form_is_seeded_from_record():
    record = {'id': '4', 'name': 'Asha', 'role': 'Supervisor', 'branch': 'Pune', 'status': 'Inactive',
              'dob': datetime.date(1990, 1, 2)}
    form = EmployeeForm(record=record)
    assert form.is_edit
    assert form.value('name') == 'Asha'
    assert form.value('dob') == '1990-01-02'
    assert form.value('mobile') == ''

    blank = EmployeeForm()
    assert blank.value('branch') == 'Head Office'
    assert blank.value('role') == 'Employee'
