from datetime import date, timedelta

import pytest

from societyhub import create_app
from societyhub.blueprints.ehs.checklists import KIND_CHOICES, TEMPLATES, merge_items
from societyhub.blueprints.ehs.forms import DebitNoteForm, StatisticsBoardForm, next_note_number
from societyhub.blueprints.ehs.routes import month_bounds, summarize
from config import TestConfig
from models import db, User, Audit, Site, Checklist, DebitNote, FirstAidCase


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


def login(client, username='officer', role='ehs_officer'):
    ensure_user(username, role)
    client.post('/login', data={'username': username, 'password': 'pass'}, follow_redirects=True)


def add_site(name='North Tower'):
    s = Site(name=name, location='Pune')
    db.session.add(s)
    db.session.commit()
    return s


def debit_note_data(**overrides):
    data = {
        'date': date.today().isoformat(),
        'time': '10:30',
        'amount': '2500',
        'currency': 'INR',
        'company_or_staff': 'Acme Scaffolding',
        'violation_note': 'Working at height without harness',
        'status': 'Under Review',
    }
    data.update(overrides)
    return data


# -- pure helpers -------------------------------------------------------------

def test_next_note_number():
    today = date(2025, 6, 1)
    assert next_note_number([], today) == 'DN/2025/01'
    assert next_note_number(['DN/2025/01', 'DN/2025/07', 'DN/2024/30', None], today) == 'DN/2025/08'
    assert next_note_number(['DN/2025/abc'], today) == 'DN/2025/01'


def test_debit_note_amount_must_be_positive():
    form = DebitNoteForm(debit_note_data(amount='0'))
    assert not form.validate()
    assert form.errors['amount'] == ['Amount must be greater than zero']

    form = DebitNoteForm(debit_note_data(time='25:00', amount='abc'))
    assert not form.validate()
    assert set(form.errors) == {'time', 'amount'}


def test_debit_note_edit_keeps_number_when_cleared():
    record = {'id': '3', 'note_number': 'DN/2024/05'}
    form = DebitNoteForm(debit_note_data(note_number=''), record=record,
                         lookups={'note_numbers': ['DN/2024/05', 'DN/2024/06']})
    assert form.validate(), form.errors
    assert form.payload()['note_number'] == 'DN/2024/05'

    form = DebitNoteForm(debit_note_data(note_number=''), lookups={'note_numbers': []})
    assert form.validate(), form.errors
    assert form.payload()['note_number'] == f'DN/{date.today().year}/01'


def test_statistics_board_last_month_within_cumulative():
    data = {'project_name': 'Metro Line 3', 'date': '2025-06-01',
            'metric_1_last_month': '5000', 'metric_1_cumulative': '4000',
            'metric_4_last_month': '-1', 'metric_4_cumulative': ''}
    form = StatisticsBoardForm(data)
    assert not form.validate()
    assert set(form.errors) == {'metric_1', 'metric_4'}

    form = StatisticsBoardForm(dict(data, metric_1_cumulative='90000', metric_4_last_month='0'))
    assert form.validate(), form.errors
    metrics = form.payload()['metrics']
    assert len(metrics) == 10
    assert metrics[0]['last_month'] == 5000
    assert metrics[0]['cumulative'] == 90000
    assert metrics[9]['cumulative'] == 0


def test_checklist_templates():
    assert [kind for kind, _ in KIND_CHOICES] == ['excavator', 'jcb', 'truck', 'ladder', 'scaffold', 'welding_machine']
    excavator = TEMPLATES['excavator']
    items = excavator.blank_items()
    assert all(item['status'] == 'OK' for item in items)

    saved = [{'code': items[0]['code'], 'status': 'NOT_OK', 'remark': 'Leaking'}]
    merged = merge_items(excavator, saved)
    assert len(merged) == len(items)
    assert merged[0]['status'] == 'NOT_OK'
    assert merged[0]['description'] == items[0]['description']
    assert merged[1]['status'] == 'OK'


def test_month_bounds():
    assert month_bounds('2024-02') == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds('2025-12') == (date(2025, 12, 1), date(2025, 12, 31))
    today = date(2025, 6, 17)
    assert month_bounds('garbage', today) == (date(2025, 6, 1), date(2025, 6, 30))


def test_summarize():
    today = date(2025, 6, 17)
    checklists = [
        {'inspection_date': date(2025, 6, 15), 'defects': 2},
        {'inspection_date': date(2025, 5, 1), 'defects': 0},
    ]
    notes = [
        {'status': 'Under Review', 'amount': 1000, 'currency': 'INR'},
        {'status': 'Recovered', 'amount': 500.5, 'currency': 'INR'},
        {'status': 'Issued', 'amount': 20, 'currency': 'USD'},
    ]
    boards = [{'project_name': 'Old', 'date': date(2025, 4, 1)}, {'project_name': 'New', 'date': date(2025, 6, 1)}]
    cases = [{'incident_date': date(2025, 6, 2)}, {'incident_date': date(2025, 5, 30)}]

    summary = summarize([{}, {}], [{}], checklists, notes, boards, cases, today=today)

    assert summary['sites'] == 2
    assert summary['inspections'] == 2
    assert summary['inspections_week'] == 1
    assert summary['defects'] == 2
    assert summary['debit_notes_open'] == 1
    assert summary['debit_amounts'] == {'INR': 1500.5, 'USD': 20.0}
    assert summary['first_aid_month'] == 1
    assert summary['latest_board']['project_name'] == 'New'
    assert summary['recent_cases'][0]['incident_date'] == date(2025, 6, 2)


def test_summarize_empty():
    summary = summarize([], [], [], [], [], [])
    assert summary['latest_board'] is None
    assert summary['debit_amounts'] == {}


# -- routes -------------------------------------------------------------------

def test_debit_notes_are_numbered_in_sequence(client):
    login(client)
    year = date.today().year

    rv = client.post('/ehs/debit-notes/new', data=debit_note_data(), follow_redirects=True)
    assert b'Debit note created successfully' in rv.data
    rv = client.post('/ehs/debit-notes/new', data=debit_note_data(company_or_staff='Beta Electricals'),
                     follow_redirects=True)
    assert b'Debit note created successfully' in rv.data

    numbers = sorted(n.note_number for n in DebitNote.query.all())
    assert numbers == [f'DN/{year}/01', f'DN/{year}/02']


def test_print_debit_note(client):
    login(client)
    site = add_site()
    note = DebitNote(note_number='DN/2025/04', date=date(2025, 6, 1), amount=2500, currency='INR',
                     company_or_staff='Acme Scaffolding', site_id=site.id, status='Issued')
    db.session.add(note)
    db.session.commit()

    rv = client.get(f'/ehs/debit-notes/{note.id}/print')
    assert rv.status_code == 200
    assert rv.mimetype == 'text/html'
    assert b'DN/2025/04' in rv.data
    assert b'2500.00 INR' in rv.data
    assert b'North Tower' in rv.data
    assert b'window.print()' in rv.data
    assert Audit.query.filter_by(action='debit_notes.print').count() == 1


def test_print_missing_record_redirects(client):
    login(client)
    rv = client.get('/ehs/debit-notes/999/print', follow_redirects=True)
    assert rv.status_code == 200
    assert b'Nothing to print' in rv.data


def test_checklist_kind_chooser(client):
    login(client)
    rv = client.get('/ehs/checklists/new')
    assert b'Excavator Inspection Checklist' in rv.data
    rv = client.get('/ehs/checklists/new?kind=excavator')
    assert b'item_HYDRAULICS_status' in rv.data


def checklist_data(site, **items):
    data = {'kind': 'excavator', 'site_id': str(site.id), 'equipment_ref': 'EX-07',
            'inspection_date': date.today().isoformat(), 'inspected_by': 'R. Shah'}
    for checkpoint in TEMPLATES['excavator'].checkpoints:
        data[f'item_{checkpoint.code}_status'] = 'OK'
    data.update(items)
    return data


def test_checklist_defect_needs_remark(client):
    login(client)
    site = add_site()
    rv = client.post('/ehs/checklists/new?kind=excavator',
                     data=checklist_data(site, item_HYDRAULICS_status='NOT_OK'), follow_redirects=True)
    assert b'Please correct the highlighted fields' in rv.data
    assert b'Describe the defect for' in rv.data
    assert Checklist.query.count() == 0


def test_checklist_saved_with_items(client):
    login(client)
    site = add_site()
    rv = client.post('/ehs/checklists/new?kind=excavator',
                     data=checklist_data(site, item_HYDRAULICS_status='NOT_OK',
                                         item_HYDRAULICS_remark='Boom cylinder seal leaking'),
                     follow_redirects=True)
    assert b'Checklist created successfully' in rv.data

    checklist = Checklist.query.one()
    assert len(checklist.items) == len(TEMPLATES['excavator'].checkpoints)
    assert checklist.to_dict()['defects'] == 1

    rv = client.get(f'/ehs/checklists/{checklist.id}/print')
    assert rv.status_code == 200
    assert b'Excavator Inspection Checklist' in rv.data
    assert b'Boom cylinder seal leaking' in rv.data


def test_first_aid_register_print(client):
    login(client)
    site = add_site()
    db.session.add_all([
        FirstAidCase(site_id=site.id, incident_date=date(2025, 5, 3), incident_time='09:15',
                     injured_person='Ramesh K', injury_details='Cut on palm', treatment_provided='Dressing'),
        FirstAidCase(site_id=site.id, incident_date=date(2025, 4, 28), injured_person='Suresh P',
                     injury_details='Dust in eye', treatment_provided='Eye wash'),
    ])
    db.session.commit()

    rv = client.get('/ehs/first-aid/register/print?month=2025-05')
    assert rv.status_code == 200
    assert b'Ramesh K' in rv.data
    assert b'Suresh P' not in rv.data

    rv = client.get('/ehs/first-aid/register/print?month=2025-01', follow_redirects=True)
    assert b'No first-aid cases recorded for the selected month' in rv.data


def test_future_first_aid_case_rejected(client):
    login(client)
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    rv = client.post('/ehs/first-aid/new', data={
        'incident_date': tomorrow, 'injured_person': 'Ramesh K', 'injury_details': 'Cut',
        'treatment_provided': 'Dressing', 'treatment_given_by': 'Nurse',
    }, follow_redirects=True)
    assert b'Incident date cannot be in the future' in rv.data
    assert FirstAidCase.query.count() == 0


def test_dashboard(client):
    login(client)
    add_site()
    rv = client.get('/ehs/')
    assert rv.status_code == 200
    assert b'1 sites' in rv.data
