from datetime import date

import pytest

from societyhub import create_app
from societyhub.blueprints.community.forms import review_change
from config import TestConfig
from models import db, User, Audit, Society, Listing, Event


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


def login(client, username='manager', role='manager'):
    ensure_user(username, role)
    client.post('/login', data={'username': username, 'password': 'pass'}, follow_redirects=True)


def add_listing(status='pending', title='Teak sofa'):
    listing = Listing(title=title, price=15000, seller_name='Anita', status=status)
    db.session.add(listing)
    db.session.commit()
    return listing


def test_review_change_rules():
    assert review_change({'status': 'pending'}, 'approve') == ({'status': 'approved', 'rejection_reason': None}, None)
    assert review_change({'status': 'approved'}, 'sold')[0]['status'] == 'sold'

    fields, error = review_change({'status': 'pending'}, 'reject', '  ')
    assert fields is None
    assert error == 'A rejection reason is required'

    fields, error = review_change({'status': 'sold'}, 'approve')
    assert fields is None
    assert error == 'A sold listing cannot be marked approved'

    assert review_change({'status': 'pending'}, 'sold')[1] is not None
    assert review_change({'status': 'pending'}, 'archive')[1] == 'Unknown action: archive'


def test_missing_status_counts_as_pending():
    fields, error = review_change({}, 'approve')
    assert error is None
    assert fields['status'] == 'approved'


def test_approve_then_sell_listing(client):
    login(client)
    listing = add_listing()

    rv = client.post(f'/community/marketplace/{listing.id}/approve', follow_redirects=True)
    assert b'Listing marked approved' in rv.data
    assert db.session.get(Listing, listing.id).status == 'approved'

    rv = client.post(f'/community/marketplace/{listing.id}/sold', follow_redirects=True)
    assert b'Listing marked sold' in rv.data
    assert db.session.get(Listing, listing.id).status == 'sold'
    assert Audit.query.filter_by(action='listings.sold', target_id=str(listing.id)).count() == 1


def test_reject_requires_reason(client):
    login(client)
    listing = add_listing()

    rv = client.post(f'/community/marketplace/{listing.id}/reject', data={'reason': ''}, follow_redirects=True)
    assert b'A rejection reason is required' in rv.data
    assert db.session.get(Listing, listing.id).status == 'pending'

    rv = client.post(f'/community/marketplace/{listing.id}/reject', data={'reason': 'Prohibited item'},
                     follow_redirects=True)
    assert b'Listing marked rejected' in rv.data
    saved = db.session.get(Listing, listing.id)
    assert saved.status == 'rejected'
    assert saved.rejection_reason == 'Prohibited item'


def test_listing_actions_follow_status(client):
    login(client)
    add_listing(status='pending', title='Pending sofa')
    rv = client.get('/community/marketplace')
    assert b'Approve' in rv.data
    assert b'Mark sold' not in rv.data


def test_viewer_cannot_review(client):
    login(client, 'viewer', 'viewer')
    listing = add_listing()
    rv = client.post(f'/community/marketplace/{listing.id}/approve', follow_redirects=True)
    assert b'Access denied' in rv.data
    assert db.session.get(Listing, listing.id).status == 'pending'


def test_create_event(client):
    login(client)
    society = Society(name='Green Acres')
    db.session.add(society)
    db.session.commit()

    rv = client.post('/community/events/new', data={
        'society_id': str(society.id), 'title': 'Holi Mela', 'starts_on': '2025-03-14',
        'ends_on': '2025-03-13', 'status': 'Scheduled',
    }, follow_redirects=True)
    assert b'End date cannot be before the start date' in rv.data

    rv = client.post('/community/events/new', data={
        'society_id': str(society.id), 'title': 'Holi Mela', 'starts_on': '2025-03-14',
        'ends_on': '2025-03-15', 'status': 'Scheduled',
    }, follow_redirects=True)
    assert b'Event created successfully' in rv.data
    event = Event.query.one()
    assert event.starts_on == date(2025, 3, 14)
    assert b'Green Acres' in client.get('/community/events').data
