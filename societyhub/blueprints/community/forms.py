"""
Event and marketplace listing forms
"""
from societyhub.forms import Form, Field

EVENT_STATUSES = ('Scheduled', 'Completed', 'Cancelled')
LISTING_CATEGORIES = ('Furniture', 'Electronics', 'Vehicles', 'Services', 'Others')
LISTING_STATUSES = ('pending', 'approved', 'rejected', 'sold')


class EventForm(Form):
    fields = (
        Field('society_id', 'Society', required=True, lookup='societies'),
        Field('title', 'Title', required=True),
        Field('description', 'Description', widget='textarea'),
        Field('location', 'Location'),
        Field('starts_on', 'Start Date', kind='date', required=True),
        Field('ends_on', 'End Date', kind='date'),
        Field('capacity', 'Capacity', kind='int', min_value=1),
        Field('status', 'Status', required=True, choices=EVENT_STATUSES, default='Scheduled'),
    )

    def check(self, data):
        starts, ends = data.get('starts_on'), data.get('ends_on')
        if starts and ends and ends < starts:
            self.add_error('ends_on', 'End date cannot be before the start date')


class ListingForm(Form):
    fields = (
        Field('society_id', 'Society', lookup='societies'),
        Field('title', 'Title', required=True),
        Field('description', 'Description', widget='textarea'),
        Field('category', 'Category', choices=LISTING_CATEGORIES),
        Field('price', 'Price', kind='decimal', min_value=0),
        Field('seller_name', 'Seller'),
    )


# action -> (statuses it may start from, resulting status)
REVIEW_ACTIONS = {
    'approve': (('pending', 'rejected'), 'approved'),
    'reject': (('pending', 'approved'), 'rejected'),
    'sold': (('approved',), 'sold'),
}


def review_change(listing, action, reason=None):
    """
    Fields to send for a review action on ``listing``.

    Returns ``(fields, error)``; exactly one of them is None.
    """
    if action not in REVIEW_ACTIONS:
        return None, f'Unknown action: {action}'
    allowed, status = REVIEW_ACTIONS[action]
    current = (listing.get('status') or 'pending').lower()
    if current not in allowed:
        return None, f'A {current} listing cannot be marked {status}'
    if action == 'reject':
        reason = (reason or '').strip()
        if not reason:
            return None, 'A rejection reason is required'
        return {'status': status, 'rejection_reason': reason}, None
    return {'status': status, 'rejection_reason': None}, None
