# societyhub/blueprints/community/routes.py
"""
Community routes - events and the marketplace
"""

from flask import redirect, flash, request, current_app
from flask_login import current_user

from models import log_action
from decorators import permission_required
from societyhub.crud import Resource
from societyhub.gateway import get_gateway
from societyhub.store import RecordStore, lookup_options
from .forms import EventForm, ListingForm, EVENT_STATUSES, LISTING_CATEGORIES, LISTING_STATUSES, review_change
from . import community_bp


class EventResource(Resource):
    name = 'events'
    title = 'Events'
    singular = 'Event'
    form_class = EventForm
    columns = (
        ('title', 'Title'),
        ('society_name', 'Society'),
        ('location', 'Location'),
        ('starts_on', 'Starts'),
        ('ends_on', 'Ends'),
        ('capacity', 'Capacity'),
        ('status', 'Status'),
    )
    search_fields = ('title', 'description', 'location', 'society_name')
    filters = (
        ('society_name', 'Society', None),
        ('status', 'Status', EVENT_STATUSES),
    )

    def lookups(self):
        return {'society_id': lookup_options('societies')}


class ListingResource(Resource):
    name = 'listings'
    slug = 'marketplace'
    title = 'Marketplace'
    singular = 'Listing'
    form_class = ListingForm
    list_template = 'community/listings.html'
    columns = (
        ('title', 'Title'),
        ('category', 'Category'),
        ('price', 'Price'),
        ('seller_name', 'Seller'),
        ('society_name', 'Society'),
        ('status', 'Status'),
        ('rejection_reason', 'Rejection Reason'),
    )
    search_fields = ('title', 'description', 'category', 'seller_name', 'society_name')
    filters = (
        ('status', 'Status', LISTING_STATUSES),
        ('category', 'Category', LISTING_CATEGORIES),
        ('society_name', 'Society', None),
    )

    def lookups(self):
        return {'society_id': lookup_options('societies')}


events = EventResource().register(community_bp)
listings = ListingResource().register(community_bp)


@community_bp.route('/marketplace/<record_id>/<action>', methods=['POST'])
@permission_required('listings', 'edit')
def review_listing(record_id, action):
    gateway = get_gateway()
    result = gateway.get('listings', record_id)
    if not result.ok:
        flash(result.reason, 'danger')
        return redirect(listings.url('list'))

    fields, error = review_change(result.value, action, request.form.get('reason'))
    if error:
        flash(error, 'warning')
        return redirect(listings.url('list'))

    result = gateway.transition('listings', record_id, action, **fields)
    if not result.ok:
        flash(result.reason, 'danger')
        return redirect(listings.url('list'))

    store = RecordStore.for_user('listings')
    if result.value:
        store.replace_one(result.value)
    try:
        log_action(current_user.id, f'listings.{action}', 'listings', record_id, f'status={fields["status"]}')
    except Exception:
        current_app.logger.exception(f'Failed to write audit log for listings.{action}')
    current_app.logger.info(f'Listing {record_id} marked {fields["status"]} by {current_user.username}')
    flash(f'Listing marked {fields["status"]}', 'success')
    return redirect(listings.url('list'))
