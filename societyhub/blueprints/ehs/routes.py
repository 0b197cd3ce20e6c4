# societyhub/blueprints/ehs/routes.py
"""
EHS routes - directories, checklists, debit notes, statistics boards,
first-aid register and the dashboard
"""

from datetime import date, timedelta

from flask import render_template, redirect, flash, request, current_app
from flask_login import current_user

from models import log_action
from decorators import permission_required
from utils import format_date, parse_date
from societyhub.crud import Resource, EXPORT_LIMIT
from societyhub.gateway import get_gateway
from societyhub.printing import document_response
from societyhub.store import lookup_options, lookup_records
from .checklists import ITEM_STATUSES, KIND_CHOICES, TEMPLATES, merge_items
from .forms import (
    SiteForm, ContractorForm, ChecklistForm, DebitNoteForm, StatisticsBoardForm, FirstAidCaseForm,
    DEBIT_NOTE_STATUSES,
)
from . import ehs_bp


class SiteResource(Resource):
    name = 'sites'
    title = 'Sites'
    singular = 'Site'
    form_class = SiteForm
    columns = (
        ('name', 'Site'),
        ('code', 'Code'),
        ('location', 'Location'),
        ('company_name', 'Company'),
    )
    search_fields = ('name', 'code', 'location', 'company_name')
    filters = (('company_name', 'Company', None),)


class ContractorResource(Resource):
    name = 'contractors'
    title = 'Contractors'
    singular = 'Contractor'
    form_class = ContractorForm
    columns = (
        ('name', 'Contractor'),
        ('company_name', 'Company'),
        ('contact_person', 'Contact Person'),
        ('contact_number', 'Contact Number'),
        ('email', 'Email'),
    )
    search_fields = ('name', 'company_name', 'contact_person', 'contact_number', 'email')


class ChecklistResource(Resource):
    name = 'checklists'
    title = 'Equipment Checklists'
    singular = 'Checklist'
    form_class = ChecklistForm
    form_template = 'ehs/checklist_form.html'
    print_template = 'print/checklist.html'
    columns = (
        ('kind_title', 'Equipment Type'),
        ('equipment_ref', 'Equipment'),
        ('site_name', 'Site'),
        ('contractor_name', 'Contractor'),
        ('inspection_date', 'Inspection Date'),
        ('inspected_by', 'Inspected By'),
        ('defects', 'Defects'),
    )
    search_fields = ('kind_title', 'equipment_ref', 'site_name', 'contractor_name', 'inspected_by')
    filters = (
        ('kind', 'Equipment Type', KIND_CHOICES),
        ('site_name', 'Site', None),
    )

    def load(self, gateway, store, page=1, limit=50, **params):
        result = super().load(gateway, store, page, limit, **params)
        if result.ok:
            store.replace([with_kind_title(r) for r in store.records])
        return result

    def label(self, record):
        return record.get('equipment_ref') or record.get('id') or ''

    def lookups(self):
        return {'site_id': lookup_options('sites'), 'contractor_id': lookup_options('contractors')}

    def make_form(self, data=None, record=None, lookups=None):
        return ChecklistForm(data, record=record, lookups=lookups, kind=request.args.get('kind'))

    def print_context(self, record):
        template = TEMPLATES.get(record.get('kind'))
        items = merge_items(template, record.get('items')) if template else record.get('items') or []
        return {'record': record, 'checklist': template, 'items': items, 'statuses': ITEM_STATUSES}

    def print_filename(self, record):
        return f'checklist_{record.get("kind")}_{record.get("id")}'


def with_kind_title(record):
    template = TEMPLATES.get(record.get('kind'))
    record = dict(record)
    record['kind_title'] = template.title if template else record.get('kind') or ''
    return record


class DebitNoteResource(Resource):
    name = 'debit_notes'
    slug = 'debit-notes'
    title = 'Safety Violation Debit Notes'
    singular = 'Debit note'
    form_class = DebitNoteForm
    print_template = 'print/debit_note.html'
    columns = (
        ('note_number', 'Note No.'),
        ('date', 'Date'),
        ('company_or_staff', 'Company / Staff'),
        ('site_name', 'Site'),
        ('amount', 'Amount'),
        ('currency', 'Currency'),
        ('status', 'Status'),
    )
    search_fields = ('note_number', 'company_or_staff', 'sub_contractor', 'site_name', 'location',
                     'violation_note', 'responsible_person')
    filters = (
        ('status', 'Status', DEBIT_NOTE_STATUSES),
        ('site_name', 'Site', None),
    )

    def label(self, record):
        return record.get('note_number') or record.get('id') or ''

    def lookups(self):
        notes = lookup_records('debit_notes') or []
        return {
            'site_id': lookup_options('sites'),
            'note_numbers': [n.get('note_number') for n in notes],
        }

    def print_filename(self, record):
        return 'debit_note_' + (record.get('note_number') or str(record.get('id'))).replace('/', '-')


class StatisticsBoardResource(Resource):
    name = 'statistics_boards'
    slug = 'statistics-boards'
    title = 'Safety Statistics Boards'
    singular = 'Statistics board'
    form_class = StatisticsBoardForm
    form_template = 'ehs/statistics_board_form.html'
    print_template = 'print/statistics_board.html'
    columns = (
        ('project_name', 'Project'),
        ('date', 'Date'),
        ('client_name', 'Client'),
        ('contractor_name', 'Contractor'),
        ('site_name', 'Site'),
        ('manpower_strength', 'Manpower'),
    )
    search_fields = ('project_name', 'client_name', 'contractor_name', 'site_name', 'safety_slogan')
    filters = (('site_name', 'Site', None),)

    def label(self, record):
        return record.get('project_name') or record.get('id') or ''

    def lookups(self):
        return {'site_id': lookup_options('sites')}

    def print_context(self, record):
        return {'record': record, 'metrics': StatisticsBoardForm(record=record).metrics}


class FirstAidCaseResource(Resource):
    name = 'first_aid_cases'
    slug = 'first-aid'
    title = 'First-Aid Treatment Register'
    singular = 'First-aid case'
    form_class = FirstAidCaseForm
    list_template = 'ehs/first_aid_list.html'
    columns = (
        ('incident_date', 'Date'),
        ('incident_time', 'Time'),
        ('injured_person', 'Injured Person'),
        ('induction_number', 'Induction No.'),
        ('contractor_name', 'Contractor'),
        ('site_name', 'Site'),
        ('injury_details', 'Nature of Injury'),
        ('treatment_given_by', 'Treated By'),
    )
    search_fields = ('injured_person', 'induction_number', 'contractor_name', 'site_name',
                     'injury_details', 'treatment_given_by')
    filters = (
        ('site_name', 'Site', None),
        ('contractor_name', 'Contractor', None),
    )

    def label(self, record):
        return record.get('injured_person') or record.get('id') or ''

    def lookups(self):
        return {'site_id': lookup_options('sites'), 'contractor_id': lookup_options('contractors')}


sites = SiteResource().register(ehs_bp)
contractors = ContractorResource().register(ehs_bp)
checklists = ChecklistResource().register(ehs_bp)
debit_notes = DebitNoteResource().register(ehs_bp)
statistics_boards = StatisticsBoardResource().register(ehs_bp)
first_aid_cases = FirstAidCaseResource().register(ehs_bp)


def month_bounds(month_input, today=None):
    """First and last day of a ``YYYY-MM`` month; the current month when invalid."""
    today = today or date.today()
    try:
        year, month = (int(part) for part in month_input.split('-'))
        start = date(year, month, 1)
    except (AttributeError, ValueError):
        start = today.replace(day=1)
    end = (start.replace(day=28) + timedelta(days=4)).replace(day=1) - timedelta(days=1)
    return start, end


@ehs_bp.route('/first-aid/register/print')
@permission_required('first_aid_cases', 'view')
def print_first_aid_register():
    """First-aid treatment register for one month (and optionally one site)."""
    start, end = month_bounds(request.args.get('month', ''))
    site_id = request.args.get('site_id', '').strip()

    result = get_gateway().list('first_aid_cases', page=1, limit=EXPORT_LIMIT, site_id=site_id or None)
    if not result.ok:
        flash(f'Nothing to print: {result.reason}', 'warning')
        return redirect(first_aid_cases.url('list'))

    cases = [c for c in result.value.items
             if c.get('incident_date') and start <= parse_date(c['incident_date']) <= end]
    if site_id:
        cases = [c for c in cases if str(c.get('site_id') or '') == site_id]
    if not cases:
        flash('No first-aid cases recorded for the selected month', 'warning')
        return redirect(first_aid_cases.url('list'))
    cases.sort(key=lambda c: (parse_date(c['incident_date']), c.get('incident_time') or ''))

    site_name = cases[0].get('site_name') if site_id else ''
    response = document_response('print/first_aid_register.html',
                                 f"first_aid_register_{start.strftime('%m-%Y')}",
                                 fmt=request.args.get('format', 'html'),
                                 cases=cases, month=start, site_name=site_name)
    if response is None:
        return redirect(first_aid_cases.url('list'))
    try:
        log_action(current_user.id, 'first_aid_cases.print', 'first_aid_cases', None,
                   f'month={start.strftime("%m-%Y")} site={site_id} count={len(cases)}')
    except Exception:
        current_app.logger.exception('Failed to write audit log for first_aid_cases.print')
    return response


def summarize(sites, contractors, checklists, debit_notes, boards, cases, today=None):
    """Headline numbers for the EHS dashboard, derived from the record lists."""
    today = today or date.today()
    week_ago = today - timedelta(days=7)
    month_start = today.replace(day=1)

    def on_or_after(record, key, since):
        value = parse_date(record.get(key))
        return value is not None and since <= value <= today

    amounts = {}
    for note in debit_notes:
        currency = note.get('currency') or 'INR'
        amounts[currency] = amounts.get(currency, 0) + float(note.get('amount') or 0)

    latest_board = max(boards, key=lambda b: parse_date(b.get('date')) or date.min, default=None)
    return {
        'sites': len(sites),
        'contractors': len(contractors),
        'inspections': len(checklists),
        'inspections_week': sum(1 for c in checklists if on_or_after(c, 'inspection_date', week_ago)),
        'defects': sum(int(c.get('defects') or 0) for c in checklists),
        'debit_notes': len(debit_notes),
        'debit_notes_open': sum(1 for n in debit_notes if n.get('status') == 'Under Review'),
        'debit_amounts': amounts,
        'first_aid_month': sum(1 for c in cases if on_or_after(c, 'incident_date', month_start)),
        'first_aid_total': len(cases),
        'latest_board': latest_board,
        'recent_cases': sorted(cases, key=lambda c: parse_date(c.get('incident_date')) or date.min,
                               reverse=True)[:5],
    }


@ehs_bp.route('/')
@permission_required('checklists', 'view')
def dashboard():
    gateway = get_gateway()
    lists, failed = {}, []
    for resource in ('sites', 'contractors', 'checklists', 'debit_notes', 'statistics_boards', 'first_aid_cases'):
        result = gateway.list(resource, page=1, limit=EXPORT_LIMIT)
        if result.ok:
            lists[resource] = result.value.items
        else:
            lists[resource] = []
            failed.append(resource.replace('_', ' '))
    if failed:
        current_app.logger.warning(f'EHS dashboard could not load: {", ".join(failed)}')
        flash(f'Some figures are unavailable: {", ".join(failed)}', 'warning')

    summary = summarize(lists['sites'], lists['contractors'], lists['checklists'], lists['debit_notes'],
                        lists['statistics_boards'], lists['first_aid_cases'])
    return render_template('ehs/dashboard.html', summary=summary, format_date=format_date,
                           month=date.today().strftime('%Y-%m'), sites=lookup_options('sites'))
