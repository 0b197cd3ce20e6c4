"""
EHS forms: directories, inspection checklists, debit notes, statistics boards
and the first-aid register
"""
import re
from datetime import date

from utils import parse_integer
from societyhub.forms import Form, Field, EMAIL_PATTERN, MOBILE_PATTERN
from .checklists import ITEM_STATUSES, KIND_CHOICES, TEMPLATES, merge_items

TIME_PATTERN = r'([01]\d|2[0-3]):[0-5]\d'
DEBIT_NOTE_STATUSES = ('Under Review', 'Issued', 'Recovered', 'Waived')
CURRENCIES = ('INR', 'USD', 'EUR', 'AED')

# (order, description, units) rows of a safety statistics board
BOARD_METRICS = (
    (1, 'Total manhours worked', 'hrs'),
    (2, 'Safe manhours', 'hrs'),
    (3, 'LTI free days', 'days'),
    (4, 'Lost time injuries', 'nos'),
    (5, 'First aid cases', 'nos'),
    (6, 'Near misses reported', 'nos'),
    (7, 'Dangerous occurrences', 'nos'),
    (8, 'Safety inductions conducted', 'nos'),
    (9, 'Toolbox talks held', 'nos'),
    (10, 'Safety trainings', 'nos'),
)


class SiteForm(Form):
    fields = (
        Field('name', 'Site Name', required=True),
        Field('location', 'Location'),
        Field('company_name', 'Company'),
        Field('code', 'Site Code'),
        Field('description', 'Description', widget='textarea'),
    )


class ContractorForm(Form):
    fields = (
        Field('name', 'Contractor Name', required=True),
        Field('company_name', 'Company'),
        Field('contact_person', 'Contact Person'),
        Field('contact_number', 'Contact Number', pattern=MOBILE_PATTERN,
              pattern_message='Enter a valid contact number'),
        Field('email', 'Email', pattern=EMAIL_PATTERN, pattern_message='Enter a valid email address'),
        Field('address', 'Address', widget='textarea'),
    )


class ChecklistForm(Form):
    """
    Header fields plus one status/remark pair per checkpoint of the
    selected equipment kind. Checkpoints arrive as ``item_<CODE>_status``
    and ``item_<CODE>_remark``.
    """
    fields = (
        Field('kind', 'Equipment Type', required=True, choices=KIND_CHOICES),
        Field('site_id', 'Site', required=True, lookup='sites'),
        Field('contractor_id', 'Contractor', lookup='contractors'),
        Field('equipment_ref', 'Equipment Reference', required=True),
        Field('inspection_date', 'Inspection Date', kind='date', required=True, default=date.today),
        Field('inspected_by', 'Inspected By', required=True),
        Field('remarks', 'Remarks', widget='textarea'),
    )

    def __init__(self, data=None, record=None, lookups=None, kind=None):
        super().__init__(data, record, lookups)
        if kind and not self.data.get('kind'):
            self.data['kind'] = kind

    @property
    def template(self):
        return TEMPLATES.get(self.data.get('kind') or '')

    @property
    def items(self):
        """Checkpoint rows to render, with submitted or saved values."""
        if self.template is None:
            return []
        if self.bound:
            return self._submitted_items()
        return merge_items(self.template, self.record.get('items'))

    def _submitted_items(self):
        items = []
        for item in self.template.blank_items():
            code = item['code']
            item['status'] = (self.data.get(f'item_{code}_status') or '').strip()
            item['remark'] = (self.data.get(f'item_{code}_remark') or '').strip()
            items.append(item)
        return items

    def check(self, data):
        if self.template is None:
            return
        for item in self._submitted_items():
            if item['status'] not in ITEM_STATUSES:
                self.add_error(f'item_{item["code"]}', f'Select OK, NOT OK or NA for "{item["description"]}"')
            elif item['status'] == 'NOT_OK' and not item['remark']:
                self.add_error(f'item_{item["code"]}', f'Describe the defect for "{item["description"]}"')

    def payload(self):
        data = dict(self.cleaned)
        data['items'] = self._submitted_items()
        return data


def next_note_number(existing, today=None):
    """``DN/<year>/<seq>`` following the highest number issued this year."""
    today = today or date.today()
    prefix = f'DN/{today.year}/'
    highest = 0
    for number in existing:
        if number and number.startswith(prefix):
            highest = max(highest, parse_integer(number[len(prefix):], 0))
    return f'{prefix}{highest + 1:02d}'


class DebitNoteForm(Form):
    fields = (
        Field('note_number', 'Debit Note No.', help_text='Generated automatically when left blank'),
        Field('date', 'Date', kind='date', required=True, default=date.today),
        Field('time', 'Time', pattern=TIME_PATTERN, pattern_message='Time must be HH:MM'),
        Field('amount', 'Amount', kind='decimal', required=True),
        Field('currency', 'Currency', required=True, choices=CURRENCIES, default='INR'),
        Field('company_or_staff', 'Company / Staff', required=True),
        Field('sub_contractor', 'Sub Contractor'),
        Field('site_id', 'Site', lookup='sites'),
        Field('location', 'Location'),
        Field('violation_note', 'Violation', widget='textarea', required=True),
        Field('additional_notes', 'Additional Notes', widget='textarea'),
        Field('responsible_person', 'Responsible Person'),
        Field('safety_officer', 'Safety Officer'),
        Field('project_manager', 'Project Manager'),
        Field('contractor_representative', 'Contractor Representative'),
        Field('status', 'Status', required=True, choices=DEBIT_NOTE_STATUSES, default='Under Review'),
    )

    def check(self, data):
        amount = data.get('amount')
        if amount is not None and amount <= 0:
            self.add_error('amount', 'Amount must be greater than zero')
        number = data.get('note_number')
        if number and not re.fullmatch(r'[A-Za-z0-9/\-]+', number):
            self.add_error('note_number', 'Debit note number may contain letters, digits, "/" and "-" only')

    def payload(self):
        data = dict(self.cleaned)
        if not data.get('note_number') and self.is_edit:
            data['note_number'] = self.record.get('note_number')
        if not data.get('note_number'):
            data['note_number'] = next_note_number(self.lookups.get('note_numbers') or [])
        return data


class StatisticsBoardForm(Form):
    """Board header plus ``metric_<order>_last_month`` / ``_cumulative`` values."""
    fields = (
        Field('project_name', 'Project', required=True),
        Field('client_name', 'Client'),
        Field('contractor_name', 'Contractor'),
        Field('date', 'Date', kind='date', required=True, default=date.today),
        Field('manpower_strength', 'Manpower Strength', kind='int', min_value=0),
        Field('site_id', 'Site', lookup='sites'),
        Field('target', 'Target'),
        Field('safety_slogan', 'Safety Slogan'),
    )

    @property
    def metrics(self):
        saved = {m.get('order'): m for m in self.record.get('metrics') or [] if isinstance(m, dict)}
        rows = []
        for order, description, units in BOARD_METRICS:
            if self.bound:
                last_month = self.data.get(f'metric_{order}_last_month')
                cumulative = self.data.get(f'metric_{order}_cumulative')
            else:
                previous = saved.get(order) or {}
                last_month, cumulative = previous.get('last_month'), previous.get('cumulative')
            rows.append({'order': order, 'description': description, 'units': units,
                         'last_month': last_month, 'cumulative': cumulative})
        return rows

    def _clean_metrics(self):
        cleaned = []
        for row in self.metrics:
            for key in ('last_month', 'cumulative'):
                raw = row[key]
                value = parse_integer(raw)
                if raw not in (None, '') and (value is None or value < 0):
                    self.add_error(f'metric_{row["order"]}', f'{row["description"]} must be a whole number of 0 or more')
                row[key] = value or 0
            cleaned.append(row)
        return cleaned

    def check(self, data):
        for row in self._clean_metrics():
            if row['last_month'] > row['cumulative']:
                self.add_error(f'metric_{row["order"]}',
                               f'{row["description"]}: last month cannot exceed the cumulative figure')

    def payload(self):
        data = dict(self.cleaned)
        data['metrics'] = self._clean_metrics()
        return data


class FirstAidCaseForm(Form):
    fields = (
        Field('site_id', 'Site', lookup='sites'),
        Field('contractor_id', 'Contractor', lookup='contractors'),
        Field('incident_date', 'Date', kind='date', required=True, default=date.today),
        Field('incident_time', 'Time', pattern=TIME_PATTERN, pattern_message='Time must be HH:MM'),
        Field('injured_person', 'Injured Person', required=True),
        Field('induction_number', 'Induction No.'),
        Field('injury_details', 'Nature of Injury', widget='textarea', required=True),
        Field('treatment_provided', 'Treatment Provided', widget='textarea', required=True),
        Field('treatment_given_by', 'Treatment Given By', required=True),
        Field('investigated_by', 'Investigated By'),
    )

    def check(self, data):
        incident = data.get('incident_date')
        if incident and incident > date.today():
            self.add_error('incident_date', 'Incident date cannot be in the future')
