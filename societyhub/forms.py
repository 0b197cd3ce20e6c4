"""
Form Controller: field rules, draft records and the submit flow.

A form is seeded from defaults (create) or an existing record (edit). On
submit every field rule runs, then the form's cross-field ``check``; any
violation blocks the submission before the gateway is contacted.
"""
import re
from datetime import date

from utils import parse_bool, parse_date, parse_integer, parse_numeric
from societyhub.gateway import Err
from societyhub.store import clear_lookups

EMAIL_PATTERN = r'\S+@\S+\.\S+'
MOBILE_PATTERN = r'\+?[0-9][0-9 \-]{8,16}[0-9]'


class Field:
    def __init__(self, name, label, kind='str', required=False, choices=None, pattern=None,
                 pattern_message=None, min_value=None, max_value=None, min_length=None,
                 default=None, widget=None, lookup=None, help_text=None):
        self.name = name
        self.label = label
        self.kind = kind
        self.required = required
        self.choices = choices
        self.pattern = pattern
        self.pattern_message = pattern_message
        self.min_value = min_value
        self.max_value = max_value
        self.min_length = min_length
        self.default = default
        self.lookup = lookup
        self.help_text = help_text
        self.widget = widget or self._default_widget()

    def _default_widget(self):
        if self.choices is not None or self.lookup:
            return 'select'
        return {'int': 'number', 'number': 'number', 'decimal': 'number', 'date': 'date', 'bool': 'checkbox'}.get(self.kind, 'text')

    def choice_values(self):
        return [c[0] if isinstance(c, tuple) else c for c in self.choices or ()]

    def clean(self, raw, required=None):
        """Return ``(value, errors)`` for one submitted value."""
        required = self.required if required is None else required
        if self.kind == 'bool':
            return parse_bool(raw), []

        if isinstance(raw, str):
            raw = raw.strip()
        if raw is None or raw == '':
            if required:
                return None, [f'{self.label} is required']
            return None, []

        value, errors = raw, []
        if self.kind == 'int':
            value = parse_integer(raw)
            if value is None:
                return None, [f'{self.label} must be a whole number']
        elif self.kind in ('number', 'decimal'):
            value = parse_numeric(raw)
            if value is None:
                return None, [f'{self.label} must be a number']
        elif self.kind == 'date':
            value = parse_date(raw)
            if value is None:
                return None, [f'{self.label} must be a valid date']

        if self.choices is not None and value not in self.choice_values():
            errors.append(f'Please select a valid {self.label.lower()}')
        if self.pattern and not re.fullmatch(self.pattern, str(value)):
            errors.append(self.pattern_message or f'{self.label} has an invalid format')
        if self.min_length and len(str(value)) < self.min_length:
            errors.append(f'{self.label} must be at least {self.min_length} characters')
        if self.min_value is not None and value < self.min_value:
            errors.append(f'{self.label} cannot be less than {self.min_value}')
        if self.max_value is not None and value > self.max_value:
            errors.append(f'{self.label} cannot be more than {self.max_value}')
        return value, errors


class Form:
    fields = ()

    def __init__(self, data=None, record=None, lookups=None):
        self.record = record or {}
        self.is_edit = bool(record)
        self.lookups = lookups or {}
        self.errors = {}
        self.cleaned = {}
        self.backend_error = None
        self.bound = data is not None
        self.data = data if data is not None else self.initial_data()

    def initial_data(self):
        data = {}
        for field in self.fields:
            value = self.record.get(field.name, field.default) if self.record else field.default
            if callable(value):
                value = value()
            data[field.name] = value
        return data

    def value(self, name):
        value = self.data.get(name)
        if isinstance(value, date):
            return value.isoformat()
        return '' if value is None else value

    def options(self, field):
        if field.choices is not None:
            return [c if isinstance(c, tuple) else (c, c) for c in field.choices]
        return self.lookups.get(field.name, [])

    def is_required(self, field):
        return field.required

    def add_error(self, name, message):
        self.errors.setdefault(name, []).append(message)

    def validate(self):
        self.errors = {}
        self.cleaned = {}
        for field in self.fields:
            value, errors = field.clean(self.data.get(field.name), required=self.is_required(field))
            self.cleaned[field.name] = value
            for message in errors:
                self.add_error(field.name, message)
        self.check(self.cleaned)
        return not self.errors

    def check(self, data):
        """Cross-field rules; call ``add_error`` for each violation."""

    def payload(self):
        return dict(self.cleaned)

    @property
    def first_error(self):
        for messages in self.errors.values():
            if messages:
                return messages[0]
        return None


class FormController:
    """Validate a bound form, then create or update through the gateway."""

    def __init__(self, resource, gateway, store=None):
        self.resource = resource
        self.gateway = gateway
        self.store = store

    def submit(self, form, record_id=None):
        if not form.validate():
            return Err('validation', status=422, errors=form.errors)

        payload = form.payload()
        if record_id is None:
            result = self.gateway.create(self.resource, payload)
        else:
            result = self.gateway.update(self.resource, record_id, payload)

        if not result.ok:
            form.backend_error = result.reason
            return result

        if self.store is not None:
            if record_id is None:
                self.store.prepend(result.value)
            else:
                self.store.replace_one(result.value)
        clear_lookups()
        return result
