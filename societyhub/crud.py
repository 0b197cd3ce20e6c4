"""
List / form / delete / export / print routes shared by every resource screen.

A screen is described by a ``Resource`` subclass (columns, filters, form
class, optional print template) and attached to a blueprint with
``register``. The list itself always flows through the Record Store and the
Filter/Search Engine.
"""
from datetime import date, datetime

from flask import render_template, redirect, url_for, flash, request, current_app, send_file
from flask_login import current_user

from models import log_action
from decorators import permission_required
from utils import format_date
from societyhub.export import build_workbook
from societyhub.forms import FormController
from societyhub.gateway import get_gateway
from societyhub.printing import document_response
from societyhub.store import RecordStore, clear_lookups, distinct_values, filter_records

EXPORT_LIMIT = 1000


class Resource:
    name = None  # gateway resource and permission module
    slug = None  # URL segment, defaults to name with dashes
    title = None
    singular = None
    form_class = None
    columns = ()  # (key, label) pairs for the table and the export
    search_fields = None  # None searches every scalar field
    filters = ()  # (key, label, choices or None for distinct values)
    print_template = None
    list_template = 'crud/list.html'
    form_template = 'crud/form.html'

    def __init__(self):
        self.slug = self.slug or self.name.replace('_', '-')
        self.blueprint = None

    # -- hooks -----------------------------------------------------------
    def list_params(self):
        return {}

    def keep(self, record):
        return True

    def lookups(self):
        return {}

    def label(self, record):
        return record.get('name') or record.get('title') or record.get('id') or ''

    def success_message(self, record, created):
        verb = 'created' if created else 'updated'
        return f'{self.singular} {verb} successfully'

    def print_context(self, record):
        return {'record': record}

    def print_filename(self, record):
        return f'{self.name}_{record.get("id")}'

    def form_data(self):
        return request.form.to_dict()

    def make_form(self, data=None, record=None, lookups=None):
        return self.form_class(data, record=record, lookups=lookups)

    # -- helpers used by templates ---------------------------------------
    def endpoint(self, action):
        return f'{self.blueprint}.{self.name}_{action}'

    def url(self, action, **kwargs):
        return url_for(self.endpoint(action), **kwargs)

    def cell(self, record, key):
        value = record.get(key)
        if isinstance(value, bool):
            return 'Yes' if value else 'No'
        if isinstance(value, (date, datetime)):
            return format_date(value)
        return '' if value is None else value

    def filter_options(self, records):
        options = []
        for key, label, choices in self.filters:
            values = list(choices) if choices is not None else distinct_values(records, key)
            options.append((key, label, [v if isinstance(v, tuple) else (v, v) for v in values]))
        return options

    # -- data ------------------------------------------------------------
    def load(self, gateway, store, page=1, limit=50, **params):
        keep = None if type(self).keep is Resource.keep else self.keep
        return store.refresh(gateway, page=page, limit=limit, keep=keep, **params)

    def _selection(self, args):
        search = args.get('q', '').strip()
        selected = {key: args.get(key, '').strip() for key, _, _ in self.filters}
        return search, selected

    def _audit(self, action, target_id, details):
        try:
            log_action(current_user.id, f'{self.name}.{action}', self.name, target_id, details)
        except Exception:
            current_app.logger.exception(f'Failed to write audit log for {self.name}.{action}')

    # -- views -----------------------------------------------------------
    def list_view(self):
        store = RecordStore.for_user(self.name)
        page = request.args.get('page', 1, type=int)
        per_page = request.args.get('per_page', current_app.config.get('PER_PAGE', 50), type=int)

        result = self.load(get_gateway(), store, page, per_page, **self.list_params())
        pagination = result.value if result.ok else None
        if not result.ok:
            flash(f'Could not load {self.title.lower()}: {result.reason}', 'danger')

        records = store.records
        search, selected = self._selection(request.args)
        rows = filter_records(records, search, selected, self.search_fields)
        return render_template(self.list_template,
                               resource=self,
                               rows=rows,
                               total=len(records),
                               pagination=pagination,
                               search=search,
                               selected=selected,
                               filter_options=self.filter_options(records),
                               active_filters_count=sum(1 for v in selected.values() if v) + (1 if search else 0))

    def form_view(self, record_id=None):
        gateway = get_gateway()
        record = None
        if record_id is not None:
            result = gateway.get(self.name, record_id)
            if not result.ok:
                flash(result.reason, 'danger')
                return redirect(self.url('list'))
            record = result.value

        lookups = self.lookups()
        if request.method == 'POST':
            form = self.make_form(self.form_data(), record=record, lookups=lookups)
            controller = FormController(self.name, gateway, RecordStore.for_user(self.name))
            result = controller.submit(form, record_id)
            if result.ok:
                created = record_id is None
                saved = result.value or {}
                target_id = saved.get('id', record_id)
                self._audit('create' if created else 'update', target_id, self.label(saved))
                current_app.logger.info(
                    f'{self.singular} {"created" if created else "updated"}: {target_id} by {current_user.username}')
                flash(self.success_message(saved or form.payload(), created), 'success')
                return redirect(self.url('list'))
            if form.backend_error:
                flash(form.backend_error, 'danger')
            else:
                flash('Please correct the highlighted fields', 'warning')
        else:
            form = self.make_form(record=record, lookups=lookups)

        return render_template(self.form_template, resource=self, form=form, record=record)

    def delete_view(self, record_id):
        result = get_gateway().delete(self.name, record_id)
        if not result.ok:
            flash(result.reason, 'danger')
            return redirect(self.url('list'))

        RecordStore.for_user(self.name).remove(record_id)
        clear_lookups()
        self._audit('delete', record_id, self.label(result.value or {}))
        current_app.logger.info(f'{self.singular} deleted: {record_id} by {current_user.username}')
        flash(f'{self.singular} deleted', 'danger')
        return redirect(self.url('list'))

    def export_view(self):
        store = RecordStore(self.name, f'export:{current_user.get_id()}')
        result = self.load(get_gateway(), store, 1, EXPORT_LIMIT, **self.list_params())
        if not result.ok:
            flash(f'Export failed: {result.reason}', 'danger')
            return redirect(self.url('list'))

        search, selected = self._selection(request.args)
        rows = filter_records(store.records, search, selected, self.search_fields)
        if not rows:
            flash('No records found to export', 'warning')
            return redirect(self.url('list'))

        headers = [label for _, label in self.columns]
        data = [[self.cell(r, key) for key, _ in self.columns] for r in rows]
        bio = build_workbook(self.title, headers, data)

        log_details = f'q={search} filters={selected} count={len(rows)}'
        self._audit('export', None, log_details)
        current_app.logger.info(f'Export of {self.name} by {current_user.username}: {log_details}')

        filename = f"{self.name}_export_{datetime.now().strftime('%d-%m-%Y')}.xlsx"
        return send_file(bio, as_attachment=True, download_name=filename,
                         mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')

    def print_view(self, record_id):
        result = get_gateway().get(self.name, record_id)
        if not result.ok:
            flash(f'Nothing to print: {result.reason}', 'warning')
            return redirect(self.url('list'))

        record = result.value
        response = document_response(self.print_template, self.print_filename(record),
                                     fmt=request.args.get('format', 'html'),
                                     **self.print_context(record))
        if response is None:
            return redirect(self.url('list'))
        self._audit('print', record_id, self.label(record))
        return response

    # -- wiring ----------------------------------------------------------
    def register(self, bp):
        self.blueprint = bp.name
        base = f'/{self.slug}'
        rules = [
            ('', 'list', 'view', self.list_view, ['GET']),
            ('/new', 'new', 'add', self.form_view, ['GET', 'POST']),
            ('/<record_id>/edit', 'edit', 'edit', self.form_view, ['GET', 'POST']),
            ('/<record_id>/delete', 'delete', 'delete', self.delete_view, ['POST']),
            ('/export', 'export', 'view', self.export_view, ['GET']),
        ]
        if self.print_template:
            rules.append(('/<record_id>/print', 'print', 'view', self.print_view, ['GET']))

        for rule, action, permission, view, methods in rules:
            bp.add_url_rule(base + rule, f'{self.name}_{action}',
                            permission_required(self.name, permission)(view),
                            methods=methods)
        return self
