"""
Gateway over the console's own database.
"""
from flask import current_app
from sqlalchemy import Boolean, Integer
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import RelationshipDirection

from models import (
    db, Employee, SocietyAdmin, Society, Block, Floor, Unit, Event, Listing,
    Site, Contractor, Checklist, DebitNote, StatisticsBoard, FirstAidCase, RolePermission,
)
from utils import parse_bool, parse_integer
from societyhub.permissions import default_matrix
from .result import Ok, Err, Page

RESOURCE_MODELS = {
    'employees': Employee,
    'society_admins': SocietyAdmin,
    'societies': Society,
    'blocks': Block,
    'floors': Floor,
    'units': Unit,
    'events': Event,
    'listings': Listing,
    'sites': Site,
    'contractors': Contractor,
    'checklists': Checklist,
    'debit_notes': DebitNote,
    'statistics_boards': StatisticsBoard,
    'first_aid_cases': FirstAidCase,
}

NOT_FOUND = 'Record not found'


def _coerce(column, value):
    if isinstance(column.type, Boolean):
        return parse_bool(value)
    if isinstance(column.type, Integer):
        return parse_integer(value)
    return value


class SqlGateway:
    """Data access backed by Flask-SQLAlchemy models."""

    def _model(self, resource):
        try:
            return RESOURCE_MODELS[resource]
        except KeyError:
            raise KeyError(f'Unknown resource: {resource}')

    def _row(self, model, record_id):
        pk = parse_integer(record_id)
        return db.session.get(model, pk) if pk is not None else None

    def list(self, resource, page=1, limit=50, **params):
        model = self._model(resource)
        columns = {c.key: c for c in model.__table__.columns}

        q = model.query
        conditions = []
        for key, value in params.items():
            # params that do not name a column (owner_id, ...) are REST-only hints
            if key in columns and value not in (None, ''):
                conditions.append(columns[key] == _coerce(columns[key], value))
        if conditions:
            q = q.filter(*conditions)
        q = q.order_by(model.created_at.desc(), model.id.desc())

        try:
            pagination = q.paginate(page=page, per_page=limit, error_out=False)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception(f'Listing {resource} failed')
            return Err(f'Could not load records: {e.__class__.__name__}', status=500)

        return Ok(Page(
            items=[row.to_dict() for row in pagination.items],
            page=pagination.page,
            total_pages=pagination.pages or 1,
            total=pagination.total or 0,
        ))

    def get(self, resource, record_id):
        row = self._row(self._model(resource), record_id)
        if row is None:
            return Err(NOT_FOUND, status=404)
        return Ok(row.to_dict())

    def create(self, resource, payload):
        row = self._model(resource)()
        return self._save(row, payload, is_new=True)

    def update(self, resource, record_id, payload):
        row = self._row(self._model(resource), record_id)
        if row is None:
            return Err(NOT_FOUND, status=404)
        return self._save(row, payload)

    def _save(self, row, payload, is_new=False):
        try:
            row.apply(payload)
            if is_new:
                db.session.add(row)
            db.session.commit()
        except ValueError as e:
            db.session.rollback()
            return Err(f'Invalid value: {e}', status=400)
        except IntegrityError:
            db.session.rollback()
            return Err('A record with these details already exists', status=409)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception(f'Saving {row.__tablename__} failed')
            return Err(f'Could not save record: {e.__class__.__name__}', status=500)
        return Ok(row.to_dict())

    def delete(self, resource, record_id):
        row = self._row(self._model(resource), record_id)
        if row is None:
            return Err(NOT_FOUND, status=404)

        # prevent deletion if referenced by other records
        for rel in row.__mapper__.relationships:
            if rel.direction is RelationshipDirection.ONETOMANY:
                in_use = len(getattr(row, rel.key) or [])
                if in_use:
                    return Err(f'Cannot delete: used by {in_use} {rel.key.replace("_", " ")}', status=409)

        data = row.to_dict()
        try:
            db.session.delete(row)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception(f'Deleting {resource} {record_id} failed')
            return Err(f'Could not delete record: {e.__class__.__name__}', status=500)
        return Ok(data)

    def permissions(self, role):
        rows = RolePermission.query.filter_by(role=role).all()
        if not rows:
            return Ok(default_matrix(role))
        return Ok([{
            'role': role,
            'module_permissions': [
                {'module': r.module, 'actions': [a.strip() for a in r.actions.split(',') if a.strip()]}
                for r in rows
            ],
        }])

    def own_permissions(self, role):
        return self.permissions(role)

    def transition(self, resource, record_id, action, **fields):
        """Workflow step (approve, reject, ...): a plain update of ``fields`` here."""
        return self.update(resource, record_id, fields)
