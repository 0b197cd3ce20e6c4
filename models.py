from datetime import datetime
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import UserMixin
from sqlalchemy import event

# SQLAlchemy instance (init in app)
db = SQLAlchemy()
bcrypt = Bcrypt()


def _set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable WAL mode and other optimizations for SQLite."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def init_db_events(app):
    """Initialize database event listeners for SQLite optimizations."""
    if app.config.get('SQLALCHEMY_DATABASE_URI', '').startswith('sqlite'):
        with app.app_context():
            event.listen(db.engine, "connect", _set_sqlite_pragma)


class User(UserMixin, db.Model):
    """Console account (people who log in to the admin console)."""
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(128), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='viewer')  # admin/manager/ehs_officer/viewer

    def set_password(self, password):
        # bcrypt returns bytes, store as decoded UTF-8 string
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f"<User {self.username}>"


class Audit(db.Model):
    __tablename__ = 'audit_logs'
    id = db.Column(db.Integer, primary_key=True)
    action = db.Column(db.String(200), nullable=False)
    actor_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    actor = db.relationship('User', backref='audit_logs', foreign_keys=[actor_id])
    target_type = db.Column(db.String(50), nullable=True)
    target_id = db.Column(db.String(64), nullable=True)
    details = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Audit {self.id} {self.action}>"


class RolePermission(db.Model):
    __tablename__ = 'role_permissions'
    id = db.Column(db.Integer, primary_key=True)
    role = db.Column(db.String(20), nullable=False, index=True)
    module = db.Column(db.String(50), nullable=False)
    actions = db.Column(db.String(200), nullable=False, default='view')  # comma separated

    __table_args__ = (db.UniqueConstraint('role', 'module', name='uq_role_module'),)

    def __repr__(self):
        return f"<RolePermission {self.role}:{self.module}>"


class SerializeMixin:
    """Column-driven conversion between rows and canonical record dicts."""

    hidden_fields = ()
    readonly_fields = ('id', 'created_at', 'updated_at')

    def to_dict(self):
        data = {}
        for column in self.__table__.columns:
            if column.key in self.hidden_fields:
                continue
            value = getattr(self, column.key)
            # references travel as strings, like every other record id
            if column.foreign_keys and value is not None:
                value = str(value)
            data[column.key] = value
        data['id'] = str(self.id)
        data.update(self.extra_fields())
        return data

    def extra_fields(self):
        return {}

    def apply(self, data):
        for column in self.__table__.columns:
            if column.key in self.readonly_fields or column.key not in data:
                continue
            value = data[column.key]
            if column.foreign_keys:
                value = int(value) if value not in (None, '') else None
            setattr(self, column.key, value)
        return self


def _name(obj, attr='name'):
    return getattr(obj, attr) if obj is not None else ''


class Employee(SerializeMixin, db.Model):
    __tablename__ = 'employees'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    mobile = db.Column(db.String(20), nullable=True)
    branch = db.Column(db.String(100), nullable=True, default='Head Office')
    department = db.Column(db.String(100), nullable=True)
    role = db.Column(db.String(30), nullable=False, default='Employee')
    reporting_manager_id = db.Column(db.Integer, db.ForeignKey('employees.id'), nullable=True)
    dob = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(20), nullable=False, default='Active')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    reporting_manager = db.relationship('Employee', remote_side=[id], backref='reports')

    def extra_fields(self):
        return {'reporting_manager_name': _name(self.reporting_manager)}

    def __repr__(self):
        return f"<Employee {self.id} {self.name}>"


class Society(SerializeMixin, db.Model):
    __tablename__ = 'societies'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, unique=True)
    address = db.Column(db.String(300), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    state = db.Column(db.String(100), nullable=True)
    pincode = db.Column(db.String(6), nullable=True)
    building_type = db.Column(db.String(30), nullable=True)
    total_blocks = db.Column(db.Integer, nullable=True, default=0)
    total_units = db.Column(db.Integer, nullable=True, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Society {self.id} {self.name}>"


class SocietyAdmin(SerializeMixin, db.Model):
    __tablename__ = 'society_admins'
    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(200), nullable=False, unique=True)
    password_hash = db.Column(db.String(128), nullable=False)
    phone = db.Column(db.String(20), nullable=True)
    society_id = db.Column(db.Integer, db.ForeignKey('societies.id'), nullable=True)
    role = db.Column(db.String(20), nullable=False, default='super_admin')  # super_admin/society_admin
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    society = db.relationship('Society', backref='admins')

    hidden_fields = ('password_hash',)
    readonly_fields = SerializeMixin.readonly_fields + ('role',)

    def apply(self, data):
        password = data.get('password')
        if password:
            self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')
        super().apply(data)
        # an admin without a society manages every society
        self.role = 'society_admin' if self.society_id else 'super_admin'
        return self

    def extra_fields(self):
        return {
            'full_name': f'{self.first_name} {self.last_name}'.strip(),
            'society_name': _name(self.society),
        }

    def __repr__(self):
        return f"<SocietyAdmin {self.id} {self.email}>"


class Block(SerializeMixin, db.Model):
    __tablename__ = 'blocks'
    id = db.Column(db.Integer, primary_key=True)
    society_id = db.Column(db.Integer, db.ForeignKey('societies.id'), nullable=True)
    name = db.Column(db.String(100), nullable=False)
    status = db.Column(db.String(30), nullable=False, default='Active')
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    society = db.relationship('Society', backref='blocks')

    def extra_fields(self):
        return {'society_name': _name(self.society)}


class Floor(SerializeMixin, db.Model):
    __tablename__ = 'floors'
    id = db.Column(db.Integer, primary_key=True)
    block_id = db.Column(db.Integer, db.ForeignKey('blocks.id'), nullable=False)
    floor_number = db.Column(db.Integer, nullable=False, default=0)
    name = db.Column(db.String(100), nullable=False)
    total_units = db.Column(db.Integer, nullable=True, default=0)
    status = db.Column(db.String(30), nullable=False, default='Active')
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    block = db.relationship('Block', backref='floors')

    def extra_fields(self):
        return {'block_name': _name(self.block)}


class Unit(SerializeMixin, db.Model):
    __tablename__ = 'units'
    id = db.Column(db.Integer, primary_key=True)
    block_id = db.Column(db.Integer, db.ForeignKey('blocks.id'), nullable=False)
    floor_id = db.Column(db.Integer, db.ForeignKey('floors.id'), nullable=False)
    unit_number = db.Column(db.String(30), nullable=False)
    unit_type = db.Column(db.String(30), nullable=False)
    area = db.Column(db.Float, nullable=True)
    status = db.Column(db.String(30), nullable=False, default='Active')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    block = db.relationship('Block', backref='units')
    floor = db.relationship('Floor', backref='units')

    def extra_fields(self):
        return {'block_name': _name(self.block), 'floor_name': _name(self.floor)}


class Event(SerializeMixin, db.Model):
    __tablename__ = 'events'
    id = db.Column(db.Integer, primary_key=True)
    society_id = db.Column(db.Integer, db.ForeignKey('societies.id'), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(200), nullable=True)
    starts_on = db.Column(db.Date, nullable=False)
    ends_on = db.Column(db.Date, nullable=True)
    capacity = db.Column(db.Integer, nullable=True)
    status = db.Column(db.String(20), nullable=False, default='Scheduled')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    society = db.relationship('Society', backref='events')

    def extra_fields(self):
        return {'society_name': _name(self.society)}


class Listing(SerializeMixin, db.Model):
    __tablename__ = 'listings'
    id = db.Column(db.Integer, primary_key=True)
    society_id = db.Column(db.Integer, db.ForeignKey('societies.id'), nullable=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(50), nullable=True)
    price = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=True)
    seller_name = db.Column(db.String(200), nullable=True)
    status = db.Column(db.String(20), nullable=False, default='pending')  # pending/approved/rejected/sold
    rejection_reason = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    society = db.relationship('Society', backref='listings')

    def extra_fields(self):
        return {'society_name': _name(self.society)}


class Site(SerializeMixin, db.Model):
    __tablename__ = 'sites'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, unique=True)
    location = db.Column(db.String(200), nullable=True)
    company_name = db.Column(db.String(200), nullable=True)
    code = db.Column(db.String(30), nullable=True)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Contractor(SerializeMixin, db.Model):
    __tablename__ = 'contractors'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    company_name = db.Column(db.String(200), nullable=True)
    contact_person = db.Column(db.String(200), nullable=True)
    contact_number = db.Column(db.String(20), nullable=True)
    email = db.Column(db.String(200), nullable=True)
    address = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Checklist(SerializeMixin, db.Model):
    __tablename__ = 'ehs_checklists'
    id = db.Column(db.Integer, primary_key=True)
    kind = db.Column(db.String(30), nullable=False, index=True)
    site_id = db.Column(db.Integer, db.ForeignKey('sites.id'), nullable=False)
    contractor_id = db.Column(db.Integer, db.ForeignKey('contractors.id'), nullable=True)
    equipment_ref = db.Column(db.String(100), nullable=False)
    inspection_date = db.Column(db.Date, nullable=False)
    inspected_by = db.Column(db.String(200), nullable=False)
    remarks = db.Column(db.Text, nullable=True)
    items = db.Column(db.JSON, nullable=False, default=list)  # [{code, description, status, remark}]
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    site = db.relationship('Site', backref='checklists')
    contractor = db.relationship('Contractor', backref='checklists')

    def extra_fields(self):
        return {
            'site_name': _name(self.site),
            'contractor_name': _name(self.contractor),
            'defects': sum(1 for item in (self.items or []) if item.get('status') == 'NOT_OK'),
        }


class DebitNote(SerializeMixin, db.Model):
    __tablename__ = 'ehs_debit_notes'
    id = db.Column(db.Integer, primary_key=True)
    note_number = db.Column(db.String(30), nullable=False, unique=True)
    date = db.Column(db.Date, nullable=False)
    time = db.Column(db.String(5), nullable=True)
    amount = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False)
    currency = db.Column(db.String(3), nullable=False, default='INR')
    company_or_staff = db.Column(db.String(200), nullable=False)
    sub_contractor = db.Column(db.String(200), nullable=True)
    site_id = db.Column(db.Integer, db.ForeignKey('sites.id'), nullable=True)
    location = db.Column(db.String(200), nullable=True)
    violation_note = db.Column(db.Text, nullable=True)
    additional_notes = db.Column(db.Text, nullable=True)
    responsible_person = db.Column(db.String(200), nullable=True)
    safety_officer = db.Column(db.String(200), nullable=True)
    project_manager = db.Column(db.String(200), nullable=True)
    contractor_representative = db.Column(db.String(200), nullable=True)
    status = db.Column(db.String(30), nullable=False, default='Under Review')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    site = db.relationship('Site', backref='debit_notes')

    def extra_fields(self):
        return {'site_name': _name(self.site)}


class StatisticsBoard(SerializeMixin, db.Model):
    __tablename__ = 'ehs_statistics_boards'
    id = db.Column(db.Integer, primary_key=True)
    project_name = db.Column(db.String(200), nullable=False)
    client_name = db.Column(db.String(200), nullable=True)
    contractor_name = db.Column(db.String(200), nullable=True)
    date = db.Column(db.Date, nullable=False)
    manpower_strength = db.Column(db.Integer, nullable=True)
    site_id = db.Column(db.Integer, db.ForeignKey('sites.id'), nullable=True)
    metrics = db.Column(db.JSON, nullable=False, default=list)  # [{order, description, last_month, cumulative, units}]
    target = db.Column(db.String(200), nullable=True)
    safety_slogan = db.Column(db.String(300), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    site = db.relationship('Site', backref='statistics_boards')

    def extra_fields(self):
        return {'site_name': _name(self.site)}


class FirstAidCase(SerializeMixin, db.Model):
    __tablename__ = 'ehs_first_aid_cases'
    id = db.Column(db.Integer, primary_key=True)
    site_id = db.Column(db.Integer, db.ForeignKey('sites.id'), nullable=True)
    contractor_id = db.Column(db.Integer, db.ForeignKey('contractors.id'), nullable=True)
    incident_date = db.Column(db.Date, nullable=False)
    incident_time = db.Column(db.String(5), nullable=True)
    injured_person = db.Column(db.String(200), nullable=False)
    induction_number = db.Column(db.String(50), nullable=True)
    injury_details = db.Column(db.Text, nullable=True)
    treatment_provided = db.Column(db.Text, nullable=True)
    treatment_given_by = db.Column(db.String(200), nullable=True)
    investigated_by = db.Column(db.String(200), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    site = db.relationship('Site', backref='first_aid_cases')
    contractor = db.relationship('Contractor', backref='first_aid_cases')

    def extra_fields(self):
        return {'site_name': _name(self.site), 'contractor_name': _name(self.contractor)}


def log_action(actor_id, action, target_type=None, target_id=None, details=None):
    """Create an audit log entry and commit it."""
    a = Audit(actor_id=actor_id, action=action, target_type=target_type,
              target_id=str(target_id) if target_id is not None else None, details=details)
    db.session.add(a)
    db.session.commit()
    return a
