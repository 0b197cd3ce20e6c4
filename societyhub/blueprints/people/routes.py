# societyhub/blueprints/people/routes.py
"""
People routes - employees and society admins
"""

from flask_login import current_user

from societyhub.crud import Resource
from societyhub.store import lookup_options
from .forms import (
    EmployeeForm, SocietyAdminForm, EMPLOYEE_ROLES, EMPLOYEE_STATUSES, MANAGER_ROLES, is_super_admin,
)
from . import people_bp


def is_admin_record(record):
    """Backend admin accounts are listed with employees but never shown."""
    return (record.get('role') or '').strip().lower() == 'admin'


class EmployeeResource(Resource):
    name = 'employees'
    title = 'Employees'
    singular = 'Employee'
    form_class = EmployeeForm
    columns = (
        ('name', 'Name'),
        ('mobile', 'Mobile'),
        ('branch', 'Branch'),
        ('department', 'Department'),
        ('role', 'Role'),
        ('reporting_manager_name', 'Reporting Manager'),
        ('dob', 'Date of Birth'),
        ('status', 'Status'),
    )
    search_fields = ('name', 'mobile', 'branch', 'department', 'role', 'reporting_manager_name')
    filters = (
        ('role', 'Role', [r for r in EMPLOYEE_ROLES if r != 'Admin']),
        ('branch', 'Branch', None),
        ('department', 'Department', None),
        ('status', 'Status', EMPLOYEE_STATUSES),
    )

    def list_params(self):
        # the employee list is scoped to the requesting account
        return {'owner_id': current_user.get_id()}

    def keep(self, record):
        return not is_admin_record(record)

    def lookups(self):
        managers = lookup_options(
            'employees',
            where=lambda r: r.get('role') in MANAGER_ROLES and not is_admin_record(r),
            owner=current_user.get_id(),
        )
        return {'reporting_manager_id': managers}


class SocietyAdminResource(Resource):
    name = 'society_admins'
    title = 'Society Admins'
    singular = 'Society admin'
    form_class = SocietyAdminForm
    columns = (
        ('full_name', 'Name'),
        ('email', 'Email'),
        ('phone', 'Phone'),
        ('society_name', 'Society'),
        ('role', 'Role'),
        ('is_active', 'Active'),
    )
    search_fields = ('full_name', 'first_name', 'last_name', 'email', 'phone', 'society_name')
    filters = (
        ('society_name', 'Society', None),
        ('role', 'Role', [('super_admin', 'Super admin'), ('society_admin', 'Society admin')]),
        ('is_active', 'Status', [('True', 'Active'), ('False', 'Inactive')]),
    )

    def label(self, record):
        return record.get('full_name') or record.get('email') or record.get('id') or ''

    def lookups(self):
        return {'society_id': lookup_options('societies')}

    def success_message(self, record, created):
        kind = 'Super admin' if is_super_admin(record) else 'Society admin'
        return f'{kind} {"created" if created else "updated"} successfully'


employees = EmployeeResource().register(people_bp)
society_admins = SocietyAdminResource().register(people_bp)
