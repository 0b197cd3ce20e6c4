"""
Employee and society admin forms
"""
from utils import age_on
from societyhub.forms import Form, Field, EMAIL_PATTERN, MOBILE_PATTERN

EMPLOYEE_ROLES = ('Admin', 'Manager', 'Sub Manager', 'Supervisor', 'Employee')
# roles that report to somebody
MANAGED_ROLES = ('Sub Manager', 'Supervisor', 'Employee')
MANAGER_ROLES = ('Admin', 'Manager', 'Sub Manager')
EMPLOYEE_STATUSES = ('Active', 'Inactive')
MINIMUM_AGE = 18


class EmployeeForm(Form):
    fields = (
        Field('name', 'Name', required=True),
        Field('mobile', 'Mobile', required=True, pattern=MOBILE_PATTERN,
              pattern_message='Enter a valid mobile number'),
        Field('branch', 'Branch', default='Head Office'),
        Field('department', 'Department'),
        Field('role', 'Role', required=True, choices=EMPLOYEE_ROLES, default='Employee'),
        Field('reporting_manager_id', 'Reporting Manager', lookup='employees',
              help_text='Required for sub managers, supervisors and employees'),
        Field('dob', 'Date of Birth', kind='date'),
        Field('status', 'Status', required=True, choices=EMPLOYEE_STATUSES, default='Active'),
    )

    def is_required(self, field):
        if field.name == 'reporting_manager_id':
            return (self.data.get('role') or '').strip() in MANAGED_ROLES
        return field.required

    def check(self, data):
        born = data.get('dob')
        if born is not None and age_on(born) < MINIMUM_AGE:
            self.add_error('dob', f'Employee must be at least {MINIMUM_AGE} years old')

        manager = data.get('reporting_manager_id')
        if manager and self.is_edit and str(manager) == str(self.record.get('id')):
            self.add_error('reporting_manager_id', 'An employee cannot report to themselves')

    def payload(self):
        data = dict(self.cleaned)
        data['branch'] = data.get('branch') or 'Head Office'
        return data


class SocietyAdminForm(Form):
    fields = (
        Field('first_name', 'First Name', required=True),
        Field('last_name', 'Last Name', required=True),
        Field('email', 'Email', required=True, pattern=EMAIL_PATTERN,
              pattern_message='Enter a valid email address'),
        Field('password', 'Password', required=True, min_length=6, widget='password',
              help_text='Leave blank to keep the current password'),
        Field('phone', 'Phone', pattern=MOBILE_PATTERN, pattern_message='Enter a valid phone number'),
        Field('society_id', 'Society', lookup='societies',
              help_text='Leave empty to create a super admin'),
        Field('is_active', 'Active', kind='bool', default=True),
    )

    # on edit these are validated only when a value is provided
    CREATE_ONLY = ('first_name', 'last_name', 'email', 'password')

    def initial_data(self):
        data = super().initial_data()
        data['password'] = ''
        return data

    def is_required(self, field):
        if field.name in self.CREATE_ONLY:
            return not self.is_edit
        return field.required

    def payload(self):
        data = dict(self.cleaned)
        if not data.get('password'):
            data.pop('password', None)
        if self.is_edit:
            for name in self.CREATE_ONLY:
                if data.get(name) is None:
                    data.pop(name, None)
        # no society selected means a super admin
        data['society_id'] = data.get('society_id') or None
        return data


def is_super_admin(record):
    return not record.get('society_id')
