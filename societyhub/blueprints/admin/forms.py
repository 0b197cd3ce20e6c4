"""
Console account form
"""
from models import User
from societyhub.forms import Form, Field
from societyhub.permissions import CONSOLE_ROLES


class UserForm(Form):
    """Create or edit a console login. A blank password on edit keeps the old one."""
    fields = (
        Field('username', 'Username', required=True, pattern=r'[A-Za-z0-9_.@\-]+',
              pattern_message='Username may contain letters, digits, ".", "_", "-" and "@" only'),
        Field('password', 'Password', widget='password'),
        Field('role', 'Role', choices=CONSOLE_ROLES, default='viewer'),
    )

    def is_required(self, field):
        if field.name == 'password':
            return not self.is_edit
        return field.required

    def check(self, data):
        username = data.get('username')
        if not username:
            return
        existing = User.query.filter_by(username=username).first()
        if existing and str(existing.id) != str(self.record.get('id')):
            self.add_error('username', 'Username is already taken')

    def payload(self):
        data = dict(self.cleaned)
        data['role'] = data.get('role') or self.record.get('role') or 'viewer'
        if not data.get('password'):
            data.pop('password', None)
        return data

    @classmethod
    def for_user(cls, user, data=None):
        return cls(data, record={'id': user.id, 'username': user.username, 'role': user.role})
