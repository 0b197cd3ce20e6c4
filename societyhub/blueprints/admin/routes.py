# societyhub/blueprints/admin/routes.py
"""
Admin routes
"""

from flask import render_template, redirect, url_for, flash, request, current_app
from flask_login import current_user

from models import db, User, Audit, log_action
from decorators import role_required
from societyhub.gateway import get_gateway
from societyhub.permissions import ACTIONS, CONSOLE_ROLES, MODULES, PermissionIndex
from . import admin_bp
from .forms import UserForm


def _audit(action, user_id, details):
    try:
        log_action(current_user.id, f'user.{action}', 'user', user_id, details)
    except Exception:
        current_app.logger.exception(f'Failed to write audit log for user.{action}')


def apply_user_form(form, user):
    """Copy a validated form onto ``user``; returns the audit details."""
    data = form.payload()
    changes = [f'username={user.username}->{data["username"]}'] if user.username else []
    user.username = data['username']
    user.role = data['role']
    changes.append(f'role={user.role}')
    if data.get('password'):
        user.set_password(data['password'])
        if form.is_edit:
            changes.append('password_changed=True')
    return ', '.join(changes)


# Console accounts
@admin_bp.route('/users')
@role_required('admin')
def admin_users():
    users = User.query.order_by(User.username).all()
    return render_template('admin/users.html', users=users, roles=CONSOLE_ROLES)


@admin_bp.route('/users/create', methods=['POST'])
@role_required('admin')
def admin_create_user():
    form = UserForm(request.form.to_dict())
    if not form.validate():
        flash(form.first_error, 'warning')
        return redirect(url_for('admin.admin_users'))

    u = User(username='', role='viewer')
    details = apply_user_form(form, u)
    db.session.add(u)
    db.session.commit()
    _audit('create', u.id, details)
    current_app.logger.info(f'User created: {u.username} by {current_user.username}')
    flash(f'User {u.username} ({u.role}) created successfully', 'success')
    return redirect(url_for('admin.admin_users'))


@admin_bp.route('/users/<int:user_id>/edit', methods=['GET', 'POST'])
@role_required('admin')
def admin_edit_user(user_id):
    u = db.get_or_404(User, user_id)

    if request.method == 'POST':
        form = UserForm.for_user(u, request.form.to_dict())
        if form.validate():
            details = apply_user_form(form, u)
            db.session.commit()
            _audit('update', u.id, details)
            current_app.logger.info(f'User updated: {u.username} by {current_user.username}')
            flash(f'User {u.username} updated successfully', 'success')
            return redirect(url_for('admin.admin_users'))
        flash('Please correct the highlighted fields', 'warning')
    else:
        form = UserForm.for_user(u)

    return render_template('admin/edit_user.html', user=u, form=form)


@admin_bp.route('/users/<int:user_id>/delete', methods=['POST'])
@role_required('admin')
def admin_delete_user(user_id):
    if current_user.id == user_id:
        flash('You cannot delete yourself', 'danger')
        return redirect(url_for('admin.admin_users'))
    u = db.get_or_404(User, user_id)
    username = u.username
    db.session.delete(u)
    db.session.commit()
    _audit('delete', user_id, f'username={username}')
    current_app.logger.info(f'User deleted: {username} by {current_user.username}')
    flash(f'User {username} deleted', 'danger')
    return redirect(url_for('admin.admin_users'))


@admin_bp.route('/audit')
@role_required('admin')
def admin_audit():
    page = request.args.get('page', 1, type=int)
    action_q = request.args.get('action', '').strip()
    target_type = request.args.get('target_type', '').strip()

    q = Audit.query
    if action_q:
        q = q.filter(Audit.action.contains(action_q))
    if target_type:
        q = q.filter(Audit.target_type == target_type)
    pagination = q.order_by(Audit.created_at.desc(), Audit.id.desc()).paginate(
        page=page, per_page=current_app.config.get('PER_PAGE', 50), error_out=False)

    target_types = [t[0] for t in db.session.query(Audit.target_type).distinct()
                    .filter(Audit.target_type != None).order_by(Audit.target_type).all()]
    return render_template('admin/audit.html', pagination=pagination, logs=pagination.items,
                           action_q=action_q, target_type=target_type, target_types=target_types)


@admin_bp.route('/permissions')
@role_required('admin')
def admin_permissions():
    """Effective permission matrix of every console role."""
    gateway = get_gateway()
    matrix = {}
    for role in CONSOLE_ROLES:
        result = gateway.permissions(role)
        if not result.ok and result.status == 501:
            return render_template('admin/permissions.html', matrix={}, roles=CONSOLE_ROLES,
                                   modules=MODULES, actions=ACTIONS, unavailable=result.reason)
        if not result.ok:
            flash(f'Could not load permissions for {role}: {result.reason}', 'danger')
            matrix[role] = {}
            continue
        index = PermissionIndex.from_matrices(result.value)
        matrix[role] = {module: index.actions(module) for module in MODULES}
    return render_template('admin/permissions.html', matrix=matrix, roles=CONSOLE_ROLES,
                           modules=MODULES, actions=ACTIONS)
