# societyhub/blueprints/auth/routes.py
"""
Authentication routes
"""

from flask import render_template, redirect, url_for, flash, request, current_app
from flask_login import login_user, logout_user, login_required, current_user

from models import User
from . import auth_bp


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    """
    Login page and authentication handler

    GET: Display login form
    POST: Authenticate user and redirect to the home screen
    """
    if request.method == 'POST':
        username = request.form.get('username', '').strip()
        password = request.form.get('password', '')
        user = User.query.filter_by(username=username).first()

        if user and user.check_password(password):
            login_user(user)
            current_app.logger.info(f'User logged in: {username}')
            next_url = request.args.get('next', '')
            # only local paths, never another host
            if not next_url.startswith('/') or next_url.startswith('//'):
                next_url = url_for('main.index')
            return redirect(next_url)

        current_app.logger.warning(f'Failed login for {username!r}')
        flash('Invalid username or password', 'danger')
        return redirect(url_for('auth.login'))

    return render_template('login.html')


@auth_bp.route('/logout')
@login_required
def logout():
    """
    Logout current user and redirect to login page
    """
    current_app.logger.info(f'User logged out: {current_user.username}')
    logout_user()
    return redirect(url_for('auth.login'))
