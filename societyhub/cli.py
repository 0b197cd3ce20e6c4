"""
CLI commands for database management (``flask --app run <command>``)
"""
import os
import sqlite3
from datetime import datetime

import click

from models import db, User, RolePermission, log_action
from societyhub.permissions import CONSOLE_ROLES, DEFAULT_PERMISSIONS


def _create_user(app, username, password, role, source):
    if User.query.filter_by(username=username).first():
        click.echo('User already exists.')
        return None
    u = User(username=username, role=role)
    u.set_password(password)
    db.session.add(u)
    db.session.commit()
    # audit (CLI-created)
    try:
        log_action(None, 'user.create', 'user', u.id, f'created by {source} with role={role}')
    except Exception:
        app.logger.exception(f'Failed to write audit log for {source}')
    app.logger.info(f'User created by CLI: {username} with role {role}')
    return u


def seed_permissions(replace=False):
    """Store the default role matrix; returns the number of rows written."""
    written = 0
    for role, modules in DEFAULT_PERMISSIONS.items():
        for module, actions in modules.items():
            row = RolePermission.query.filter_by(role=role, module=module).first()
            if row is not None and not replace:
                continue
            if row is None:
                row = RolePermission(role=role, module=module)
                db.session.add(row)
            row.actions = ','.join(actions)
            written += 1
    db.session.commit()
    return written


def register_commands(app):

    @app.cli.command('init-db')
    def init_db():
        """Create database tables."""
        db.create_all()
        click.echo('Initialized the database.')

    @app.cli.command('create-admin')
    @click.argument('username')
    @click.argument('password')
    def create_admin(username, password):
        """Create an admin user: flask create-admin <username> <password>"""
        if _create_user(app, username, password, 'admin', 'create-admin'):
            click.echo(f'Created admin user {username}')

    @app.cli.command('create-user')
    @click.argument('username')
    @click.argument('password')
    @click.argument('role', type=click.Choice(CONSOLE_ROLES, case_sensitive=False))
    def create_user(username, password, role):
        """Create a user with specified role: flask create-user <username> <password> <role>"""
        if _create_user(app, username, password, role.lower(), 'create-user'):
            click.echo(f'Created {role} user {username}')

    @app.cli.command('seed-permissions')
    @click.option('--replace', is_flag=True, help='Overwrite rows that already exist')
    def seed_permissions_command(replace):
        """Store the default role permission matrix."""
        written = seed_permissions(replace=replace)
        try:
            log_action(None, 'permissions.seed', 'role_permissions', None, f'rows={written} replace={replace}')
        except Exception:
            app.logger.exception('Failed to write audit log for seed-permissions')
        app.logger.info(f'Permission matrix seeded: {written} rows')
        click.echo(f'Seeded {written} permission rows.')

    @app.cli.command('backup-db')
    @click.option('--output', '-o', default=None, help='Output file path (default: data/backup_YYYYMMDD_HHMMSS.db)')
    def backup_db(output):
        """Create a safe backup of the SQLite database (works with WAL mode)."""
        db_uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
        if not db_uri.startswith('sqlite'):
            click.echo('Backup command only works with SQLite databases')
            return

        source_path = db_uri.replace('sqlite:///', '')
        if not os.path.exists(source_path):
            click.echo(f'Database file not found: {source_path}')
            return

        # Generate default output path
        if not output:
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            output = os.path.join(os.path.dirname(source_path), f'backup_{timestamp}.db')

        output_dir = os.path.dirname(output)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)

        try:
            # Use SQLite backup API for safe hot backup
            source_conn = sqlite3.connect(source_path)
            dest_conn = sqlite3.connect(output)
            source_conn.backup(dest_conn)
            source_conn.close()
            dest_conn.close()
        except sqlite3.Error as e:
            click.echo(f'Backup failed: {e}')
            app.logger.exception('Database backup failed')
            return

        size_mb = os.path.getsize(output) / (1024 * 1024)
        click.echo(f'Backup created successfully: {output} ({size_mb:.2f} MB)')
        app.logger.info(f'Database backup created: {output}')
