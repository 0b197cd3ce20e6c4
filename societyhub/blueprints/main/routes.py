# societyhub/blueprints/main/routes.py
"""
Home screen
"""

from flask import render_template
from flask_login import login_required

from societyhub.permissions import current_permissions
from . import main_bp

# (section, [(module, title, endpoint)])
SECTIONS = (
    ('People', (
        ('employees', 'Employees', 'people.employees_list'),
        ('society_admins', 'Society Admins', 'people.society_admins_list'),
    )),
    ('Buildings', (
        ('societies', 'Societies', 'buildings.societies_list'),
        ('blocks', 'Blocks', 'buildings.blocks_list'),
        ('floors', 'Floors', 'buildings.floors_list'),
        ('units', 'Units', 'buildings.units_list'),
    )),
    ('Community', (
        ('events', 'Events', 'community.events_list'),
        ('listings', 'Marketplace', 'community.listings_list'),
    )),
    ('EHS', (
        ('checklists', 'Dashboard', 'ehs.dashboard'),
        ('sites', 'Sites', 'ehs.sites_list'),
        ('contractors', 'Contractors', 'ehs.contractors_list'),
        ('checklists', 'Equipment Checklists', 'ehs.checklists_list'),
        ('debit_notes', 'Debit Notes', 'ehs.debit_notes_list'),
        ('statistics_boards', 'Statistics Boards', 'ehs.statistics_boards_list'),
        ('first_aid_cases', 'First-Aid Register', 'ehs.first_aid_cases_list'),
    )),
)


def visible_sections(permissions):
    """Sections with only the entries the permission index allows to view."""
    visible = []
    for section, entries in SECTIONS:
        allowed = [(title, endpoint) for module, title, endpoint in entries if permissions.can(module, 'view')]
        if allowed:
            visible.append((section, allowed))
    return visible


@main_bp.route('/')
@login_required
def index():
    return render_template('home.html', sections=visible_sections(current_permissions()))
