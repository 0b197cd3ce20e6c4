# societyhub/blueprints/buildings/routes.py
"""
Buildings routes - societies, blocks, floors and units
"""

from societyhub.crud import Resource
from societyhub.store import lookup_options, lookup_records
from .forms import (
    SocietyForm, BlockForm, FloorForm, UnitForm,
    BUILDING_TYPES, BLOCK_STATUSES, UNIT_TYPES, UNIT_STATUSES,
)
from . import buildings_bp


class SocietyResource(Resource):
    name = 'societies'
    title = 'Societies'
    singular = 'Society'
    form_class = SocietyForm
    columns = (
        ('name', 'Name'),
        ('city', 'City'),
        ('state', 'State'),
        ('pincode', 'Pincode'),
        ('building_type', 'Type'),
        ('total_blocks', 'Blocks'),
        ('total_units', 'Units'),
        ('is_active', 'Active'),
    )
    search_fields = ('name', 'address', 'city', 'state', 'pincode')
    filters = (
        ('building_type', 'Type', BUILDING_TYPES),
        ('city', 'City', None),
        ('is_active', 'Status', [('True', 'Active'), ('False', 'Inactive')]),
    )


class BlockResource(Resource):
    name = 'blocks'
    title = 'Blocks'
    singular = 'Block'
    form_class = BlockForm
    columns = (
        ('name', 'Block'),
        ('society_name', 'Society'),
        ('status', 'Status'),
        ('description', 'Description'),
    )
    search_fields = ('name', 'society_name', 'status', 'description')
    filters = (
        ('society_name', 'Society', None),
        ('status', 'Status', BLOCK_STATUSES),
    )

    def lookups(self):
        return {'society_id': lookup_options('societies')}


class FloorResource(Resource):
    name = 'floors'
    title = 'Floors'
    singular = 'Floor'
    form_class = FloorForm
    columns = (
        ('name', 'Floor'),
        ('floor_number', 'Number'),
        ('block_name', 'Block'),
        ('total_units', 'Units'),
        ('status', 'Status'),
    )
    search_fields = ('name', 'floor_number', 'block_name', 'status')
    filters = (
        ('block_name', 'Block', None),
        ('status', 'Status', BLOCK_STATUSES),
    )

    def lookups(self):
        return {'block_id': lookup_options('blocks')}


class UnitResource(Resource):
    name = 'units'
    title = 'Units'
    singular = 'Unit'
    form_class = UnitForm
    columns = (
        ('unit_number', 'Unit'),
        ('block_name', 'Block'),
        ('floor_name', 'Floor'),
        ('unit_type', 'Type'),
        ('area', 'Area'),
        ('status', 'Status'),
    )
    search_fields = ('unit_number', 'block_name', 'floor_name', 'unit_type', 'status', 'area')
    filters = (
        ('block_name', 'Block', None),
        ('unit_type', 'Type', UNIT_TYPES),
        ('status', 'Status', UNIT_STATUSES),
    )

    def label(self, record):
        return record.get('unit_number') or record.get('id') or ''

    def lookups(self):
        floors = lookup_records('floors') or []
        return {
            'block_id': lookup_options('blocks'),
            'floor_id': lookup_options('floors'),
            'floor_blocks': {f['id']: str(f.get('block_id') or '') for f in floors},
        }


societies = SocietyResource().register(buildings_bp)
blocks = BlockResource().register(buildings_bp)
floors = FloorResource().register(buildings_bp)
units = UnitResource().register(buildings_bp)
