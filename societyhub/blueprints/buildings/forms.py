"""
Society, block, floor and unit forms
"""
from societyhub.forms import Form, Field

BUILDING_TYPES = ('Residential', 'Commercial', 'Mixed', 'Industrial')
BLOCK_STATUSES = ('Active', 'Inactive', 'Under Construction')
UNIT_TYPES = ('1 BHK', '2 BHK', '3 BHK', '4 BHK', 'Penthouse', 'Shop', 'Office')
UNIT_STATUSES = ('Active', 'Inactive', 'Sold', 'Rented')


class SocietyForm(Form):
    fields = (
        Field('name', 'Society Name', required=True),
        Field('address', 'Address'),
        Field('city', 'City'),
        Field('state', 'State'),
        Field('pincode', 'Pincode', pattern=r'\d{6}', pattern_message='Pincode must be 6 digits'),
        Field('building_type', 'Building Type', choices=BUILDING_TYPES),
        Field('total_blocks', 'Total Blocks', kind='int', min_value=0, default=0),
        Field('total_units', 'Total Units', kind='int', min_value=0, default=0),
        Field('is_active', 'Active', kind='bool', default=True),
    )


class BlockForm(Form):
    fields = (
        Field('society_id', 'Society', required=True, lookup='societies'),
        Field('name', 'Block Name', required=True),
        Field('status', 'Status', required=True, choices=BLOCK_STATUSES, default='Active'),
        Field('description', 'Description', widget='textarea'),
    )


class FloorForm(Form):
    fields = (
        Field('block_id', 'Block', required=True, lookup='blocks'),
        Field('floor_number', 'Floor Number', kind='int', required=True, min_value=-5, max_value=200),
        Field('name', 'Floor Name', required=True),
        Field('total_units', 'Total Units', kind='int', min_value=0, default=0),
        Field('status', 'Status', required=True, choices=BLOCK_STATUSES, default='Active'),
        Field('description', 'Description', widget='textarea'),
    )


class UnitForm(Form):
    fields = (
        Field('block_id', 'Block', required=True, lookup='blocks'),
        Field('floor_id', 'Floor', required=True, lookup='floors'),
        Field('unit_number', 'Unit Number', required=True),
        Field('unit_type', 'Unit Type', required=True, choices=UNIT_TYPES),
        Field('area', 'Area (sq ft)', kind='number', min_value=0),
        Field('status', 'Status', required=True, choices=UNIT_STATUSES, default='Active'),
    )

    def check(self, data):
        # floor -> block mapping supplied with the lookups
        floor_blocks = self.lookups.get('floor_blocks') or {}
        floor, block = data.get('floor_id'), data.get('block_id')
        owner = floor_blocks.get(str(floor)) if floor else None
        if owner and block and owner != str(block):
            self.add_error('floor_id', 'Selected floor does not belong to the selected block')
