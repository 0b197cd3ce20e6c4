"""
Equipment inspection checklist templates, one per equipment kind.
"""
from dataclasses import dataclass
from typing import Dict, Tuple

ITEM_STATUSES = ('OK', 'NOT_OK', 'NA')


@dataclass(frozen=True)
class Checkpoint:
    code: str
    description: str


@dataclass(frozen=True)
class ChecklistTemplate:
    kind: str
    title: str
    equipment_label: str
    checkpoints: Tuple[Checkpoint, ...]

    def blank_items(self):
        return [{'code': c.code, 'description': c.description, 'status': 'OK', 'remark': ''}
                for c in self.checkpoints]


def _template(kind, title, equipment_label, *items):
    return ChecklistTemplate(kind, title, equipment_label,
                             tuple(Checkpoint(code, description) for code, description in items))


TEMPLATES: Dict[str, ChecklistTemplate] = {t.kind: t for t in (
    _template(
        'excavator', 'Excavator Inspection Checklist', 'Equipment ID',
        ('HYDRAULICS', 'Hydraulic hoses and cylinders free of leaks'),
        ('SLEW_RING', 'Slew ring and swing brake in working order'),
        ('BUCKET', 'Bucket, teeth and quick coupler locked and undamaged'),
        ('TRACKS', 'Tracks, rollers and sprockets in good condition'),
        ('ALARMS', 'Travel and swing alarms audible'),
        ('HORN_LIGHTS', 'Horn, lights and beacon working'),
        ('MIRRORS', 'Mirrors and cabin glass clean and intact'),
        ('CONTROLS', 'Operator controls and safety lever functional'),
        ('SEAT_BELT', 'Seat belt provided and in use'),
        ('FIRE_EXT', 'Fire extinguisher available and charged'),
    ),
    _template(
        'jcb', 'JCB / Backhoe Loader Checklist', 'Equipment ID',
        ('BRAKES', 'Service and parking brakes effective'),
        ('STEERING', 'Steering free of play'),
        ('TYRES', 'Tyres inflated with no cuts or bulges'),
        ('HYDRAULICS', 'Hydraulic system free of leaks'),
        ('LOADER_ARM', 'Loader arm and backhoe boom pins secured'),
        ('REVERSE_ALARM', 'Reverse alarm working'),
        ('HORN_LIGHTS', 'Horn and lights working'),
        ('SEAT_BELT', 'Seat belt provided and in use'),
        ('OPERATOR_LICENCE', 'Operator holds a valid licence'),
        ('FIRE_EXT', 'Fire extinguisher available and charged'),
    ),
    _template(
        'truck', 'Truck / Tipper Inspection Checklist', 'Vehicle Number',
        ('DOCUMENTS', 'Registration, insurance and fitness certificate valid'),
        ('DRIVER_LICENCE', 'Driver holds a valid licence'),
        ('BRAKES', 'Brakes and hand brake effective'),
        ('TYRES', 'Tyres and spare wheel in good condition'),
        ('LIGHTS', 'Head, tail, brake and indicator lights working'),
        ('REVERSE_ALARM', 'Reverse horn working'),
        ('TIPPER', 'Tipper hydraulics and body lock in order'),
        ('LOAD_COVER', 'Load secured and covered'),
        ('MIRRORS', 'Side and rear mirrors fitted'),
        ('FIRST_AID', 'First aid box available'),
    ),
    _template(
        'ladder', 'Ladder Inspection Checklist', 'Ladder ID',
        ('RUNGS', 'Rungs intact, clean and firmly fixed'),
        ('STILES', 'Stiles straight with no cracks or splits'),
        ('FEET', 'Anti-slip feet present'),
        ('LOCKS', 'Spreaders and locking devices working'),
        ('LABEL', 'Identification and load rating label legible'),
        ('NO_REPAIRS', 'No makeshift repairs or painted defects'),
    ),
    _template(
        'scaffold', 'Scaffold Inspection Checklist', 'Scaffold Location',
        ('BASE', 'Base plates and sole boards on firm ground'),
        ('STANDARDS', 'Standards plumb and ledgers level'),
        ('BRACING', 'Bracing and ties in place'),
        ('PLATFORM', 'Working platform fully boarded'),
        ('GUARDRAILS', 'Guardrails, mid rails and toe boards fitted'),
        ('ACCESS', 'Safe access ladder provided'),
        ('TAG', 'Scaffold tag displayed and current'),
        ('LOAD', 'Platform not overloaded with material'),
    ),
    _template(
        'welding_machine', 'Welding Machine Inspection Checklist', 'Machine ID',
        ('EARTHING', 'Machine body earthed'),
        ('CABLES', 'Welding and power cables free of damage or joints'),
        ('HOLDER', 'Electrode holder insulated'),
        ('ELCB', 'ELCB / RCCB provided in supply'),
        ('SWITCH', 'On/off switch working'),
        ('SCREEN', 'Welding screen and PPE available'),
        ('FIRE_EXT', 'Fire extinguisher nearby'),
    ),
)}

KIND_CHOICES = [(kind, t.title) for kind, t in TEMPLATES.items()]


def merge_items(template, items):
    """Template checkpoints with the saved status/remark of ``items`` applied."""
    saved = {item.get('code'): item for item in items or [] if isinstance(item, dict)}
    merged = []
    for item in template.blank_items():
        previous = saved.get(item['code']) or {}
        item['status'] = previous.get('status') or item['status']
        item['remark'] = previous.get('remark') or ''
        merged.append(item)
    return merged
