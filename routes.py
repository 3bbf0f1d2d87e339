import csv
import logging
from functools import wraps

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

import consolidation
import importer
import roster
import tickets
from app import db
from data_store import BUSES, STUDENTS
from database_store import forward_records
from errors import NotFoundError, UnauthorizedScopeError, ValidationError
from forms import (
    AddStudentForm,
    AssignForm,
    AttendanceForm,
    ConductorForm,
    DriverForm,
    LoginForm,
    TicketForm,
    validated,
)
from models import Actor
from roles import ROLE_CONDUCTOR, ROLE_INCHARGE, ROLE_MTO
from row_mapping import canonical_bus_row, canonical_student_row, parse_csv
from seating import normalize_string, parse_bus_no

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__)


def roster_store():
    return current_app.extensions['roster_store']


def forward(collection, records):
    """Best-effort copy of committed changes to the database mirror"""
    forward_records(current_app._get_current_object(), db, collection, records)


def role_required(*roles):
    """Decorator to require one of `roles` for route access"""
    def decorator(f):
        @wraps(f)
        @login_required
        def decorated_function(*args, **kwargs):
            if current_app.config.get('LOGIN_DISABLED'):
                return f(*args, **kwargs)
            if getattr(current_user, 'role', None) not in roles:
                logger.info(f"Access denied for {current_user.get_id()} on {f.__name__}")
                raise UnauthorizedScopeError('Access denied for this role')
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def conductor_bus(store, requested_id=None):
    """
    The bus of the conductor making the request.

    A logged-in conductor may only act as themselves; a conductor with no bus
    is outside every bus scope.
    """
    actor_id = current_user.get_id() if current_user.is_authenticated else None
    conductor_id = normalize_string(requested_id) or actor_id
    if getattr(current_user, 'role', None) == ROLE_CONDUCTOR and conductor_id != actor_id:
        raise UnauthorizedScopeError('Conductors may only act on their own bus')
    try:
        return roster.bus_for_conductor(store.get(BUSES), conductor_id)
    except NotFoundError:
        raise UnauthorizedScopeError('Conductor not assigned')


def bus_no_arg():
    raw = request.args.get('bus_no')
    if raw is None or raw == '':
        return None
    bus_no = parse_bus_no(raw)
    if bus_no is None:
        raise ValidationError('bus_no must be a positive integer')
    return bus_no


def json_body():
    return request.get_json(silent=True) or {}


def uploaded_rows():
    """The multipart `file` upload, its size in bytes and its parsed rows"""
    upload = request.files.get('file')
    if upload is None:
        return None, 0, None
    content = upload.read()
    try:
        return upload, len(content), parse_csv(content)
    except (UnicodeDecodeError, csv.Error) as e:
        raise ValidationError(f"Failed to parse CSV: {e}")


def bulk_rows():
    data = json_body().get('data')
    if not isinstance(data, list) or not data:
        raise ValidationError('Expected { data: [...] }')
    return [row for row in data if isinstance(row, dict)]


def _import_students(rows):
    store = roster_store()
    with store.lock:
        ticket_occupants = None
        if current_app.config.get('IMPORT_SEED_INCLUDES_TICKETS'):
            ticket_occupants = tickets.purge_and_list(store)
        result = importer.import_students(store, [canonical_student_row(r) for r in rows], ticket_occupants)
    forward(STUDENTS, result['students'])
    return result


def _import_buses(rows):
    store = roster_store()
    with store.lock:
        result = importer.import_buses(store, [canonical_bus_row(r) for r in rows])
    forward(BUSES, result['buses'])
    return result


# Authentication Routes
@api.route('/login', methods=['POST'])
def login():
    """Log in with a university ID; the role follows from the ID"""
    form = validated(LoginForm())
    actor = Actor.from_id(form.university_id.data)
    if actor is None:
        raise ValidationError('Unknown ID format. Try S101 / F123 / C001 / mto-1 / inc-1')
    login_user(actor)
    return jsonify(id=actor.id, role=actor.role)


@api.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify(ok=True)


@api.route('/health')
def health():
    return jsonify(ok=True)


# ============================== CSV upload ==============================

@api.route('/upload/_debug', methods=['POST'])
@role_required(ROLE_MTO)
def upload_debug():
    """Check multipart handling and CSV parsing without touching the roster"""
    upload, size, rows = uploaded_rows()
    sample = (rows or [])[:10]
    return jsonify(
        hasFile=upload is not None,
        fileName=upload.filename if upload else None,
        fileSize=size if upload else None,
        contentTypeHeader=request.headers.get('Content-Type'),
        bodyKeys=list(request.form.keys()),
        sampleCount=len(sample),
        sample=sample,
    )


@api.route('/upload/bus', methods=['POST'])
@role_required(ROLE_MTO)
def upload_bus_csv():
    _upload, _size, rows = uploaded_rows()
    if rows is None:
        raise ValidationError('No bus CSV file received (field "file")')
    result = _import_buses(rows)
    return jsonify(message='Buses uploaded successfully!', count=result['count'], skipped=result['skipped'])


@api.route('/upload/student', methods=['POST'])
@role_required(ROLE_MTO)
def upload_student_csv():
    _upload, _size, rows = uploaded_rows()
    if rows is None:
        raise ValidationError('No student CSV file received (field "file")')
    result = _import_students(rows)
    return jsonify(message='Students uploaded!', added=result['added'], skipped=result['skipped'])


@api.route('/api/mto/upload-buses', methods=['POST'])
@role_required(ROLE_MTO)
def upload_buses_json():
    result = _import_buses(bulk_rows())
    return jsonify(message='Buses uploaded successfully!', count=result['count'], skipped=result['skipped'])


@api.route('/api/mto/upload-students', methods=['POST'])
@role_required(ROLE_MTO)
def upload_students_json():
    result = _import_students(bulk_rows())
    return jsonify(message='Students uploaded!', added=result['added'], skipped=result['skipped'])


# ============================== MTO ==============================

@api.route('/api/mto/driver', methods=['POST'])
@role_required(ROLE_MTO)
def update_driver():
    """Replace the driver (name/contact) of a bus"""
    form = validated(DriverForm(), 'Invalid data (bus_no, driver_name required)')
    # contact is left untouched unless the field was sent
    driver_contact = form.driver_contact.data if form.driver_contact.raw_data else None
    store = roster_store()
    with store.lock:
        bus = roster.update_driver(store, form.bus_no.data, form.driver_name.data, driver_contact)
    forward(BUSES, [bus])
    return jsonify(message='Driver updated', bus_no=bus['bus_no'])


@api.route('/api/mto/conductor', methods=['POST'])
@role_required(ROLE_MTO)
def update_conductor():
    form = validated(ConductorForm())
    store = roster_store()
    with store.lock:
        bus = roster.update_conductor(store, form.bus_no.data, form.conductor_id.data)
    forward(BUSES, [bus])
    return jsonify(message='Conductor updated', bus_no=bus['bus_no'])


@api.route('/api/mto/assign', methods=['POST'])
@role_required(ROLE_MTO)
def assign_student():
    form = validated(AssignForm())
    store = roster_store()
    with store.lock:
        student = roster.assign_student(store, form.student_id.data, form.bus_no.data)
    forward(STUDENTS, [student])
    return jsonify(message='Assigned', seat=student['seat'])


@api.route('/api/mto/adjust-offday', methods=['POST'])
@role_required(ROLE_MTO)
def adjust_offday():
    """Consolidate buses on the selected routes for an off day"""
    data = json_body()
    routes = data.get('routes')
    if not isinstance(routes, list):
        raise ValidationError('Provide routes: string[]')
    off = data.get('off')
    if not isinstance(off, dict):
        off = {}
    off_filter = consolidation.off_day_filter(
        off.get('courses') if isinstance(off.get('courses'), list) else None,
        off.get('years') if isinstance(off.get('years'), list) else None,
    )
    apply = bool(data.get('apply'))
    plan_date = normalize_string(data.get('date')) or None

    store = roster_store()
    with store.lock:
        result = consolidation.apply_consolidation(store, routes, off_filter, apply=apply, plan_date=plan_date)
        if apply:
            moved_ids = {m['student_id'] for p in result['plans'] for m in p['moved']}
            moved = [s for s in store.get(STUDENTS) if s.get('student_id') in moved_ids]
    if apply:
        forward(STUDENTS, moved)
    return jsonify(result)


# ============================== Roster reads ==============================

@api.route('/api/buses')
@login_required
def list_buses():
    return jsonify(roster_store().get(BUSES))


@api.route('/api/students')
@login_required
def list_students():
    bus_no = bus_no_arg()
    store = roster_store()
    with store.lock:
        passengers = roster.list_passengers(store, bus_no)
    return jsonify(passengers)


@api.route('/api/student/<student_id>')
@login_required
def get_student(student_id):
    store = roster_store()
    with store.lock:
        passenger = roster.find_passenger(store, student_id)
    return jsonify(passenger)


# ============================== Conductor ==============================

@api.route('/api/conductor/<conductor_id>')
@login_required
def conductor_assignment(conductor_id):
    bus = roster.bus_for_conductor(roster_store().get(BUSES), conductor_id)
    return jsonify(bus_no=bus['bus_no'])


@api.route('/api/conductor/attendance', methods=['POST'])
@role_required(ROLE_CONDUCTOR)
def mark_attendance():
    form = validated(AttendanceForm())
    store = roster_store()
    with store.lock:
        bus = conductor_bus(store, form.conductor_id.data)
        record, is_temp = roster.mark_attendance(store, form.student_id.data, form.present.data,
                                                 bus_no=bus['bus_no'])
    if is_temp:
        return jsonify(message='Attendance updated (ticket)', present=record['present'])
    forward(STUDENTS, [record])
    return jsonify(message='Attendance updated', present=record['present'])


@api.route('/api/conductor/ticket', methods=['POST'])
@role_required(ROLE_CONDUCTOR)
def add_ticket():
    form = validated(TicketForm(), 'Missing data')
    store = roster_store()
    with store.lock:
        bus = conductor_bus(store, form.conductor_id.data)
        ticket = tickets.add_ticket(store, bus, form.name.data, form.student_id.data)
    return jsonify(message='Ticket added', ticket=ticket)


@api.route('/api/conductor/ticket/<student_id>', methods=['DELETE'])
@role_required(ROLE_CONDUCTOR)
def remove_ticket(student_id):
    store = roster_store()
    with store.lock:
        bus = conductor_bus(store, request.args.get('conductor_id'))
        tickets.remove_ticket(store, student_id, bus_no=bus['bus_no'])
    return jsonify(message='Ticket removed')


@api.route('/api/conductor/tickets')
@login_required
def list_tickets():
    bus_no = bus_no_arg()
    store = roster_store()
    with store.lock:
        todays = tickets.tickets_for_bus(store, bus_no)
    return jsonify(todays)


@api.route('/api/conductor/add-student', methods=['POST'])
@role_required(ROLE_CONDUCTOR)
def add_student():
    form = validated(AddStudentForm(), 'Missing data')
    store = roster_store()
    with store.lock:
        bus = conductor_bus(store, form.conductor_id.data)
        student = roster.add_student(store, bus, form.student_id.data, form.name.data)
    forward(STUDENTS, [student])
    return jsonify(message='Student added', student=student)


# ============================== Incharge ==============================

@api.route('/api/incharge/summary')
@role_required(ROLE_INCHARGE, ROLE_MTO)
def incharge_summary():
    store = roster_store()
    with store.lock:
        summary = roster.bus_summary(store)
    return jsonify(summary)


@api.route('/api/incharge/alert', methods=['POST'])
@role_required(ROLE_INCHARGE)
def incharge_alert():
    """Alerts are only logged; delivery is handled outside this service"""
    logger.warning(f"INCHARGE ALERT from {current_user.get_id()}: {json_body()}")
    return jsonify(ok=True)
