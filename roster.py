"""
Day-to-day roster operations used by conductors, the MTO and the transport incharge.
"""
import logging

from data_store import BUSES, STUDENTS
from errors import BusFullError, ConflictError, NotFoundError, UnauthorizedScopeError, ValidationError
from seating import allocate_seat, capacity_of, find_bus, normalize_string
from tickets import purge_and_list, set_presence

logger = logging.getLogger(__name__)


def bus_for_conductor(buses, conductor_id):
    """The bus a conductor is assigned to (first in roster order)"""
    conductor_id = normalize_string(conductor_id)
    if not conductor_id:
        raise ValidationError('Conductor ID is required')
    for bus in buses:
        if normalize_string(bus.get('conductor_id')) == conductor_id:
            return bus
    raise NotFoundError('Not assigned')


def list_passengers(store, bus_no=None, as_of=None):
    """Permanent students followed by today's ticket passengers, each flagged with `is_temp`"""
    students = store.get(STUDENTS)
    tickets = purge_and_list(store, as_of)

    passengers = [dict(s, is_temp=False) for s in students]
    for ticket in tickets:
        passengers.append({
            'student_id': ticket.get('student_id'),
            'name': ticket.get('name'),
            'bus_no': ticket.get('bus_no'),
            'seat': ticket.get('seat'),
            'present': bool(ticket.get('present')),
            'fee_paid': False,
            'is_temp': True,
        })
    if bus_no is None:
        return passengers
    return [p for p in passengers if p.get('bus_no') == bus_no]


def find_passenger(store, student_id, as_of=None):
    student_id = normalize_string(student_id)
    for student in store.get(STUDENTS):
        if student.get('student_id') == student_id:
            return student
    for ticket in purge_and_list(store, as_of):
        if ticket.get('student_id') == student_id:
            return ticket
    raise NotFoundError('Not found')


def mark_attendance(store, student_id, present, bus_no=None, as_of=None):
    """
    Set the `present` flag for a permanent student, falling back to today's tickets.

    Returns (record, is_temp). When `bus_no` is given the passenger must ride that bus.
    """
    student_id = normalize_string(student_id)
    students = store.get(STUDENTS)
    for student in students:
        if student.get('student_id') != student_id:
            continue
        if bus_no is not None and student.get('bus_no') != bus_no:
            raise UnauthorizedScopeError(f"Passenger {student_id} is not on bus {bus_no}")
        student['present'] = bool(present)
        store.put(STUDENTS, students)
        return student, False

    ticket = set_presence(store, student_id, present, bus_no=bus_no, as_of=as_of)
    return ticket, True


def add_student(store, bus, student_id, name, as_of=None):
    """Add a permanent student on the spot; the fee is recorded as unpaid"""
    student_id = normalize_string(student_id)
    name = normalize_string(name)
    if not student_id or not name:
        raise ValidationError('Missing data')
    if bus is None:
        raise UnauthorizedScopeError('Conductor not assigned')

    students = store.get(STUDENTS)
    if any(s.get('student_id') == student_id for s in students):
        raise ConflictError('Already exists')

    tickets = purge_and_list(store, as_of)
    seat = allocate_seat(bus, students, tickets)
    if seat is None:
        raise BusFullError(bus['bus_no'])

    student = {
        'student_id': student_id,
        'name': name,
        'course': None,
        'year': None,
        'bus_no': bus['bus_no'],
        'seat': seat,
        'present': False,
        'fee_paid': False,
    }
    students.append(student)
    store.put(STUDENTS, students)
    logger.info(f"Student {student_id} added to bus {bus['bus_no']} seat {seat}")
    return student


def assign_student(store, student_id, bus_no, as_of=None):
    """Move a student to `bus_no`, taking the lowest free seat there"""
    student_id = normalize_string(student_id)
    if not student_id or bus_no is None:
        raise ValidationError('Invalid data')

    bus = find_bus(store.get(BUSES), bus_no)
    if bus is None:
        raise NotFoundError('Bus not found')

    students = store.get(STUDENTS)
    student = next((s for s in students if s.get('student_id') == student_id), None)
    if student is None:
        raise NotFoundError('Student not found')

    tickets = purge_and_list(store, as_of)
    seat = allocate_seat(bus, students, tickets)
    if seat is None:
        raise BusFullError(bus_no)

    student['bus_no'] = bus_no
    student['seat'] = seat
    store.put(STUDENTS, students)
    logger.info(f"Student {student_id} assigned to bus {bus_no} seat {seat}")
    return student


def _update_bus(store, bus_no, updates):
    buses = store.get(BUSES)
    bus = find_bus(buses, bus_no)
    if bus is None:
        raise NotFoundError('Bus not found')
    bus.update(updates)
    store.put(BUSES, buses)
    return bus


def update_driver(store, bus_no, driver_name, driver_contact=None):
    driver_name = normalize_string(driver_name)
    if bus_no is None or not driver_name:
        raise ValidationError('Invalid data (bus_no, driver_name required)')
    updates = {'driver': driver_name}
    if driver_contact is not None:
        updates['driver_contact'] = normalize_string(driver_contact)
    bus = _update_bus(store, bus_no, updates)
    logger.info(f"Driver for bus {bus_no} set to {driver_name}")
    return bus


def update_conductor(store, bus_no, conductor_id):
    conductor_id = normalize_string(conductor_id)
    if bus_no is None or not conductor_id:
        raise ValidationError('Invalid data')
    bus = _update_bus(store, bus_no, {'conductor_id': conductor_id})
    logger.info(f"Conductor for bus {bus_no} set to {conductor_id}")
    return bus


def bus_summary(store, as_of=None):
    """Occupancy and today's attendance per bus"""
    buses = store.get(BUSES)
    students = store.get(STUDENTS)
    tickets = purge_and_list(store, as_of)

    summary = []
    for bus in buses:
        bus_no = bus.get('bus_no')
        riders = [s for s in students if s.get('bus_no') == bus_no]
        day_riders = [t for t in tickets if t.get('bus_no') == bus_no]
        present = sum(1 for p in riders + day_riders if p.get('present'))
        summary.append({
            'bus_no': bus_no,
            'capacity': capacity_of(bus),
            'occupied': len(riders) + len(day_riders),
            'present_today': present,
            'route': bus.get('route'),
        })
    return summary
