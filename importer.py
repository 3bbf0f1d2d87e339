"""
Bulk import of buses and students.

Rows are expected in the canonical shape produced by `row_mapping`. Bad rows
are skipped rather than failing the batch; callers get back how many rows were
accepted and how many were skipped.
"""
import logging

from data_store import BUSES, STUDENTS
from seating import (
    DEFAULT_CAPACITY,
    capacity_of,
    find_bus_by_route,
    normalize_string,
    parse_bus_no,
    seat_number,
    to_null,
)

logger = logging.getLogger(__name__)

AFFIRMATIVE_VALUES = {'yes', 'true', '1'}


def is_affirmative(value):
    if isinstance(value, bool):
        return value
    return normalize_string(value).lower() in AFFIRMATIVE_VALUES


def _to_int_or_none(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(normalize_string(value))
    except ValueError:
        return None
    return number or None


def _parse_capacity(value):
    capacity = _to_int_or_none(value)
    if capacity is None or capacity <= 0:
        return DEFAULT_CAPACITY
    return capacity


def seat_counters(existing_students, ticket_occupants=None):
    """Highest seat already held on each bus; tickets only count when passed in"""
    counters = {}
    groups = [existing_students]
    if ticket_occupants is not None:
        groups.append(ticket_occupants)
    for occupants in groups:
        for occupant in occupants:
            bus_no = occupant.get('bus_no')
            seat = seat_number(occupant.get('seat'))
            if bus_no and seat:
                counters[bus_no] = max(counters.get(bus_no, 0), seat)
    return counters


def reconcile_students(rows, existing_students, buses, ticket_occupants=None):
    """
    Turn incoming student rows into new roster entries.

    Rows are taken in order. A row is skipped when the fee is not paid, a
    required field is blank, the id is already known (including ids accepted
    earlier in this batch), no bus serves its route or that bus is full.
    Accepted students get consecutive seats after the highest seat already
    held by existing students on their bus.
    """
    known_ids = {s.get('student_id') for s in existing_students}
    counters = seat_counters(existing_students, ticket_occupants)
    new_students = []

    for row_num, row in enumerate(rows, start=1):
        student_id = normalize_string(row.get('student_id'))
        name = normalize_string(row.get('name'))
        route = normalize_string(row.get('route'))

        if not is_affirmative(row.get('fee_paid')) or not student_id or not name or not route:
            logger.debug(f"Row {row_num}: skipped, fee unpaid or required field missing")
            continue
        if student_id in known_ids:
            logger.debug(f"Row {row_num}: skipped, duplicate student {student_id}")
            continue

        bus = find_bus_by_route(buses, route)
        if bus is None:
            logger.debug(f"Row {row_num}: skipped, no bus serves route {route!r}")
            continue

        current = counters.get(bus['bus_no'], 0)
        if current >= capacity_of(bus):
            logger.debug(f"Row {row_num}: skipped, bus {bus['bus_no']} is full")
            continue

        seat = current + 1
        counters[bus['bus_no']] = seat
        known_ids.add(student_id)
        new_students.append({
            'student_id': student_id,
            'name': name,
            'course': to_null(row.get('course')),
            'year': _to_int_or_none(row.get('year')),
            'bus_no': bus['bus_no'],
            'seat': seat,
            'present': False,
            'fee_paid': True,
        })

    return new_students


def reconcile_buses(rows):
    """Map rows to bus records, keeping only rows with a positive bus number and a route"""
    buses = []
    seen = set()
    for row in rows:
        bus_no = parse_bus_no(row.get('bus_no'))
        route = normalize_string(row.get('route'))
        if bus_no is None or not route:
            continue
        if bus_no in seen:
            logger.warning(f"Duplicate bus {bus_no} in import, keeping the first row")
            continue
        seen.add(bus_no)
        buses.append({
            'bus_no': bus_no,
            'vehicle_no': to_null(row.get('vehicle_no')),
            'driver': to_null(row.get('driver')),
            'driver_contact': to_null(row.get('driver_contact')),
            'helper': to_null(row.get('helper')),
            'helper_contact': to_null(row.get('helper_contact')),
            'route': route,
            'time': to_null(row.get('time')),
            'capacity': _parse_capacity(row.get('capacity')),
            'conductor_id': to_null(row.get('conductor_id')),
        })
    return buses


def import_buses(store, rows):
    """Replace the whole fleet with the buses in `rows`"""
    buses = reconcile_buses(rows)
    store.put(BUSES, buses)
    logger.info(f"Bus import: {len(buses)} buses loaded, {len(rows) - len(buses)} rows skipped")
    return {'count': len(buses), 'skipped': len(rows) - len(buses), 'buses': buses}


def import_students(store, rows, ticket_occupants=None):
    """Append the accepted students to the roster"""
    existing = store.get(STUDENTS)
    buses = store.get(BUSES)
    new_students = reconcile_students(rows, existing, buses, ticket_occupants)
    store.put(STUDENTS, existing + new_students)
    logger.info(f"Student import: {len(new_students)} added, {len(rows) - len(new_students)} rows skipped")
    return {'added': len(new_students), 'skipped': len(rows) - len(new_students), 'students': new_students}
