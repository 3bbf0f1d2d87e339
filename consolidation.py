"""
Off-day bus consolidation.

On days when some courses or years are excused, each selected route keeps
only its largest bus. Students riding the other buses on that route are
re-seated onto the kept bus while seats last; those who do not fit are
reported as overflow for manual handling.
"""
import logging

from data_store import BUSES, STUDENTS
from errors import ValidationError
from seating import capacity_of, first_free_seat, normalize_route, normalize_string, taken_seats
from tickets import purge_and_list, today_iso

logger = logging.getLogger(__name__)


def _year_of(value):
    """Numeric study year, or None; '2', 2 and '2.0' all read as 2"""
    if value is None or isinstance(value, bool):
        return None
    try:
        year = float(normalize_string(value))
    except ValueError:
        return None
    if year != year:  # NaN
        return None
    return year


def off_day_filter(courses=None, years=None):
    """Normalise an off-day filter: trimmed course names and numeric years"""
    off_courses = {normalize_string(c) for c in (courses or [])}
    off_years = {_year_of(y) for y in (years or [])}
    off_years.discard(None)
    return {'courses': off_courses, 'years': off_years}


def is_off_day(student, off_filter):
    """A student is off when their course OR their year is excused"""
    if off_filter['courses'] and normalize_string(student.get('course')) in off_filter['courses']:
        return True
    if off_filter['years']:
        return _year_of(student.get('year')) in off_filter['years']
    return False


def _empty_plan(route_key):
    return {
        'route': route_key,
        'keep_bus_no': None,
        'suspend_bus_nos': [],
        'moved': [],
        'overflow': [],
    }


def plan_route(route_key, off_filter, buses, students, apply=False, tickets=()):
    route_buses = [b for b in buses if normalize_route(b.get('route')) == route_key]
    if not route_buses:
        return _empty_plan(route_key)

    # sorted() is stable, so equal capacities keep roster order
    ordered = sorted(route_buses, key=lambda b: -capacity_of(b))
    keep_bus = ordered[0]
    suspend_bus_nos = [b['bus_no'] for b in ordered[1:]]

    keep_bus_no = keep_bus['bus_no']
    capacity = capacity_of(keep_bus)
    claimed = taken_seats(keep_bus_no, students, tickets)

    moved = []
    overflow = []
    candidates = [s for s in students if s.get('bus_no') in suspend_bus_nos]
    for student in candidates:
        if is_off_day(student, off_filter):
            continue

        seat = first_free_seat(capacity, claimed)
        if seat is None:
            overflow.append({'student_id': student.get('student_id')})
            continue

        claimed.add(seat)
        moved.append({'student_id': student.get('student_id'), 'to_bus_no': keep_bus_no, 'seat': seat})
        if apply:
            student['bus_no'] = keep_bus_no
            student['seat'] = seat

    return {
        'route': route_key,
        'keep_bus_no': keep_bus_no,
        'suspend_bus_nos': suspend_bus_nos,
        'moved': moved,
        'overflow': overflow,
    }


def plan_consolidation(selected_routes, off_filter, buses, students, apply=False, tickets=()):
    """
    Build one consolidation plan per selected route.

    `off_filter` is the dict returned by `off_day_filter`. With `apply` the
    moved students are re-seated in place on the `students` dicts passed in;
    persisting them is up to the caller.
    """
    route_keys = [normalize_route(r) for r in selected_routes or []]
    # repeated or differently-cased routes are planned once
    route_keys = list(dict.fromkeys(r for r in route_keys if r))
    if not route_keys:
        raise ValidationError('Provide routes: string[]')

    return [plan_route(key, off_filter, buses, students, apply, tickets) for key in route_keys]


def apply_consolidation(store, selected_routes, off_filter, apply=False, plan_date=None):
    """
    Plan against the stored roster and, when applying, write the re-seated students back in one put.

    `plan_date` is only echoed back; seats held by today's tickets are always respected.
    """
    as_of = plan_date or today_iso()
    buses = store.get(BUSES)
    students = store.get(STUDENTS)
    tickets = purge_and_list(store)

    plans = plan_consolidation(selected_routes, off_filter, buses, students, apply, tickets)

    moved_count = sum(len(p['moved']) for p in plans)
    overflow_count = sum(len(p['overflow']) for p in plans)
    if apply:
        store.put(STUDENTS, students)
        logger.info(f"Off-day consolidation applied for {as_of}: {moved_count} moved, {overflow_count} overflow")
    else:
        logger.info(f"Off-day consolidation planned for {as_of}: {moved_count} moves, {overflow_count} overflow")
    return {'date': as_of, 'plans': plans}
