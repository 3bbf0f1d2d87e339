"""
Day-ticket lifecycle: one-day passengers added by a conductor.
Tickets are only valid on the date they were issued; every read drops older ones from the store.
"""
import logging
import time
from datetime import date

from data_store import STUDENTS, TICKETS
from errors import BusFullError, ConflictError, NotFoundError, UnauthorizedScopeError, ValidationError
from seating import allocate_seat, normalize_string

logger = logging.getLogger(__name__)


def today_iso():
    """Current local date as YYYY-MM-DD"""
    return date.today().isoformat()


def purge_and_list(store, as_of=None):
    """Return the tickets valid on `as_of`, writing the purged list back if stale tickets were dropped"""
    as_of = as_of or today_iso()
    stored = store.get(TICKETS)
    todays = [t for t in stored if t.get('date') == as_of]
    if len(todays) != len(stored):
        store.put(TICKETS, todays)
        logger.info(f"Purged {len(stored) - len(todays)} stale tickets (keeping {as_of})")
    return todays


def tickets_for_bus(store, bus_no=None, as_of=None):
    tickets = purge_and_list(store, as_of)
    if bus_no is None:
        return tickets
    return [t for t in tickets if t.get('bus_no') == bus_no]


def _synthesize_id(bus_no, as_of, taken_ids):
    compact_date = as_of.replace('-', '')
    tail = int(time.time() * 1000) % 1000000
    while True:
        candidate = f"TEMP-{bus_no}-{compact_date}-{tail:06d}"
        if candidate not in taken_ids:
            return candidate
        tail = (tail + 1) % 1000000


def add_ticket(store, bus, name, supplied_id=None, as_of=None):
    """
    Issue a one-day ticket on `bus` and give the passenger the lowest free seat.

    `bus` is the conductor's bus as resolved by the caller; None means the
    conductor has no bus. When the ticket cannot be issued the only write is
    the purge of stale tickets; the new ticket is never stored.
    """
    passenger_name = normalize_string(name)
    if not passenger_name:
        raise ValidationError('Passenger name is required')
    if bus is None:
        raise UnauthorizedScopeError('Conductor not assigned')

    as_of = as_of or today_iso()
    students = store.get(STUDENTS)
    tickets = purge_and_list(store, as_of)

    taken_ids = {s.get('student_id') for s in students} | {t.get('student_id') for t in tickets}
    ticket_id = normalize_string(supplied_id)
    if ticket_id and ticket_id in taken_ids:
        raise ConflictError(f"Passenger {ticket_id} already exists")

    seat = allocate_seat(bus, students, tickets)
    if seat is None:
        raise BusFullError(bus['bus_no'])

    if not ticket_id:
        ticket_id = _synthesize_id(bus['bus_no'], as_of, taken_ids)

    ticket = {
        'id': ticket_id,
        'student_id': ticket_id,
        'name': passenger_name,
        'bus_no': bus['bus_no'],
        'seat': seat,
        'date': as_of,
        'present': False,
    }
    tickets.append(ticket)
    store.put(TICKETS, tickets)
    logger.info(f"Ticket {ticket_id} issued on bus {bus['bus_no']} seat {seat}")
    return ticket


def _find_ticket(tickets, student_id):
    for index, ticket in enumerate(tickets):
        if ticket.get('student_id') == student_id:
            return index
    return -1


def _check_scope(ticket, bus_no):
    if bus_no is not None and ticket.get('bus_no') != bus_no:
        raise UnauthorizedScopeError(f"Passenger {ticket.get('student_id')} is not on bus {bus_no}")


def remove_ticket(store, student_id, bus_no=None, as_of=None):
    """Remove today's ticket for `student_id`; `bus_no` restricts the removal to one bus"""
    student_id = normalize_string(student_id)
    tickets = purge_and_list(store, as_of)
    index = _find_ticket(tickets, student_id)
    if index < 0:
        raise NotFoundError('Not found')
    _check_scope(tickets[index], bus_no)

    removed = tickets.pop(index)
    store.put(TICKETS, tickets)
    logger.info(f"Ticket {student_id} removed from bus {removed.get('bus_no')}")
    return removed


def set_presence(store, student_id, present, bus_no=None, as_of=None):
    """Mark a ticket passenger present or absent. Stale tickets are never touched."""
    student_id = normalize_string(student_id)
    tickets = purge_and_list(store, as_of)
    index = _find_ticket(tickets, student_id)
    if index < 0:
        raise NotFoundError('Not found')
    _check_scope(tickets[index], bus_no)

    tickets[index]['present'] = bool(present)
    store.put(TICKETS, tickets)
    return tickets[index]
