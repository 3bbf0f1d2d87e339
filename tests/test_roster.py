import pytest

import roster
from data_store import BUSES, STUDENTS, TICKETS
from errors import BusFullError, ConflictError, NotFoundError, UnauthorizedScopeError, ValidationError
from tests.conftest import TODAY, make_student, make_ticket


def test_bus_for_conductor_takes_first_assignment(fleet):
    fleet.append(dict(fleet[1], bus_no=3, conductor_id='C001'))
    assert roster.bus_for_conductor(fleet, ' C001 ')['bus_no'] == 1


def test_bus_for_unassigned_conductor(fleet):
    with pytest.raises(NotFoundError):
        roster.bus_for_conductor(fleet, 'C999')
    with pytest.raises(ValidationError):
        roster.bus_for_conductor(fleet, '')


def test_passengers_include_todays_tickets(memory_store):
    memory_store.put(TICKETS, [make_ticket('T1', 1, 2)])

    passengers = roster.list_passengers(memory_store, bus_no=1, as_of=TODAY)

    assert [(p['student_id'], p['is_temp']) for p in passengers] == [('S101', False), ('T1', True)]
    assert passengers[1]['fee_paid'] is False


def test_find_passenger_falls_back_to_tickets(memory_store):
    memory_store.put(TICKETS, [make_ticket('T1', 1, 2)])
    assert roster.find_passenger(memory_store, 'S102', as_of=TODAY)['bus_no'] == 2
    assert roster.find_passenger(memory_store, 'T1', as_of=TODAY)['seat'] == 2
    with pytest.raises(NotFoundError):
        roster.find_passenger(memory_store, 'S999', as_of=TODAY)


def test_mark_attendance_for_student(memory_store):
    record, is_temp = roster.mark_attendance(memory_store, 'S101', True, bus_no=1, as_of=TODAY)
    assert is_temp is False
    assert record['present'] is True
    assert memory_store.get(STUDENTS)[0]['present'] is True


def test_mark_attendance_for_ticket(memory_store):
    memory_store.put(TICKETS, [make_ticket('T1', 1, 2)])
    record, is_temp = roster.mark_attendance(memory_store, 'T1', True, bus_no=1, as_of=TODAY)
    assert is_temp is True
    assert memory_store.get(TICKETS)[0]['present'] is True


def test_mark_attendance_on_another_bus_is_out_of_scope(memory_store):
    with pytest.raises(UnauthorizedScopeError):
        roster.mark_attendance(memory_store, 'S102', True, bus_no=1, as_of=TODAY)
    assert memory_store.get(STUDENTS)[1]['present'] is False


def test_mark_attendance_unknown_passenger(memory_store):
    with pytest.raises(NotFoundError):
        roster.mark_attendance(memory_store, 'NOPE', True, as_of=TODAY)


def test_add_student_takes_seat_after_tickets(memory_store, fleet):
    memory_store.put(TICKETS, [make_ticket('T1', 1, 2)])

    student = roster.add_student(memory_store, fleet[0], 'S200', 'Nila', as_of=TODAY)

    assert (student['bus_no'], student['seat']) == (1, 3)
    assert student['fee_paid'] is False
    assert memory_store.get(STUDENTS)[-1]['student_id'] == 'S200'


def test_add_student_conflicts_and_full_bus(memory_store, fleet):
    with pytest.raises(ConflictError):
        roster.add_student(memory_store, fleet[0], 'S101', 'Again', as_of=TODAY)

    memory_store.put(TICKETS, [make_ticket('T1', 2, 2)])
    with pytest.raises(BusFullError):
        roster.add_student(memory_store, fleet[1], 'S201', 'Late', as_of=TODAY)
    assert len(memory_store.get(STUDENTS)) == 2


def test_assign_student_moves_to_lowest_free_seat(memory_store):
    student = roster.assign_student(memory_store, 'S102', 1, as_of=TODAY)
    assert (student['bus_no'], student['seat']) == (1, 2)


def test_assign_student_errors(memory_store):
    with pytest.raises(NotFoundError):
        roster.assign_student(memory_store, 'S102', 9, as_of=TODAY)
    with pytest.raises(NotFoundError):
        roster.assign_student(memory_store, 'S999', 1, as_of=TODAY)
    memory_store.put(STUDENTS, memory_store.get(STUDENTS) + [make_student('S103', 2, 2)])
    with pytest.raises(BusFullError):
        roster.assign_student(memory_store, 'S101', 2, as_of=TODAY)


def test_update_driver_keeps_contact_unless_given(memory_store):
    roster.update_driver(memory_store, 1, 'Ravi', '98765')
    bus = roster.update_driver(memory_store, 1, 'Kumar')
    assert bus['driver'] == 'Kumar'
    assert bus['driver_contact'] == '98765'
    assert memory_store.get(BUSES)[0]['driver'] == 'Kumar'


def test_update_conductor(memory_store):
    roster.update_conductor(memory_store, 2, 'C009')
    assert roster.bus_for_conductor(memory_store.get(BUSES), 'C009')['bus_no'] == 2
    with pytest.raises(NotFoundError):
        roster.update_conductor(memory_store, 42, 'C010')


def test_bus_summary_counts_tickets_and_presence(memory_store):
    memory_store.put(TICKETS, [make_ticket('T1', 1, 2, present=True)])
    roster.mark_attendance(memory_store, 'S101', True, as_of=TODAY)

    summary = roster.bus_summary(memory_store, as_of=TODAY)

    assert summary == [
        {'bus_no': 1, 'capacity': 3, 'occupied': 2, 'present_today': 2, 'route': 'North'},
        {'bus_no': 2, 'capacity': 2, 'occupied': 1, 'present_today': 0, 'route': 'South'},
    ]
