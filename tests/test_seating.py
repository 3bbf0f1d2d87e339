import pytest

from seating import (
    allocate_seat,
    capacity_of,
    find_bus_by_route,
    first_free_seat,
    normalize_route,
    parse_bus_no,
    to_null,
)
from tests.conftest import make_bus, make_student, make_ticket


def test_lowest_free_seat_across_students_and_tickets():
    bus = make_bus(1, 'North', capacity=5)
    permanent = [make_student('S1', 1, 1), make_student('S2', 1, 3)]
    day = [make_ticket('T1', 1, 2)]
    assert allocate_seat(bus, permanent, day) == 4


def test_occupants_of_other_buses_and_seatless_occupants_are_ignored():
    bus = make_bus(1, 'North', capacity=2)
    permanent = [make_student('S1', 2, 1), make_student('S2', 1, None)]
    assert allocate_seat(bus, permanent, []) == 1


def test_full_bus_reports_none():
    bus = make_bus(1, 'North', capacity=2)
    permanent = [make_student('S1', 1, 1)]
    day = [make_ticket('T1', 1, 2)]
    assert allocate_seat(bus, permanent, day) is None


def test_zero_capacity_is_always_full():
    assert allocate_seat(make_bus(1, 'North', capacity=0), [], []) is None


def test_out_of_range_seats_are_taken_but_never_returned():
    bus = make_bus(1, 'North', capacity=2)
    permanent = [make_student('S1', 1, 5)]
    assert allocate_seat(bus, permanent, []) == 1

    permanent += [make_student('S2', 1, 1), make_student('S3', 1, 2)]
    assert allocate_seat(bus, permanent, []) is None


def test_allocation_is_deterministic():
    bus = make_bus(1, 'North', capacity=4)
    permanent = [make_student('S1', 1, 2)]
    results = {allocate_seat(bus, permanent, []) for _ in range(5)}
    assert results == {1}


@pytest.mark.parametrize('capacity', [1, 2, 5, 36])
def test_returned_seat_is_free_and_in_range(capacity):
    # every occupancy short of capacity: take all even seats
    taken = {s for s in range(1, capacity + 1) if s % 2 == 0}
    seat = first_free_seat(capacity, taken)
    assert seat is not None
    assert 1 <= seat <= capacity
    assert seat not in taken
    assert first_free_seat(capacity, set(range(1, capacity + 1))) is None


def test_capacity_defaults_to_36():
    assert capacity_of({'bus_no': 1}) == 36
    assert capacity_of({'bus_no': 1, 'capacity': None}) == 36
    assert capacity_of({'bus_no': 1, 'capacity': '40'}) == 40


def test_route_matching_ignores_case_and_takes_first_bus():
    buses = [make_bus(7, ' North '), make_bus(3, 'north')]
    assert find_bus_by_route(buses, 'NORTH')['bus_no'] == 7
    assert find_bus_by_route(buses, 'south') is None
    assert normalize_route('  Main Gate ') == 'main gate'


def test_to_null_blanks():
    assert to_null('') is None
    assert to_null('---') is None
    assert to_null('NULL') is None
    assert to_null(' Ravi ') == 'Ravi'


def test_parse_bus_no_accepts_only_positive_integers():
    assert parse_bus_no('12') == 12
    assert parse_bus_no(4) == 4
    for bad in ('', 'abc', '12a', '0', '-3', None, True, 0):
        assert parse_bus_no(bad) is None
