"""
Seat allocation for the bus roster.
Pure helpers: nothing here reads or writes the roster store.
"""

DEFAULT_CAPACITY = 36


def normalize_string(value):
    """Trim a value to a string, treating None as empty"""
    if value is None:
        return ''
    return str(value).strip()


def normalize_route(value):
    """Route key used for matching: trimmed and lower-cased"""
    return normalize_string(value).lower()


def to_null(value):
    """Blank, '---' and 'null' cells become None"""
    text = normalize_string(value)
    if not text or text == '---' or text.lower() == 'null':
        return None
    return text


def capacity_of(bus):
    """Bus capacity, defaulting to 36 when unset. A capacity of 0 stays 0."""
    capacity = bus.get('capacity')
    if capacity is None:
        return DEFAULT_CAPACITY
    try:
        return int(capacity)
    except (TypeError, ValueError):
        return DEFAULT_CAPACITY


def seat_number(value):
    """Stored seat as an int, or None when the passenger has no seat"""
    if value is None or value == '' or isinstance(value, bool):
        return None
    try:
        seat = int(value)
    except (TypeError, ValueError):
        return None
    return seat or None


def taken_seats(bus_no, *occupant_groups):
    """Collect the seats held on `bus_no` across every group of occupants"""
    taken = set()
    for occupants in occupant_groups:
        for occupant in occupants:
            if occupant.get('bus_no') != bus_no:
                continue
            seat = seat_number(occupant.get('seat'))
            if seat is not None:
                taken.add(seat)
    return taken


def first_free_seat(capacity, taken):
    """Lowest seat in [1, capacity] that is not taken, or None when full"""
    for seat in range(1, capacity + 1):
        if seat not in taken:
            return seat
    return None


def allocate_seat(bus, permanent_occupants, ticket_occupants):
    """
    Next seat for a passenger boarding `bus`.

    Occupants on other buses are ignored, as are occupants without a seat.
    Returns None when the bus is full.
    """
    taken = taken_seats(bus['bus_no'], permanent_occupants, ticket_occupants)
    return first_free_seat(capacity_of(bus), taken)


def find_bus(buses, bus_no):
    for bus in buses:
        if bus.get('bus_no') == bus_no:
            return bus
    return None


def find_bus_by_route(buses, route):
    """First bus (in roster order) whose route matches, ignoring case"""
    key = normalize_route(route)
    for bus in buses:
        if normalize_route(bus.get('route')) == key:
            return bus
    return None


def parse_bus_no(value):
    """Positive integer bus number, or None when the value is not one"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    text = normalize_string(value)
    if not (text.isascii() and text.isdigit()):
        return None
    number = int(text)
    return number if number > 0 else None
