"""
CSV parsing and header aliasing for roster uploads.
Spreadsheets arrive with all sorts of column names; these helpers map them onto the canonical row shape.
"""
import csv
import io

# Canonical field -> accepted header spellings, in lookup order
BUS_FIELD_ALIASES = {
    'bus_no': ['bus_no', 'Bus No', 'busNo', 'Bus_No'],
    'vehicle_no': ['vehicle_no', 'Vehicle No', 'Vehicle_No'],
    'driver': ['driver', 'Driver'],
    'driver_contact': ['driver_contact', 'Driver Contact'],
    'helper': ['helper', 'Helper'],
    'helper_contact': ['helper_contact', 'Helper Contact'],
    'route': ['route', 'Route'],
    'time': ['time', 'Time'],
    'capacity': ['capacity', 'Capacity'],
    'conductor_id': ['conductor_id', 'Conductor ID', 'Conductor_ID'],
}

STUDENT_FIELD_ALIASES = {
    'student_id': ['student_id', 'Student ID', 'Student_ID'],
    'name': ['name', 'Name'],
    'course': ['course', 'Course'],
    'year': ['year', 'Year'],
    'route': ['route', 'Route'],
    'fee_paid': ['fee_paid', 'Fee Paid', 'Fee_Paid'],
}


def parse_csv(content):
    """Parse CSV text (or UTF-8 bytes) into dict rows keyed by the header row"""
    if isinstance(content, bytes):
        content = content.decode('utf-8-sig')
    elif content.startswith('\ufeff'):
        content = content[1:]

    reader = csv.DictReader(io.StringIO(content))
    if reader.fieldnames:
        reader.fieldnames = [name.strip() for name in reader.fieldnames]

    rows = []
    for row in reader:
        cleaned = {}
        for key, value in row.items():
            # Extra cells beyond the header land under a None key
            if key is None:
                continue
            cleaned[key] = value.strip() if isinstance(value, str) else value
        if not any(v not in (None, '') for v in cleaned.values()):
            continue
        rows.append(cleaned)
    return rows


def canonical_row(row, aliases):
    """Pick each canonical field from the first alias present in the row"""
    canonical = {}
    for field, names in aliases.items():
        value = None
        for name in names:
            if row.get(name) is not None:
                value = row[name]
                break
        canonical[field] = value
    return canonical


def canonical_bus_row(row):
    return canonical_row(row, BUS_FIELD_ALIASES)


def canonical_student_row(row):
    return canonical_row(row, STUDENT_FIELD_ALIASES)
