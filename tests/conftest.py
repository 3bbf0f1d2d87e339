# tests/conftest.py
"""
Shared fixtures for the roster tests.

- `fleet` / `students`: a small roster with two routes
- `memory_store`: MemoryRosterStore seeded with that roster
- `app` / `client`: a Flask app on TestingConfig with a file store in tmp_path
- `headers(id)`: request headers identifying the caller by university ID
"""
import pytest

from app import create_app, db
from config import TestingConfig
from data_store import BUSES, STUDENTS, MemoryRosterStore

TODAY = '2025-12-01'
YESTERDAY = '2025-11-30'


def make_bus(bus_no, route, capacity=36, conductor_id=None):
    return {
        'bus_no': bus_no,
        'vehicle_no': None,
        'driver': None,
        'driver_contact': None,
        'helper': None,
        'helper_contact': None,
        'route': route,
        'time': None,
        'capacity': capacity,
        'conductor_id': conductor_id,
    }


def make_student(student_id, bus_no=None, seat=None, course=None, year=None, present=False):
    return {
        'student_id': student_id,
        'name': f'Student {student_id}',
        'course': course,
        'year': year,
        'bus_no': bus_no,
        'seat': seat,
        'present': present,
        'fee_paid': True,
    }


def make_ticket(student_id, bus_no, seat, date=TODAY, present=False):
    return {
        'id': student_id,
        'student_id': student_id,
        'name': f'Passenger {student_id}',
        'bus_no': bus_no,
        'seat': seat,
        'date': date,
        'present': present,
    }


def headers(university_id):
    return {'X-University-Id': university_id}


@pytest.fixture
def fleet():
    return [
        make_bus(1, 'North', capacity=3, conductor_id='C001'),
        make_bus(2, 'South', capacity=2, conductor_id='C002'),
    ]


@pytest.fixture
def students():
    return [
        make_student('S101', bus_no=1, seat=1, course='CSE', year=2),
        make_student('S102', bus_no=2, seat=1, course='ECE', year=3),
    ]


@pytest.fixture
def memory_store(fleet, students):
    return MemoryRosterStore(buses=fleet, students=students)


@pytest.fixture
def app(tmp_path):
    app = create_app(TestingConfig, {'DATA_DIR': str(tmp_path / 'data')})
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app, fleet, students):
    """The app's roster store, seeded with the default roster"""
    roster_store = app.extensions['roster_store']
    roster_store.put(BUSES, fleet)
    roster_store.put(STUDENTS, students)
    return roster_store
