from datetime import datetime

from flask_login import UserMixin

from app import db
from roles import ROLE_UNKNOWN, role_for_id


class Actor(UserMixin):
    """Someone using the API, identified by university ID. Not persisted; the role comes from the ID."""

    def __init__(self, university_id, role):
        self.id = university_id
        self.role = role

    @classmethod
    def from_id(cls, university_id):
        university_id = str(university_id or '').strip()
        role = role_for_id(university_id)
        if role == ROLE_UNKNOWN:
            return None
        return cls(university_id, role)

    def __repr__(self):
        return f'<Actor {self.id} ({self.role})>'


class Bus(db.Model):
    __tablename__ = 'buses'
    bus_no = db.Column(db.Integer, primary_key=True, autoincrement=False)
    position = db.Column(db.Integer, default=0)  # roster order
    route = db.Column(db.String, nullable=False)
    capacity = db.Column(db.Integer, default=36)
    vehicle_no = db.Column(db.String)
    driver = db.Column(db.String)
    driver_contact = db.Column(db.String)
    helper = db.Column(db.String)
    helper_contact = db.Column(db.String)
    time = db.Column(db.String)
    conductor_id = db.Column(db.String)

    created_at = db.Column(db.DateTime, default=datetime.now)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)

    FIELDS = ('bus_no', 'vehicle_no', 'driver', 'driver_contact', 'helper', 'helper_contact',
              'route', 'time', 'capacity', 'conductor_id')

    def to_dict(self):
        return {field: getattr(self, field) for field in self.FIELDS}

    def __repr__(self):
        return f'<Bus {self.bus_no} {self.route}>'


class Student(db.Model):
    __tablename__ = 'students'
    student_id = db.Column(db.String, primary_key=True)
    position = db.Column(db.Integer, default=0)  # roster order
    name = db.Column(db.String, nullable=False)
    course = db.Column(db.String)
    year = db.Column(db.Integer)
    bus_no = db.Column(db.Integer)  # no FK: bus imports replace the fleet wholesale
    seat = db.Column(db.Integer)
    present = db.Column(db.Boolean, default=False)
    fee_paid = db.Column(db.Boolean, default=False)

    created_at = db.Column(db.DateTime, default=datetime.now)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)

    FIELDS = ('student_id', 'name', 'course', 'year', 'bus_no', 'seat', 'present', 'fee_paid')

    def to_dict(self):
        return {field: getattr(self, field) for field in self.FIELDS}

    def __repr__(self):
        return f'<Student {self.student_id}>'


class Ticket(db.Model):
    __tablename__ = 'temp_tickets'
    row_id = db.Column(db.Integer, primary_key=True)
    position = db.Column(db.Integer, default=0)
    student_id = db.Column(db.String, nullable=False)
    name = db.Column(db.String, nullable=False)
    bus_no = db.Column(db.Integer)
    seat = db.Column(db.Integer)
    date = db.Column(db.String(10), nullable=False)  # YYYY-MM-DD
    present = db.Column(db.Boolean, default=False)

    created_at = db.Column(db.DateTime, default=datetime.now)

    FIELDS = ('student_id', 'name', 'bus_no', 'seat', 'date', 'present')

    def to_dict(self):
        data = {field: getattr(self, field) for field in self.FIELDS}
        data['id'] = self.student_id
        return data

    def __repr__(self):
        return f'<Ticket {self.student_id} {self.date}>'
