from flask_wtf import FlaskForm
from wtforms import BooleanField, IntegerField, PasswordField, StringField
from wtforms.validators import InputRequired, Length, NumberRange, Optional

from errors import ValidationError


# Login Form
class LoginForm(FlaskForm):
    university_id = StringField('University ID', validators=[InputRequired(), Length(min=2, max=40)])
    password = PasswordField('Password', validators=[Optional()])


class AttendanceForm(FlaskForm):
    student_id = StringField('Student ID', validators=[InputRequired()])
    present = BooleanField('Present')
    conductor_id = StringField('Conductor ID', validators=[Optional()])


class TicketForm(FlaskForm):
    name = StringField('Passenger name', validators=[InputRequired()])
    student_id = StringField('Passenger ID', validators=[Optional()])
    conductor_id = StringField('Conductor ID', validators=[Optional()])


class AddStudentForm(FlaskForm):
    student_id = StringField('Student ID', validators=[InputRequired()])
    name = StringField('Name', validators=[InputRequired()])
    conductor_id = StringField('Conductor ID', validators=[Optional()])


class AssignForm(FlaskForm):
    student_id = StringField('Student ID', validators=[InputRequired()])
    bus_no = IntegerField('Bus No', validators=[InputRequired(), NumberRange(min=1)])


class DriverForm(FlaskForm):
    bus_no = IntegerField('Bus No', validators=[InputRequired(), NumberRange(min=1)])
    driver_name = StringField('Driver name', validators=[InputRequired()])
    driver_contact = StringField('Driver contact', validators=[Optional()])


class ConductorForm(FlaskForm):
    bus_no = IntegerField('Bus No', validators=[InputRequired(), NumberRange(min=1)])
    conductor_id = StringField('Conductor ID', validators=[InputRequired()])


def validated(form, message='Invalid data'):
    """Validate a submitted form, raising a VALIDATION error with the first field error"""
    if form.validate_on_submit():
        return form
    for field_name, errors in form.errors.items():
        if errors:
            label = getattr(form, field_name).label.text if hasattr(form, field_name) else field_name
            raise ValidationError(f"{message}: {label} - {errors[0]}")
    raise ValidationError(message)
