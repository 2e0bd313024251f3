from wtforms import StringField, IntegerField, FloatField, BooleanField
from wtforms.validators import DataRequired, InputRequired, NumberRange, Length, Optional
from app.utils.api import ApiForm


class CarForm(ApiForm):
    brand = StringField('Brand', validators=[DataRequired(), Length(max=64)])
    model = StringField('Model', validators=[DataRequired(), Length(max=64)])
    year = IntegerField('Year', validators=[Optional(), NumberRange(min=1950, max=2100)])
    vehicle_type = StringField('Vehicle Type', validators=[Optional(), Length(max=32)])
    seat_capacity = IntegerField('Seat Capacity', validators=[Optional(), NumberRange(min=1, max=60)])
    fuel = StringField('Fuel', validators=[Optional(), Length(max=32)])
    transmission = StringField('Transmission', validators=[Optional(), Length(max=32)])
    price_per_day = FloatField('Price per Day', validators=[InputRequired(), NumberRange(min=0)])
    pickup_location = StringField('Pick-up Location', validators=[Optional(), Length(max=256)])
    terms_and_conditions = StringField('Terms and Conditions', validators=[Optional()])
    is_auto_approved = BooleanField('Auto-approve Bookings')
