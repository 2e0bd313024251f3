from wtforms import IntegerField, DateTimeField, SelectField
from wtforms.validators import InputRequired, DataRequired, ValidationError
from app.models.rental import RENTAL_STATUSES, PAYMENT_METHODS, PAYMENT_STATUSES
from app.utils.api import ApiForm

DATE_FORMATS = ['%Y-%m-%dT%H:%M:%S', '%Y-%m-%dT%H:%M', '%Y-%m-%d %H:%M:%S', '%Y-%m-%d']


class RentalForm(ApiForm):
    car_id = IntegerField('Car', validators=[InputRequired()])
    pick_up_date = DateTimeField('Pick-up Date', format=DATE_FORMATS, validators=[DataRequired()])
    return_date = DateTimeField('Return Date', format=DATE_FORMATS, validators=[DataRequired()])
    status = SelectField('Status', choices=list(RENTAL_STATUSES), validators=[InputRequired()])
    payment_method = SelectField('Payment Method', choices=list(PAYMENT_METHODS), default='GCash')
    payment_status = SelectField('Payment Status', choices=list(PAYMENT_STATUSES), default='Pending')

    def validate_return_date(self, field):
        if self.pick_up_date.data and field.data and field.data < self.pick_up_date.data:
            raise ValidationError('Return date must be after the pick-up date.')


class RentalStatusForm(ApiForm):
    status = SelectField('Status', choices=list(RENTAL_STATUSES), validators=[InputRequired()])
