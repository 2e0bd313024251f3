from wtforms import IntegerField, StringField
from wtforms.validators import InputRequired, Optional, ValidationError
from app.utils.api import ApiForm


class SendMessageForm(ApiForm):
    receiver_id = IntegerField('Receiver', validators=[InputRequired()])
    car_id = IntegerField('Car', validators=[InputRequired()])
    content = StringField('Content', validators=[Optional()])


class EditMessageForm(ApiForm):
    content = StringField('Content')

    def validate_content(self, field):
        # The key must be present; an empty string clears the text
        if not field.raw_data:
            raise ValidationError('Content field is required')
