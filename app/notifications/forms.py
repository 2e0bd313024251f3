from wtforms import IntegerField, StringField
from wtforms.validators import InputRequired, DataRequired, Length
from app.utils.api import ApiForm


class MessageNotificationForm(ApiForm):
    message_id = IntegerField('Message', validators=[InputRequired()])


class RegisterTokenForm(ApiForm):
    token = StringField('Push Token', validators=[DataRequired(), Length(max=255)])

