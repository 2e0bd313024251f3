from wtforms import StringField, PasswordField, DateTimeField, BooleanField
from wtforms.validators import DataRequired, Email, Length, Optional
from app.utils.api import ApiForm


class RegisterForm(ApiForm):
    email = StringField('Email', validators=[DataRequired(), Email(), Length(max=120)])
    password = PasswordField('Password', validators=[DataRequired(), Length(min=8)])
    first_name = StringField('First Name', validators=[Optional(), Length(max=30)])
    last_name = StringField('Last Name', validators=[Optional(), Length(max=30)])


class LoginForm(ApiForm):
    email = StringField('Email', validators=[DataRequired(), Email()])
    password = PasswordField('Password', validators=[DataRequired()])


class DisableUserForm(ApiForm):
    reason = StringField('Reason', validators=[DataRequired(), Length(max=256)])
    end_date = DateTimeField('End Date', format=['%Y-%m-%dT%H:%M:%S', '%Y-%m-%dT%H:%M', '%Y-%m-%d'],
                             validators=[Optional()])
    is_permanent = BooleanField('Permanent')
