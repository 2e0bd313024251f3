from wtforms import IntegerField, StringField
from wtforms.validators import InputRequired, NumberRange, Length, Optional
from app.utils.api import ApiForm


class ReviewForm(ApiForm):
    rental_id = IntegerField('Rental', validators=[InputRequired()])
    rating = IntegerField('Rating', validators=[InputRequired(), NumberRange(min=1, max=5)])
    comment = StringField('Comment', validators=[Optional(), Length(max=500)])


class ReviewUpdateForm(ApiForm):
    rating = IntegerField('Rating', validators=[Optional(), NumberRange(min=1, max=5)])
    comment = StringField('Comment', validators=[Optional(), Length(max=500)])
