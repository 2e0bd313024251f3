from flask import Blueprint

bp = Blueprint('rentals', __name__)

from app.rentals import routes  # noqa: E402,F401
