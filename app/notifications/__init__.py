from flask import Blueprint

bp = Blueprint('notifications', __name__)
push_bp = Blueprint('push', __name__)

from app.notifications import routes, push_routes  # noqa: E402,F401
