import logging
from flask import jsonify
from flask_login import login_required
from app import db
from app.auth import bp
from app.auth.forms import RegisterForm, LoginForm, DisableUserForm
from app.models.user import User
from app.utils.api import error_response, validation_error, admin_required

logger = logging.getLogger(__name__)


@bp.route('/register', methods=['POST'])
def register():
    form = RegisterForm()
    if not form.validate():
        return validation_error(form)

    email = form.email.data.strip().lower()
    if User.query.filter_by(email=email).first():
        return error_response('Email address is already registered', 400)

    user = User(
        email=email,
        first_name=form.first_name.data,
        last_name=form.last_name.data
    )
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()
    logger.info('Registered user %s', user.id)

    return jsonify({
        'success': True,
        'token': user.get_api_token(),
        'user': user.to_dict()
    }), 201


@bp.route('/login', methods=['POST'])
def login():
    form = LoginForm()
    if not form.validate():
        return validation_error(form)

    user = User.query.filter_by(email=form.email.data.strip().lower()).first()
    if user is None or not user.check_password(form.password.data):
        return error_response('Invalid email or password', 401)

    record = user.current_disable_record()
    if record is not None:
        return error_response('Your account has been disabled', 403, disable=record.to_dict())

    return jsonify({
        'success': True,
        'token': user.get_api_token(),
        'user': user.to_dict()
    })


@bp.route('/admin/users/<int:user_id>/disable', methods=['PUT'])
@login_required
@admin_required
def disable_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        return error_response('User not found', 404)

    form = DisableUserForm()
    if not form.validate():
        return validation_error(form)
    if not form.is_permanent.data and form.end_date.data is None:
        return error_response('End date is required for a temporary disable', 400)

    record = user.add_disable_record(form.reason.data, form.end_date.data, form.is_permanent.data)
    db.session.commit()
    logger.info('User %s disabled (permanent=%s)', user.id, record.is_permanent)

    return jsonify({'success': True, 'user': user.to_dict(), 'record': record.to_dict()})


@bp.route('/admin/users/<int:user_id>/enable', methods=['PUT'])
@login_required
@admin_required
def enable_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        return error_response('User not found', 404)

    for record in user.disable_records:
        record.is_active = False
    db.session.commit()

    return jsonify({'success': True, 'user': user.to_dict()})
