import logging
from flask import jsonify
from flask_login import current_user, login_required
from app import db, push
from app.rentals import bp
from app.rentals.forms import RentalForm, RentalStatusForm
from app.models.car import Car
from app.models.rental import Rental
from app.models.user import User
from app.utils.api import error_response, validation_error
from app.utils.background import spawn
from app.utils.email import send_booking_email

logger = logging.getLogger(__name__)


@bp.route('/rentals', methods=['POST'])
@login_required
def create_rental():
    form = RentalForm()
    if not form.validate():
        return validation_error(form)

    car = db.session.get(Car, form.car_id.data)
    if car is None:
        return error_response('Car not found', 400)

    if Rental.car_is_on_rental(car.id):
        return error_response('Car is currently on rental.', 400)

    if not car.is_active:
        return error_response('Car is not active. Cannot rent now', 400)

    # Owners who opt in skip the manual approval step
    status = 'Confirmed' if car.is_auto_approved else form.status.data

    rental = Rental(
        car_id=car.id,
        renter_id=current_user.id,
        pick_up_date=form.pick_up_date.data,
        return_date=form.return_date.data,
        status=status,
        payment_method=form.payment_method.data,
        payment_status=form.payment_status.data
    )
    db.session.add(rental)
    db.session.commit()
    logger.info('Rental %s created for car %s with status %s', rental.id, car.id, status)

    spawn(send_booking_email, rental.id)

    return jsonify({
        'success': True,
        'message': 'Rental created successfully',
        'rental': rental.to_dict()
    }), 201


@bp.route('/rentals/<int:rental_id>/status', methods=['PUT'])
@login_required
def update_rental_status(rental_id):
    rental = db.session.get(Rental, rental_id)
    if rental is None:
        return error_response('Rental not found', 404)

    if rental.car.owner_id != current_user.id and not current_user.is_admin:
        return error_response('You are not authorized to update this rental', 403)

    form = RentalStatusForm()
    if not form.validate():
        return validation_error(form, 'Status is required')

    rental.status = form.status.data
    db.session.commit()

    spawn(notify_rental_status, rental.id)

    return jsonify({
        'success': True,
        'message': 'Rental status updated successfully',
        'rental': rental.to_dict()
    })


@bp.route('/my-rentals', methods=['GET'])
@login_required
def my_rentals():
    rentals = Rental.query.filter_by(renter_id=current_user.id) \
        .order_by(Rental.created_at.desc()).all()
    return jsonify({'success': True, 'rentals': [rental.to_dict() for rental in rentals]})


def notify_rental_status(rental_id):
    rental = db.session.get(Rental, rental_id)
    if rental is None:
        return []

    renter = db.session.get(User, rental.renter_id)
    tokens = renter.push_token_values() if renter else []
    if not tokens:
        logger.info('No push tokens available for renter %s', rental.renter_id)
        return []

    return push.send(
        tokens,
        'BMW Rental Status Update',
        f'Your rental for {rental.car.display_name} has been updated to: {rental.status}',
        {
            'rental_id': rental.id,
            'status': rental.status,
            'type': 'rentalUpdate',
            'navigation': {
                'screen': 'ProfileTab',
                'params': {
                    'screen': 'BookingDetails',
                    'params': {'booking': {'id': rental.id}},
                },
            },
        }
    )
