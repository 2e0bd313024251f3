import logging
import smtplib
from flask import current_app, render_template
from flask_mail import Message as MailMessage
from app import db, mail
from app.models.rental import Rental

logger = logging.getLogger(__name__)

DATE_FORMAT = '%m-%d-%Y %I:%M %p'


def booking_rows(rental):
    car = rental.car
    owner = car.owner
    return [
        ('Car', f'{car.brand} {car.model} ({car.year or "N/A"})'),
        ('Type', car.vehicle_type or 'N/A'),
        ('Capacity', car.seat_capacity or 'N/A'),
        ('Fuel', car.fuel or 'N/A'),
        ('Transmission', car.transmission or 'N/A'),
        ('Status', rental.status),
        ('Pick-up Date', rental.pick_up_date.strftime(DATE_FORMAT)),
        ('Return Date', rental.return_date.strftime(DATE_FORMAT)),
        ('Price Per Day', f'₱{car.price_per_day:g}'),
        ('Rental Day/s', rental.rental_days),
        ('Payment', f'₱{rental.total_amount:g}'),
        ('Mode of Payment', rental.payment_method),
        ('Payment Status', rental.payment_status),
        ('Owner', owner.full_name if owner else 'N/A'),
        ('Owner Email Address', owner.email if owner else 'N/A'),
        ('Pick Up Location', car.pickup_location or 'N/A'),
        ('Terms and Conditions', car.terms_and_conditions or 'N/A'),
    ]


def send_booking_email(rental_id):
    rental = db.session.get(Rental, rental_id)
    if rental is None or rental.renter is None:
        logger.warning('Booking email skipped, rental %s not found', rental_id)
        return False

    car = rental.car
    renter_name = rental.renter.first_name or rental.renter.email
    msg = MailMessage(
        subject='BMW Bookings',
        recipients=[rental.renter.email],
        sender=current_app.config.get('MAIL_DEFAULT_SENDER')
    )
    msg.body = (
        f'Dear {renter_name},\n\n'
        f'Your booking for the car {car.brand} {car.model} ({car.year or "N/A"}) '
        f'has been received with status {rental.status}.\n\n'
        'Thank you for choosing BMW Rentals!\n'
    )
    # Listing and profile text is user supplied; the template autoescapes it
    msg.html = render_template('email/booking.html', renter_name=renter_name, rows=booking_rows(rental))

    try:
        mail.send(msg)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error('Failed to send booking email for rental %s: %s', rental_id, exc)
        return False
    logger.info('Booking email sent for rental %s', rental_id)
    return True
