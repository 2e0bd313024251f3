import math
from datetime import datetime
from app import db

RENTAL_STATUSES = ('Pending', 'Confirmed', 'Active', 'Returned', 'Canceled')
PAYMENT_METHODS = ('GCash', 'Cash', 'Credit Card')
PAYMENT_STATUSES = ('Pending', 'Paid', 'Refunded')

# A car with a rental in one of these states cannot be booked again
OPEN_STATUSES = ('Pending', 'Confirmed', 'Active')


class Rental(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    car_id = db.Column(db.Integer, db.ForeignKey('car.id'), nullable=False)
    renter_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    pick_up_date = db.Column(db.DateTime, nullable=False)
    return_date = db.Column(db.DateTime, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='Pending')
    payment_method = db.Column(db.String(20), nullable=False, default='GCash')
    payment_status = db.Column(db.String(20), nullable=False, default='Pending')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    renter = db.relationship('User', backref=db.backref('rentals', lazy='dynamic'))
    review = db.relationship('Review', backref='rental', uselist=False)

    @staticmethod
    def car_is_on_rental(car_id):
        return Rental.query.filter(
            Rental.car_id == car_id,
            Rental.status.in_(OPEN_STATUSES)
        ).first() is not None

    @property
    def rental_days(self):
        if not self.pick_up_date or not self.return_date:
            return 0
        seconds = abs((self.return_date - self.pick_up_date).total_seconds())
        return math.ceil(seconds / 86400)

    @property
    def total_amount(self):
        return self.rental_days * (self.car.price_per_day if self.car else 0)

    def to_dict(self):
        return {
            'id': self.id,
            'car_id': self.car_id,
            'renter_id': self.renter_id,
            'pick_up_date': self.pick_up_date.isoformat() if self.pick_up_date else None,
            'return_date': self.return_date.isoformat() if self.return_date else None,
            'status': self.status,
            'payment_method': self.payment_method,
            'payment_status': self.payment_status,
            'rental_days': self.rental_days,
            'total_amount': self.total_amount,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Rental {self.id}>'
