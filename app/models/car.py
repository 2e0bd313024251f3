from datetime import datetime
from app import db


class Car(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    brand = db.Column(db.String(64), nullable=False)
    model = db.Column(db.String(64), nullable=False)
    year = db.Column(db.Integer)
    vehicle_type = db.Column(db.String(32))
    seat_capacity = db.Column(db.Integer)
    fuel = db.Column(db.String(32))
    transmission = db.Column(db.String(32))
    price_per_day = db.Column(db.Float, nullable=False)
    pickup_location = db.Column(db.String(256))
    terms_and_conditions = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True)
    is_auto_approved = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    rentals = db.relationship('Rental', backref='car', lazy='dynamic')

    @property
    def display_name(self):
        return f'{self.brand} {self.model}'

    def to_dict(self):
        return {
            'id': self.id,
            'owner_id': self.owner_id,
            'brand': self.brand,
            'model': self.model,
            'year': self.year,
            'vehicle_type': self.vehicle_type,
            'seat_capacity': self.seat_capacity,
            'fuel': self.fuel,
            'transmission': self.transmission,
            'price_per_day': self.price_per_day,
            'pickup_location': self.pickup_location,
            'terms_and_conditions': self.terms_and_conditions,
            'is_active': self.is_active,
            'is_auto_approved': self.is_auto_approved,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Car {self.id} {self.brand} {self.model}>'
