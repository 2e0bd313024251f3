from datetime import datetime
from app import db

NOTIFICATION_TYPES = ('all', 'my_car_inquiries', 'my_inquiries', 'booking', 'payment', 'car')


class Notification(db.Model):
    __table_args__ = (db.Index('ix_notification_user_type', 'user_id', 'type'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    title = db.Column(db.String(256), nullable=False)
    message = db.Column(db.Text, nullable=False, default='')
    type = db.Column(db.String(32), nullable=False)
    is_read = db.Column(db.Boolean, default=False)
    related_id = db.Column(db.String(64), nullable=False)
    sender_id = db.Column(db.Integer, db.ForeignKey('user.id'))
    car_id = db.Column(db.Integer, db.ForeignKey('car.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    sender = db.relationship('User', foreign_keys=[sender_id])
    car = db.relationship('Car')

    @staticmethod
    def for_user(user_id, type_filter='all'):
        query = Notification.query.filter_by(user_id=user_id)
        if type_filter and type_filter != 'all':
            query = query.filter_by(type=type_filter)
        return query

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'title': self.title,
            'message': self.message,
            'type': self.type,
            'is_read': self.is_read,
            'related_id': self.related_id,
            'sender': {
                'id': self.sender.id,
                'first_name': self.sender.first_name,
                'last_name': self.sender.last_name,
            } if self.sender else None,
            'car': {
                'id': self.car.id,
                'brand': self.car.brand,
                'model': self.car.model,
            } if self.car else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Notification {self.id}>'
