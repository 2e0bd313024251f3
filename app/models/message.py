from datetime import datetime, timedelta
from app import db

DELETED_PLACEHOLDER = 'This message was deleted'


class Message(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    car_id = db.Column(db.Integer, db.ForeignKey('car.id'), nullable=False, index=True)
    sender_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    receiver_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    content = db.Column(db.Text, nullable=False, default='')
    images = db.Column(db.JSON, default=list)
    is_read = db.Column(db.Boolean, default=False)
    read_at = db.Column(db.DateTime)
    is_delivered = db.Column(db.Boolean, default=False)
    delivered_at = db.Column(db.DateTime)
    is_edited = db.Column(db.Boolean, default=False)
    is_deleted = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    sender = db.relationship('User', foreign_keys=[sender_id], backref='sent_messages')
    receiver = db.relationship('User', foreign_keys=[receiver_id], backref='received_messages')
    car = db.relationship('Car', backref=db.backref('messages', lazy='dynamic'))

    @classmethod
    def visible(cls):
        """Base query for conversation fetches; soft-deleted rows stay out."""
        return cls.query.filter(cls.is_deleted.isnot(True))

    @classmethod
    def between(cls, user_id, other_id):
        return cls.visible().filter(db.or_(
            db.and_(cls.sender_id == user_id, cls.receiver_id == other_id),
            db.and_(cls.sender_id == other_id, cls.receiver_id == user_id),
        ))

    def is_editable(self, window_minutes, now=None):
        now = now or datetime.utcnow()
        return now - self.created_at <= timedelta(minutes=window_minutes)

    def mark_delivered(self):
        if not self.is_delivered:
            self.is_delivered = True
            self.delivered_at = datetime.utcnow()

    def mark_read(self):
        self.is_read = True
        self.read_at = datetime.utcnow()
        self.mark_delivered()

    def to_dict(self):
        return {
            'id': self.id,
            'car_id': self.car_id,
            'sender_id': self.sender_id,
            'receiver_id': self.receiver_id,
            'sender': self.sender.to_summary() if self.sender else None,
            'receiver': self.receiver.to_summary() if self.receiver else None,
            'content': DELETED_PLACEHOLDER if self.is_deleted else self.content,
            'images': [] if self.is_deleted else (self.images or []),
            'is_read': self.is_read,
            'read_at': self.read_at.isoformat() if self.read_at else None,
            'is_delivered': self.is_delivered,
            'delivered_at': self.delivered_at.isoformat() if self.delivered_at else None,
            'is_edited': self.is_edited,
            'is_deleted': self.is_deleted,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Message {self.id}>'
