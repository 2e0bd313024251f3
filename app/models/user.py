from datetime import datetime
from flask import current_app, jsonify
from flask_login import UserMixin
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from app import db, login_manager, bcrypt

TOKEN_SALT = 'api-token'


@login_manager.user_loader
def load_user(id):
    return db.session.get(User, int(id))


@login_manager.request_loader
def load_user_from_request(request):
    header = request.headers.get('Authorization', '')
    if not header.startswith('Bearer '):
        return None
    return User.verify_api_token(header[len('Bearer '):].strip())


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'success': False, 'message': 'Authentication required'}), 401


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(30))
    last_name = db.Column(db.String(30))
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(128))
    role = db.Column(db.String(20), default='user')  # 'user' or 'admin'
    avatar_url = db.Column(db.String(256))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    push_tokens = db.relationship('PushToken', backref='user', lazy='dynamic',
                                  cascade='all, delete-orphan')
    disable_records = db.relationship('DisableRecord', backref='user',
                                      order_by='DisableRecord.start_date',
                                      cascade='all, delete-orphan')
    cars = db.relationship('Car', backref='owner', lazy='dynamic')

    @property
    def is_active(self):
        return not self.is_currently_disabled

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        if not self.password_hash:
            return False
        return bcrypt.check_password_hash(self.password_hash, password)

    def get_api_token(self):
        serializer = URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)
        return serializer.dumps(self.id)

    @staticmethod
    def verify_api_token(token):
        serializer = URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)
        try:
            user_id = serializer.loads(token, max_age=current_app.config['API_TOKEN_MAX_AGE'])
        except (BadSignature, SignatureExpired):
            return None
        return db.session.get(User, user_id)

    @property
    def full_name(self):
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.email

    @property
    def is_admin(self):
        return self.role == 'admin'

    def add_push_token(self, token):
        """Store a device token once; returns True when it was new."""
        if self.push_tokens.filter_by(token=token).first() is not None:
            return False
        self.push_tokens.append(PushToken(token=token))
        return True

    def push_token_values(self):
        return [t.token for t in self.push_tokens.order_by(PushToken.created_at)]

    @property
    def is_currently_disabled(self):
        return self.current_disable_record() is not None

    def current_disable_record(self):
        now = datetime.utcnow()
        for record in self.disable_records:
            if not record.is_active:
                continue
            if record.is_permanent:
                return record
            if record.end_date and record.end_date > now:
                return record
        return None

    def add_disable_record(self, reason, end_date=None, is_permanent=False):
        # Only one record is active at a time
        for record in self.disable_records:
            if record.is_active:
                record.is_active = False

        record = DisableRecord(
            reason=reason,
            end_date=None if is_permanent else end_date,
            is_permanent=is_permanent,
            is_active=True
        )
        self.disable_records.append(record)
        return record

    def to_summary(self):
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'avatar_url': self.avatar_url,
        }

    def to_dict(self):
        data = self.to_summary()
        data.update({
            'role': self.role,
            'is_disabled': self.is_currently_disabled,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        })
        return data

    def __repr__(self):
        return f'<User {self.email}>'


class PushToken(db.Model):
    __table_args__ = (db.UniqueConstraint('user_id', 'token', name='uq_push_token_user_token'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    token = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<PushToken {self.token}>'


class DisableRecord(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    start_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    end_date = db.Column(db.DateTime)  # None means permanent or undetermined
    reason = db.Column(db.String(256), nullable=False)
    is_permanent = db.Column(db.Boolean, default=False)
    is_active = db.Column(db.Boolean, default=True)

    def to_dict(self):
        return {
            'id': self.id,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'reason': self.reason,
            'is_permanent': self.is_permanent,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f'<DisableRecord {self.id}>'
