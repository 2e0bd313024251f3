import os
from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, '.env'))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'wheelshare.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Bearer tokens issued by /api/v1/login
    API_TOKEN_MAX_AGE = int(os.environ.get('API_TOKEN_MAX_AGE', 7 * 24 * 3600))

    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'localhost')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 25))
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS', 'false').lower() == 'true'
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER', 'bookings@wheelshare.local')

    CLOUDINARY_CLOUD_NAME = os.environ.get('CLOUDINARY_CLOUD_NAME')
    CLOUDINARY_API_KEY = os.environ.get('CLOUDINARY_API_KEY')
    CLOUDINARY_API_SECRET = os.environ.get('CLOUDINARY_API_SECRET')
    UPLOAD_TIMEOUT = 60

    EXPO_ACCESS_TOKEN = os.environ.get('EXPO_ACCESS_TOKEN')
    PUSH_CHUNK_SIZE = 100
    PUSH_RECEIPT_DELAY = 5
    PUSH_TIMEOUT = 10
    NOTIFY_DEDUP_TTL = 300
    # Run notification side effects in the request instead of a background task
    NOTIFY_INLINE = False

    MESSAGE_EDIT_WINDOW_MINUTES = 20
    MESSAGE_MAX_IMAGES = 5

    SOCKETIO_ASYNC_MODE = os.environ.get('SOCKETIO_ASYNC_MODE')
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
