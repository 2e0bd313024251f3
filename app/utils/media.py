import logging
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from flask import current_app

logger = logging.getLogger(__name__)


def upload_images(files, folder):
    """Upload each file to Cloudinary; a file that fails is skipped."""
    images = []
    for file in files:
        try:
            result = cloudinary.uploader.upload(
                file,
                folder=folder,
                resource_type='auto',
                timeout=current_app.config.get('UPLOAD_TIMEOUT', 60)
            )
        except (CloudinaryError, OSError) as exc:
            logger.error('Failed to upload %s: %s', file.filename, exc)
            continue
        images.append({'public_id': result['public_id'], 'url': result['secure_url']})

    logger.info('Uploaded %d of %d image(s) to %s', len(images), len(files), folder)
    return images
