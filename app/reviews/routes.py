from better_profanity import profanity
from flask import jsonify
from flask_login import current_user, login_required
from app import db
from app.reviews import bp
from app.reviews.forms import ReviewForm, ReviewUpdateForm
from app.models.car import Car
from app.models.rental import Rental
from app.models.review import Review
from app.utils.api import error_response, validation_error

DEFAULT_COMMENT = 'Good experience'


def clean_comment(comment):
    return profanity.censor(comment)


@bp.route('/reviews', methods=['POST'])
@login_required
def create_review():
    form = ReviewForm()
    if not form.validate():
        return validation_error(form, 'Missing required fields')

    rental = db.session.get(Rental, form.rental_id.data)
    if rental is None:
        return error_response('Rental not found', 404)
    if rental.renter_id != current_user.id:
        return error_response('You can only review your own rentals', 403)

    existing = Review.query.filter_by(rental_id=rental.id).first()
    if existing:
        return error_response('You have already reviewed this rental', 400, review_id=existing.id)

    comment = (form.comment.data or '').strip() or DEFAULT_COMMENT
    review = Review(
        rental_id=rental.id,
        renter_id=current_user.id,
        rating=form.rating.data,
        comment=clean_comment(comment)
    )
    db.session.add(review)
    db.session.commit()

    return jsonify({
        'success': True,
        'message': 'Review created successfully',
        'review': review.to_dict()
    }), 201


@bp.route('/reviews/<int:review_id>', methods=['PUT'])
@login_required
def update_review(review_id):
    review = db.session.get(Review, review_id)
    if review is None:
        return error_response('Review not found', 404)
    if review.renter_id != current_user.id:
        return error_response('You can only edit your own reviews', 403)

    form = ReviewUpdateForm()
    if not form.validate():
        return validation_error(form)

    if form.rating.data:
        review.rating = form.rating.data
    if form.comment.data:
        review.comment = clean_comment(form.comment.data)
    db.session.commit()

    return jsonify({'success': True, 'review': review.to_dict()})


@bp.route('/cars/<int:car_id>/reviews', methods=['GET'])
@login_required
def car_reviews(car_id):
    if db.session.get(Car, car_id) is None:
        return error_response('Car not found', 404)

    reviews = Review.query.join(Rental).filter(Rental.car_id == car_id) \
        .order_by(Review.created_at.desc()).all()
    average = round(sum(r.rating for r in reviews) / len(reviews), 1) if reviews else 0

    return jsonify({
        'success': True,
        'average_rating': average,
        'reviews': [review.to_dict() for review in reviews]
    })
