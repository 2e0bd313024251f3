from flask import jsonify
from flask_login import current_user, login_required
from app import db
from app.cars import bp
from app.cars.forms import CarForm
from app.models.car import Car
from app.utils.api import error_response, validation_error


@bp.route('/cars', methods=['POST'])
@login_required
def create_car():
    form = CarForm()
    if not form.validate():
        return validation_error(form)

    car = Car(owner_id=current_user.id)
    form.populate_obj(car)
    db.session.add(car)
    db.session.commit()

    return jsonify({'success': True, 'car': car.to_dict()}), 201


@bp.route('/cars', methods=['GET'])
@login_required
def list_cars():
    cars = Car.query.filter_by(is_active=True).order_by(Car.created_at.desc()).all()
    return jsonify({'success': True, 'cars': [car.to_dict() for car in cars]})


@bp.route('/cars/<int:car_id>', methods=['GET'])
@login_required
def get_car(car_id):
    car = db.session.get(Car, car_id)
    if car is None:
        return error_response('Car not found', 404)
    data = car.to_dict()
    data['owner'] = car.owner.to_summary() if car.owner else None
    return jsonify({'success': True, 'car': data})
