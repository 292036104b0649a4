from flask import current_app, jsonify
from flask_login import current_user, login_user, logout_user, login_required
from logistics.auth import bp
from logistics.auth.forms import LoginForm
from logistics.errors import ValidationError
from logistics.models.user import User
from logistics.extensions import limiter


@bp.route('/login', methods=['POST'])
@limiter.limit("5 per minute")  # Protect against brute force
def login():
    if current_user.is_authenticated:
        return jsonify(current_user.to_dict())

    form = LoginForm()
    if not form.validate_on_submit():
        raise ValidationError('Invalid login data', errors=form.errors)

    user = User.query.filter_by(username=form.username.data).first()
    if user is None or not user.is_active or not user.check_password(form.password.data):
        current_app.logger.warning(f'Failed login attempt for {form.username.data}')
        return jsonify({'error': 'Invalid username or password'}), 401

    login_user(user, remember=form.remember_me.data)
    user.update_last_login()
    current_app.logger.info(f'User logged in: {user.username}')
    return jsonify(user.to_dict())


@bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'status': 'logged out'})


@bp.route('/user')
@login_required
def user():
    return jsonify(current_user.to_dict())
