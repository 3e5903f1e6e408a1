# routes/auth.py
# Login by access code. Stores the user id and role in the session.

from flask import Blueprint, jsonify, session

from models.user import User
from routes.responses import payload

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    user_code = payload().get('code')
    if not user_code:
        return jsonify({'success': False, 'error': 'Please enter your access code.'}), 400

    user = User.query.filter_by(code=user_code).first()
    if not user:
        return jsonify({'success': False, 'error': 'Invalid access code.'}), 401

    session.clear()  # drop anything left from a previous login
    session['user_id'] = user.id
    session['user_role'] = user.role
    return jsonify({'success': True, 'data': user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    session.clear()
    return jsonify({'success': True})
