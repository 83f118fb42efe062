# cityscope/api/auth/routes.py
from flask import Blueprint, request, current_app
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies
from marshmallow import ValidationError

from cityscope.api.auth.schemas import AuthRequestSchema
from cityscope.core import errors
from cityscope.core.results import ServiceResult

auth_bp = Blueprint('auth_bp', __name__)


@auth_bp.route('', methods=['POST'])
def authenticate():
    """Login or signup. The access token is returned in the body and set as the Auth_Token cookie."""
    auth_service = current_app.services['auth']
    try:
        data = AuthRequestSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return ServiceResult.fail(errors.ValidationError("Validation failed"), details=err.messages).to_response()

    result = auth_service.authenticate(data['email'], data['password'])
    if not result.success:
        return result.to_response()

    access_token = create_access_token(identity=result.data['user']['user_id'])
    result.data['token'] = access_token
    response, status_code = result.to_response()
    set_access_cookies(response, access_token)
    return response, status_code


@auth_bp.route('/logout', methods=['POST'])
def logout():
    response, status_code = ServiceResult.ok("Logged out").to_response()
    unset_jwt_cookies(response)
    return response, status_code
