# cityscope/api/profile/routes.py
from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from cityscope.api.profile.schemas import ProfileUpdateSchema
from cityscope.core import errors
from cityscope.core.results import ServiceResult

profile_bp = Blueprint('profile_bp', __name__)


@profile_bp.route('', methods=['GET'])
@jwt_required()
def get_my_profile():
    profile_service = current_app.services['profiles']
    return profile_service.get_profile(get_jwt_identity()).to_response()


@profile_bp.route('', methods=['PUT'])
@jwt_required()
def update_my_profile():
    profile_service = current_app.services['profiles']
    try:
        data = ProfileUpdateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return ServiceResult.fail(errors.ValidationError("Validation failed"), details=err.messages).to_response()
    return profile_service.update_profile(get_jwt_identity(), data).to_response()


@profile_bp.route('/<string:user_id>', methods=['GET'])
def get_user_profile(user_id: str):
    """Public profile of any active user."""
    profile_service = current_app.services['profiles']
    return profile_service.get_profile(user_id).to_response()
