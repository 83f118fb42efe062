# cityscope/api/posts/routes.py
import logging
from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from cityscope.api.posts.schemas import PostCreateSchema, ReplyCreateSchema, FeedQuerySchema
from cityscope.core import errors
from cityscope.core.results import ServiceResult

posts_bp = Blueprint('posts_bp', __name__)

FILTER_KEYS = ('post_type', 'author', 'city', 'sort_by', 'search')


def _invalid(err: ValidationError):
    return ServiceResult.fail(errors.ValidationError("Validation failed"), details=err.messages).to_response()


def _load_feed_query():
    query = FeedQuerySchema().load(request.args.to_dict())
    filters = {key: query.get(key) for key in FILTER_KEYS}
    return filters, query.get('page'), query.get('limit')


@posts_bp.route('', methods=['GET'])
@jwt_required()
def get_posts_feed():
    """Lists active posts with optional postType/author/city/sortBy/search filters."""
    feed_service = current_app.services['feed']
    try:
        filters, page, limit = _load_feed_query()
    except ValidationError as err:
        return _invalid(err)
    return feed_service.query_feed(filters, page=page, limit=limit).to_response()


@posts_bp.route('/feed', methods=['GET'])
@jwt_required()
def get_home_feed():
    """Same filters as the list feed; city defaults to the caller's stored city."""
    feed_service = current_app.services['feed']
    user_id = get_jwt_identity()
    try:
        filters, page, limit = _load_feed_query()
    except ValidationError as err:
        return _invalid(err)
    return feed_service.home_feed(user_id, filters, page=page, limit=limit).to_response()


@posts_bp.route('', methods=['POST'])
@jwt_required()
def create_post():
    """
    Creates a post from a multipart body (content, postType, city and an
    optional 'image' file). The image is hosted first and its URL stored.
    """
    post_service = current_app.services['posts']
    storage_service = current_app.services['storage']
    user_id = get_jwt_identity()

    form = request.form.to_dict() if request.form else (request.get_json(silent=True) or {})
    try:
        data = PostCreateSchema().load(form)
    except ValidationError as err:
        return _invalid(err)

    image_url = None
    image_file = request.files.get('image')
    if image_file and image_file.filename:
        try:
            image_url = storage_service.upload_image(image_file.read(), image_file.filename,
                                                     image_file.mimetype, user_id)
            logging.info(f"Post image uploaded: {image_url}")
        except errors.MediaUploadError as e:
            return ServiceResult.fail(e).to_response()

    result = post_service.create_post(user_id, data['content'], data['post_type'],
                                      city=data.get('city'), image_url=image_url)
    if not result.success and image_url:
        try:
            storage_service.delete_image(image_url)
        except Exception as e:
            logging.error(f"Orphaned post image cleanup failed (url: {image_url}): {e}")
    return result.to_response()


@posts_bp.route('/<string:post_id>', methods=['GET'])
@jwt_required()
def get_post(post_id: str):
    post_service = current_app.services['posts']
    return post_service.get_post(post_id).to_response()


@posts_bp.route('/<string:post_id>', methods=['DELETE'])
@jwt_required()
def delete_post(post_id: str):
    """Deletes the caller's own post."""
    post_service = current_app.services['posts']
    return post_service.delete_post(post_id, get_jwt_identity()).to_response()


@posts_bp.route('/<string:post_id>/like', methods=['POST'])
@jwt_required()
def toggle_post_like(post_id: str):
    post_service = current_app.services['posts']
    return post_service.toggle_like(post_id, get_jwt_identity()).to_response()


@posts_bp.route('/<string:post_id>/dislike', methods=['POST'])
@jwt_required()
def toggle_post_dislike(post_id: str):
    post_service = current_app.services['posts']
    return post_service.toggle_dislike(post_id, get_jwt_identity()).to_response()


@posts_bp.route('/<string:post_id>/replies', methods=['POST'])
@jwt_required()
def add_reply(post_id: str):
    post_service = current_app.services['posts']
    try:
        data = ReplyCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return _invalid(err)
    return post_service.add_reply(post_id, get_jwt_identity(), data['content']).to_response()


@posts_bp.route('/<string:post_id>/replies/<string:reply_id>', methods=['DELETE'])
@jwt_required()
def remove_reply(post_id: str, reply_id: str):
    post_service = current_app.services['posts']
    return post_service.remove_reply(post_id, reply_id, get_jwt_identity()).to_response()
