# cityscope/api/posts/schemas.py
from marshmallow import Schema, fields, validate, pre_load, EXCLUDE

from cityscope.models.post import PostType, SortOrder, MAX_CONTENT_LENGTH


def _strip_strings(data):
    """Trims string values and drops the blank ones so they count as absent."""
    cleaned = {}
    for key, value in data.items():
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        cleaned[key] = value
    return cleaned


# --- nested projections for populated responses ---
class AuthorSchema(Schema):
    """Author fields attached to a post at read time."""
    user_id = fields.Str(required=True)
    first_name = fields.Str()
    last_name = fields.Str()
    email = fields.Email()
    bio = fields.Str()
    is_verified = fields.Bool()


class ReplyAuthorSchema(Schema):
    user_id = fields.Str(required=True)
    first_name = fields.Str()
    last_name = fields.Str()
    email = fields.Email()


class ReplyResponseSchema(Schema):
    reply_id = fields.Str(required=True)
    author = fields.Nested(ReplyAuthorSchema, allow_none=True)
    content = fields.Str(required=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)


class PostResponseSchema(Schema):
    """Final JSON shape of a post, author and reply authors populated."""
    post_id = fields.Str(dump_only=True)
    author = fields.Nested(AuthorSchema, allow_none=True)
    content = fields.Str(required=True)
    post_type = fields.Str(required=True)
    city = fields.Str(required=True)
    image = fields.Str(allow_none=True)
    likes = fields.List(fields.Str())
    dislikes = fields.List(fields.Str())
    likes_count = fields.Int(required=True)
    dislikes_count = fields.Int(required=True)
    replies_count = fields.Int(required=True)
    replies = fields.List(fields.Nested(ReplyResponseSchema))
    is_active = fields.Bool()
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)


# --- request schemas ---
class PostCreateSchema(Schema):
    """Text fields of the multipart POST /api/posts body."""
    class Meta:
        unknown = EXCLUDE

    content = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=MAX_CONTENT_LENGTH,
                                 error=f"Post content must be between 1 and {MAX_CONTENT_LENGTH} characters."),
        error_messages={"required": "Post content is required"}
    )
    post_type = fields.Str(
        required=True, data_key="postType",
        validate=validate.OneOf(PostType.values(), error="Post type must be one of: recommend, help, update, event"),
        error_messages={"required": "Valid post type is required (recommend, help, update, event)"}
    )
    city = fields.Str(load_default=None)

    @pre_load
    def strip_values(self, data, **kwargs):
        return _strip_strings(data)


class ReplyCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=MAX_CONTENT_LENGTH,
                                 error=f"Reply must be between 1 and {MAX_CONTENT_LENGTH} characters."),
        error_messages={"required": "Reply content is required"}
    )

    @pre_load
    def strip_values(self, data, **kwargs):
        return _strip_strings(data)


class FeedQuerySchema(Schema):
    """Query string of GET /api/posts and GET /api/posts/feed."""
    class Meta:
        unknown = EXCLUDE

    post_type = fields.Str(
        data_key="postType",
        validate=validate.OneOf(PostType.values(), error="Post type must be one of: recommend, help, update, event")
    )
    author = fields.Str()
    city = fields.Str()
    sort_by = fields.Str(
        data_key="sortBy", load_default=SortOrder.NEWEST.value,
        validate=validate.OneOf(SortOrder.values(), error="Sort by must be one of: newest, oldest, mostLiked")
    )
    search = fields.Str()
    page = fields.Int(validate=validate.Range(min=1))
    limit = fields.Int(validate=validate.Range(min=1, max=100))

    @pre_load
    def strip_values(self, data, **kwargs):
        return _strip_strings(data)
