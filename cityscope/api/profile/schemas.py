# cityscope/api/profile/schemas.py
from marshmallow import Schema, fields, validate, pre_load, EXCLUDE


class UserResponseSchema(Schema):
    """
    Outward representation of a user. The password hash is never part of it.
    """
    user_id = fields.Str(required=True, dump_only=True)
    email = fields.Email(required=True)
    first_name = fields.Str()
    last_name = fields.Str()
    bio = fields.Str()
    city = fields.Str()
    is_verified = fields.Bool()
    is_active = fields.Bool()
    posts_count = fields.Int()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class ProfileUpdateSchema(Schema):
    """PUT /api/profile"""
    class Meta:
        unknown = EXCLUDE

    first_name = fields.Str(required=True, validate=validate.Length(min=1, max=50),
                            error_messages={"required": "First name is required"})
    last_name = fields.Str(required=True, validate=validate.Length(min=1, max=50),
                           error_messages={"required": "Last name is required"})
    city = fields.Str(required=True, validate=validate.Length(min=1, max=100),
                      error_messages={"required": "City is required"})
    bio = fields.Str(validate=validate.Length(max=160, error="Bio cannot exceed 160 characters"))

    @pre_load
    def strip_values(self, data, **kwargs):
        return {k: v.strip() if isinstance(v, str) else v for k, v in data.items()}
