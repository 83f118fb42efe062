# cityscope/api/auth/schemas.py
from marshmallow import Schema, fields, validate, pre_load, EXCLUDE


class AuthRequestSchema(Schema):
    """POST /api/auth: one body for both login and first-time signup."""
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, error_messages={
        "required": "Email is required",
        "invalid": "Please provide a valid email address"
    })
    password = fields.Str(
        required=True, load_only=True,
        validate=validate.Length(min=6, error="Password must be at least 6 characters long"),
        error_messages={"required": "Password is required"}
    )

    @pre_load
    def normalize_email(self, data, **kwargs):
        data = dict(data)
        if isinstance(data.get('email'), str):
            data['email'] = data['email'].strip().lower()
        return data
