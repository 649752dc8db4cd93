from marshmallow import Schema, fields, pre_load, validate, EXCLUDE

from models.user import AGE_BRACKETS


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class UserUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(allow_none=True, validate=validate.Length(min=1, max=255))
    email = fields.Email(allow_none=True)
    age = fields.String(allow_none=True, validate=validate.OneOf(AGE_BRACKETS))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = _norm_email(data["email"])
        return data


class UserOutSchema(Schema):
    """Public projection of a user. There is deliberately no password_hash field."""
    id = fields.String(allow_none=False)
    username = fields.String(allow_none=True)
    email = fields.String(allow_none=True)
    age = fields.String(allow_none=True)
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
