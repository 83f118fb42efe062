# cityscope/models/user.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, Any

from cityscope.utils.datetime_utils import DateTimeUtils

# Projections attached to posts and replies at read time
AUTHOR_FIELDS = ('user_id', 'first_name', 'last_name', 'email', 'bio', 'is_verified')
REPLY_AUTHOR_FIELDS = ('user_id', 'first_name', 'last_name', 'email')


@dataclass
class User:
    """
    Structure of a document in the Firestore 'users' collection.
    ``password_hash`` is stored but never leaves the service layer.
    """
    user_id: str
    email: str
    password_hash: str
    first_name: str = ""
    last_name: str = ""
    bio: str = ""
    city: str = ""
    is_verified: bool = False
    is_active: bool = True
    user_status: int = 1
    posts_count: int = 0
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def project(self, fields=AUTHOR_FIELDS) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in fields}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        known = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in data.items() if k in known})
