# cityscope/models/post.py
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from cityscope.core.errors import ValidationError, NotFoundError
from cityscope.utils.datetime_utils import DateTimeUtils

MAX_CONTENT_LENGTH = 280
IMAGE_URL_PATTERN = re.compile(r'^https?://.+\.(jpg|jpeg|png|gif|webp)$', re.IGNORECASE)


class PostType(Enum):
    """The closed set of post categories."""
    RECOMMEND = "recommend"
    HELP = "help"
    UPDATE = "update"
    EVENT = "event"

    @classmethod
    def parse(cls, value: Any) -> "PostType":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError("Post type must be one of: recommend, help, update, event")

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class SortOrder(Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    MOST_LIKED = "mostLiked"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


def clean_content(content: Any, label: str = "Post content") -> str:
    """Trims text and enforces the 1..280 character rule."""
    if not isinstance(content, str) or not content.strip():
        raise ValidationError(f"{label} is required")
    trimmed = content.strip()
    if len(trimmed) > MAX_CONTENT_LENGTH:
        raise ValidationError(f"{label} cannot exceed {MAX_CONTENT_LENGTH} characters")
    return trimmed


def clean_image_url(url: Optional[str]) -> Optional[str]:
    if url is None or not url.strip():
        return None
    url = url.strip()
    if not IMAGE_URL_PATTERN.match(url):
        raise ValidationError("Invalid image URL format")
    return url


def _unique(ids: List[str]) -> List[str]:
    seen = set()
    result = []
    for user_id in ids:
        if user_id not in seen:
            seen.add(user_id)
            result.append(user_id)
    return result


@dataclass
class Reply:
    """A reply embedded in its parent post document."""
    reply_id: str
    author_id: str
    content: str
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reply_id": self.reply_id,
            "author_id": self.author_id,
            "content": self.content,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reply":
        return cls(
            reply_id=data["reply_id"],
            author_id=data["author_id"],
            content=data.get("content", ""),
            created_at=data.get("created_at") or DateTimeUtils.now(),
            updated_at=data.get("updated_at") or DateTimeUtils.now(),
        )


@dataclass
class Post:
    """
    Structure of a document in the Firestore 'posts' collection.

    ``likes`` and ``dislikes`` hold user ids in insertion order with set
    semantics; a user id is never in both lists at once.
    """
    post_id: str
    author_id: str
    content: str
    post_type: PostType
    city: str
    image: Optional[str] = None
    likes: List[str] = field(default_factory=list)
    dislikes: List[str] = field(default_factory=list)
    replies: List[Reply] = field(default_factory=list)
    is_active: bool = True
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    @classmethod
    def new(cls, author_id: str, content: str, post_type: Any, city: str, image: Optional[str] = None) -> "Post":
        """Validates the input and builds a fresh, active post with empty collections."""
        city = (city or "").strip()
        if not city:
            raise ValidationError("City is required")
        return cls(
            post_id=str(uuid.uuid4()),
            author_id=author_id,
            content=clean_content(content),
            post_type=PostType.parse(post_type),
            city=city,
            image=clean_image_url(image),
        )

    # --- engagement ---

    def _ensure_active(self):
        if not self.is_active:
            raise NotFoundError("Post is not active")

    def toggle_like(self, user_id: str) -> bool:
        """Flips the user's like; a dislike by the same user is dropped first. Returns the new like state."""
        self._ensure_active()
        self.dislikes = [uid for uid in self.dislikes if uid != user_id]
        if user_id in self.likes:
            self.likes = [uid for uid in self.likes if uid != user_id]
            return False
        self.likes.append(user_id)
        return True

    def toggle_dislike(self, user_id: str) -> bool:
        """Mirror of toggle_like. Returns the new dislike state."""
        self._ensure_active()
        self.likes = [uid for uid in self.likes if uid != user_id]
        if user_id in self.dislikes:
            self.dislikes = [uid for uid in self.dislikes if uid != user_id]
            return False
        self.dislikes.append(user_id)
        return True

    def is_liked_by(self, user_id: str) -> bool:
        return user_id in self.likes

    def is_disliked_by(self, user_id: str) -> bool:
        return user_id in self.dislikes

    @property
    def likes_count(self) -> int:
        return len(self.likes)

    @property
    def dislikes_count(self) -> int:
        return len(self.dislikes)

    @property
    def replies_count(self) -> int:
        return len(self.replies)

    # --- replies ---

    def add_reply(self, author_id: str, content: str) -> Reply:
        reply = Reply(
            reply_id=str(uuid.uuid4()),
            author_id=author_id,
            content=clean_content(content, label="Reply content"),
        )
        self.replies.append(reply)
        return reply

    def find_reply(self, reply_id: str) -> Optional[Reply]:
        return next((reply for reply in self.replies if reply.reply_id == reply_id), None)

    def remove_reply(self, reply_id: str) -> bool:
        """Removes the matching reply. An unknown id leaves the post untouched."""
        remaining = [reply for reply in self.replies if reply.reply_id != reply_id]
        removed = len(remaining) != len(self.replies)
        self.replies = remaining
        return removed

    # --- persistence ---

    def enforce_reaction_exclusivity(self):
        """
        Runs before every write: deduplicates both lists and drops any user
        found in both, so likes and dislikes never intersect in storage.
        """
        likes = _unique(self.likes)
        dislikes = _unique(self.dislikes)
        like_set, dislike_set = set(likes), set(dislikes)
        self.likes = [uid for uid in likes if uid not in dislike_set]
        self.dislikes = [uid for uid in dislikes if uid not in like_set]

    def touch(self):
        self.updated_at = DateTimeUtils.now()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "post_id": self.post_id,
            "author_id": self.author_id,
            "content": self.content,
            "post_type": self.post_type.value,
            "city": self.city,
            "image": self.image,
            "likes": list(self.likes),
            "dislikes": list(self.dislikes),
            "replies": [reply.to_dict() for reply in self.replies],
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        return cls(
            post_id=data["post_id"],
            author_id=data["author_id"],
            content=data.get("content", ""),
            post_type=PostType(data["post_type"]),
            city=data.get("city", ""),
            image=data.get("image"),
            likes=list(data.get("likes", [])),
            dislikes=list(data.get("dislikes", [])),
            replies=[Reply.from_dict(r) for r in data.get("replies", [])],
            is_active=data.get("is_active", True),
            created_at=data.get("created_at") or DateTimeUtils.now(),
            updated_at=data.get("updated_at") or DateTimeUtils.now(),
        )
