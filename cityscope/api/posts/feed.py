# cityscope/api/posts/feed.py
"""
Feed aggregation: filtered, sorted, optionally paginated views over active posts.

Equality constraints are pushed down to Firestore; the case-insensitive
substring search and the ordering (including like-count ordering, which
Firestore cannot express over an array) are applied in Python.
"""
import logging
import math
from typing import Optional, Dict, Any, List, Iterable, Tuple

from cityscope.api.posts.schemas import PostResponseSchema
from cityscope.core.errors import CityScopeError, NotFoundError, ForbiddenError
from cityscope.core.results import ServiceResult
from cityscope.models.post import Post, PostType, SortOrder
from cityscope.models.user import AUTHOR_FIELDS, REPLY_AUTHOR_FIELDS

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


def matches_search(post: Post, term: Optional[str]) -> bool:
    if not term:
        return True
    return term.casefold() in post.content.casefold()


def sort_posts(posts: Iterable[Post], sort_by: Optional[str] = None) -> List[Post]:
    """newest (default): created_at desc; oldest: asc; mostLiked: like count desc, then created_at desc."""
    if sort_by == SortOrder.OLDEST.value:
        return sorted(posts, key=lambda p: p.created_at)
    if sort_by == SortOrder.MOST_LIKED.value:
        return sorted(posts, key=lambda p: (p.likes_count, p.created_at), reverse=True)
    return sorted(posts, key=lambda p: p.created_at, reverse=True)


def paginate(items: List[Any], page: int, limit: int) -> Tuple[List[Any], Dict[str, Any]]:
    """Returns the slice [(page-1)*limit, page*limit) and the pagination block."""
    page = max(1, page)
    limit = max(1, limit)
    total = len(items)
    total_pages = math.ceil(total / limit)
    start = (page - 1) * limit
    return items[start:start + limit], {
        "current_page": page,
        "total_pages": total_pages,
        "total_posts": total,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


def hydrate_posts(posts: List[Post], user_repository) -> List[Dict[str, Any]]:
    """
    Replaces stored user references with read-time projections.

    The post author gets the public author fields, each reply author the
    smaller reply-author projection. All users are fetched in one batch;
    an unknown user hydrates to None.
    """
    user_ids = set()
    for post in posts:
        user_ids.add(post.author_id)
        user_ids.update(reply.author_id for reply in post.replies)
    users = user_repository.get_many(user_ids)

    def _project(user_id, fields):
        user = users.get(user_id)
        return user.project(fields) if user else None

    hydrated = []
    for post in posts:
        data = post.to_dict()
        data.pop("author_id")
        data["author"] = _project(post.author_id, AUTHOR_FIELDS)
        data["replies"] = []
        for reply in post.replies:
            reply_data = reply.to_dict()
            reply_data["author"] = _project(reply_data.pop("author_id"), REPLY_AUTHOR_FIELDS)
            data["replies"].append(reply_data)
        data["likes_count"] = post.likes_count
        data["dislikes_count"] = post.dislikes_count
        data["replies_count"] = post.replies_count
        hydrated.append(data)
    return hydrated


class FeedService:
    def __init__(self, post_repository, user_repository):
        self.post_repository = post_repository
        self.user_repository = user_repository
        self.post_schema = PostResponseSchema()

    def serialize(self, posts: List[Post]) -> List[Dict[str, Any]]:
        return self.post_schema.dump(hydrate_posts(posts, self.user_repository), many=True)

    @staticmethod
    def _normalize_filters(filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Blank or unrecognized optional values become 'no constraint'."""
        filters = filters or {}

        def _text(key):
            value = filters.get(key)
            return value.strip() if isinstance(value, str) and value.strip() else None

        post_type = _text("post_type")
        sort_by = _text("sort_by")
        return {
            "post_type": PostType(post_type) if post_type in PostType.values() else None,
            "author_id": _text("author"),
            "city": _text("city"),
            "sort_by": sort_by if sort_by in SortOrder.values() else SortOrder.NEWEST.value,
            "search": _text("search"),
        }

    def collect(self, filters: Optional[Dict[str, Any]] = None) -> List[Post]:
        """Active posts matching ``filters``, sorted; no hydration."""
        criteria = self._normalize_filters(filters)
        posts = self.post_repository.find(
            post_type=criteria["post_type"],
            author_id=criteria["author_id"],
            city=criteria["city"],
        )
        posts = [post for post in posts if matches_search(post, criteria["search"])]
        return sort_posts(posts, criteria["sort_by"])

    def query_feed(self, filters: Optional[Dict[str, Any]] = None,
                   page: Optional[int] = None, limit: Optional[int] = None) -> ServiceResult:
        try:
            posts = self.collect(filters)
            data: Dict[str, Any] = {}
            if page is not None or limit is not None:
                posts, data["pagination"] = paginate(posts, page or 1, limit or DEFAULT_PAGE_SIZE)
            data["posts"] = self.serialize(posts)
            return ServiceResult.ok("Posts retrieved successfully", data)
        except CityScopeError as e:
            return ServiceResult.fail(e)
        except Exception:
            return ServiceResult.internal(f"Feed query failed (filters: {filters})")

    def home_feed(self, user_id: str, filters: Optional[Dict[str, Any]] = None,
                  page: Optional[int] = None, limit: Optional[int] = None) -> ServiceResult:
        """The caller's city is the default city filter unless the caller supplied one."""
        try:
            user = self.user_repository.get(user_id)
            if not user:
                raise NotFoundError("User not found")
            if not user.is_active:
                raise ForbiddenError("Account is deactivated")

            filters = dict(filters or {})
            if not (filters.get("city") or "").strip():
                filters["city"] = user.city
            return self.query_feed(filters, page=page, limit=limit)
        except CityScopeError as e:
            return ServiceResult.fail(e)
        except Exception:
            return ServiceResult.internal(f"Home feed failed (user_id: {user_id})")
