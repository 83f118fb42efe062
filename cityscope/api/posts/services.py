# cityscope/api/posts/services.py
import logging
import uuid
from typing import Optional, Dict, Any

from cityscope.api.posts.feed import FeedService
from cityscope.core.errors import CityScopeError, ValidationError, NotFoundError, ForbiddenError
from cityscope.core.results import ServiceResult
from cityscope.models.post import Post
from cityscope.models.user import User

logger = logging.getLogger(__name__)


def _require_id(value: str, label: str = "post") -> str:
    try:
        uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"Invalid {label} ID format")
    return str(value)


class PostService:
    """
    Post lifecycle and engagement: creation, like/dislike toggles, replies
    and deletion. Every public method answers with a ServiceResult.
    """

    def __init__(self, post_repository, user_repository, feed_service: Optional[FeedService] = None,
                 storage_service=None):
        self.post_repository = post_repository
        self.user_repository = user_repository
        self.feed_service = feed_service or FeedService(post_repository, user_repository)
        self.storage_service = storage_service

    def _require_active_user(self, user_id: str) -> User:
        if not user_id:
            raise ValidationError("User ID is required")
        user = self.user_repository.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        if not user.is_active:
            raise ForbiddenError("Account is deactivated")
        return user

    def _serialize(self, post: Post) -> Dict[str, Any]:
        return self.feed_service.serialize([post])[0]

    def create_post(self, user_id: str, content: str, post_type: str, city: Optional[str] = None,
                    image_url: Optional[str] = None) -> ServiceResult:
        """
        Creates a post and bumps the author's posts_count.

        The post write and the counter update are separate writes; if the
        counter update fails the post still stands and the failure is logged.
        """
        try:
            author = self._require_active_user(user_id)
            post = Post.new(
                author_id=user_id,
                content=content,
                post_type=post_type,
                city=city if city and city.strip() else author.city,
                image=image_url,
            )
            self.post_repository.create(post)
            logger.info(f"Post created (post_id: {post.post_id}, author: {user_id})")

            try:
                self.user_repository.increment_posts_count(user_id, 1)
            except Exception as e:
                logger.error(f"posts_count increment failed (user_id: {user_id}, post_id: {post.post_id}): {e}",
                             exc_info=True)

            return ServiceResult.ok("Post created successfully", {"post": self._serialize(post)}, status_code=201)
        except CityScopeError as e:
            return ServiceResult.fail(e)
        except Exception:
            return ServiceResult.internal(f"Post creation failed (user_id: {user_id})")

    def _toggle(self, post_id: str, user_id: str, dislike: bool) -> ServiceResult:
        on_state, off_state = ("disliked", "undisliked") if dislike else ("liked", "unliked")
        try:
            post_id = _require_id(post_id)
            if not user_id:
                raise ValidationError("User ID is required")

            def _apply(post: Post) -> bool:
                return post.toggle_dislike(user_id) if dislike else post.toggle_like(user_id)

            post, is_on = self.post_repository.mutate(post_id, _apply)
            if post is None:
                raise NotFoundError("Post not found")

            state = on_state if is_on else off_state
            logger.info(f"Post {state} (post_id: {post_id}, user_id: {user_id})")
            return ServiceResult.ok(f"Post {state} successfully", {
                "post": self._serialize(post),
                "state": state,
            })
        except CityScopeError as e:
            return ServiceResult.fail(e)
        except Exception:
            return ServiceResult.internal(f"Toggle {on_state} failed (post_id: {post_id}, user_id: {user_id})")

    def toggle_like(self, post_id: str, user_id: str) -> ServiceResult:
        return self._toggle(post_id, user_id, dislike=False)

    def toggle_dislike(self, post_id: str, user_id: str) -> ServiceResult:
        return self._toggle(post_id, user_id, dislike=True)

    def get_post(self, post_id: str) -> ServiceResult:
        try:
            post = self.post_repository.get(_require_id(post_id))
            if post is None or not post.is_active:
                raise NotFoundError("Post not found")
            return ServiceResult.ok("Post retrieved successfully", {"post": self._serialize(post)})
        except CityScopeError as e:
            return ServiceResult.fail(e)
        except Exception:
            return ServiceResult.internal(f"Post lookup failed (post_id: {post_id})")

    def add_reply(self, post_id: str, user_id: str, content: str) -> ServiceResult:
        try:
            post_id = _require_id(post_id)
            self._require_active_user(user_id)

            def _append(post: Post):
                if not post.is_active:
                    raise NotFoundError("Post not found")
                return post.add_reply(user_id, content)

            post, reply = self.post_repository.mutate(post_id, _append)
            if post is None:
                raise NotFoundError("Post not found")

            return ServiceResult.ok("Reply added successfully", {
                "reply_id": reply.reply_id,
                "post": self._serialize(post),
            }, status_code=201)
        except CityScopeError as e:
            return ServiceResult.fail(e)
        except Exception:
            return ServiceResult.internal(f"Adding reply failed (post_id: {post_id})")

    def remove_reply(self, post_id: str, reply_id: str, user_id: str) -> ServiceResult:
        """Any authenticated user may remove a reply; an unknown reply is a no-op."""
        try:
            post_id = _require_id(post_id)
            post = self.post_repository.get(post_id)
            if post is None or not post.is_active:
                raise NotFoundError("Post not found")

            if post.find_reply(reply_id) is not None:
                def _remove(current: Post) -> bool:
                    if not current.is_active:
                        raise NotFoundError("Post not found")
                    return current.remove_reply(reply_id)

                updated, _ = self.post_repository.mutate(post_id, _remove)
                if updated is None:
                    raise NotFoundError("Post not found")
                post = updated
                logger.info(f"Reply removed (post_id: {post_id}, reply_id: {reply_id}, by: {user_id})")

            return ServiceResult.ok("Reply removed successfully", {"post": self._serialize(post)})
        except CityScopeError as e:
            return ServiceResult.fail(e)
        except Exception:
            return ServiceResult.internal(f"Removing reply failed (post_id: {post_id}, reply_id: {reply_id})")

    def delete_post(self, post_id: str, user_id: str) -> ServiceResult:
        """Hard-deletes a post owned by ``user_id`` and decrements the owner's posts_count."""
        try:
            post_id = _require_id(post_id)
            post = self.post_repository.get(post_id)
            if post is None:
                raise NotFoundError("Post not found")
            if post.author_id != user_id:
                raise ForbiddenError("Only the author can delete this post")

            self.post_repository.delete(post_id)
            logger.info(f"Post deleted (post_id: {post_id}, author: {user_id})")

            try:
                self.user_repository.increment_posts_count(post.author_id, -1)
            except Exception as e:
                logger.error(f"posts_count decrement failed (user_id: {user_id}, post_id: {post_id}): {e}",
                             exc_info=True)

            if post.image and self.storage_service:
                try:
                    self.storage_service.delete_image(post.image)
                except Exception as e:
                    logger.error(f"Storage image delete failed (url: {post.image}): {e}")

            return ServiceResult.ok("Post deleted successfully", {"post_id": post_id})
        except CityScopeError as e:
            return ServiceResult.fail(e)
        except Exception:
            return ServiceResult.internal(f"Post deletion failed (post_id: {post_id})")
