# cityscope/repositories/post.py
import logging
from typing import Optional, List, Callable, Tuple, Any

from firebase_admin import firestore

from cityscope.models.post import Post, PostType
from cityscope.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)


class PostRepository:
    """
    Firestore persistence for posts. Replies are embedded in the post document,
    so every engagement change is a single-document write.
    """

    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.posts_ref = self.db.collection('posts')

    @staticmethod
    def _to_document(post: Post) -> dict:
        post.enforce_reaction_exclusivity()
        return DateTimeUtils.for_firestore(post.to_dict())

    @staticmethod
    def _from_snapshot(snapshot) -> Post:
        return Post.from_dict(DateTimeUtils.from_firestore(snapshot.to_dict()))

    def get(self, post_id: str) -> Optional[Post]:
        doc = self.posts_ref.document(post_id).get()
        if not doc.exists:
            return None
        return self._from_snapshot(doc)

    def create(self, post: Post) -> Post:
        self.posts_ref.document(post.post_id).set(self._to_document(post))
        return post

    def mutate(self, post_id: str, mutator: Callable[[Post], Any]) -> Tuple[Optional[Post], Any]:
        """
        Reads the post, applies ``mutator`` and writes it back inside one
        transaction. Returns ``(post, mutator_result)``, or ``(None, None)``
        if the post does not exist. Exceptions from ``mutator`` abort the
        transaction and propagate.
        """
        transaction = self.db.transaction()
        post_ref = self.posts_ref.document(post_id)

        @firestore.transactional
        def _mutate_in_transaction(transaction):
            snapshot = post_ref.get(transaction=transaction)
            if not snapshot.exists:
                return None, None
            post = self._from_snapshot(snapshot)
            outcome = mutator(post)
            post.touch()
            transaction.set(post_ref, self._to_document(post))
            return post, outcome

        return _mutate_in_transaction(transaction)

    def find(self, post_type: Optional[PostType] = None, author_id: Optional[str] = None,
             city: Optional[str] = None) -> List[Post]:
        """Active posts matching every given equality constraint, in no particular order."""
        query = self.posts_ref.where('is_active', '==', True)
        if post_type:
            query = query.where('post_type', '==', post_type.value)
        if author_id:
            query = query.where('author_id', '==', author_id)
        if city:
            query = query.where('city', '==', city)

        try:
            return [self._from_snapshot(doc) for doc in query.stream()]
        except Exception as e:
            logger.error(f"Failed to query posts: {e}", exc_info=True)
            raise

    def delete(self, post_id: str) -> None:
        self.posts_ref.document(post_id).delete()
