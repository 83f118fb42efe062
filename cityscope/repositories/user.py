# cityscope/repositories/user.py
import logging
from typing import Optional, Dict, Any, Iterable

from firebase_admin import firestore

from cityscope.core.errors import ConflictError
from cityscope.models.user import User
from cityscope.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.users_ref = self.db.collection('users')

    @staticmethod
    def _from_snapshot(snapshot) -> User:
        return User.from_dict(DateTimeUtils.from_firestore(snapshot.to_dict()))

    def get(self, user_id: str) -> Optional[User]:
        """Retrieves a user by document id."""
        doc = self.users_ref.document(user_id).get()
        if not doc.exists:
            return None
        return self._from_snapshot(doc)

    def get_by_email(self, email: str) -> Optional[User]:
        """Retrieves a user by their unique (lower-cased) email."""
        query = self.users_ref.where('email', '==', email.strip().lower()).limit(1).stream()
        user_doc = next(query, None)
        return self._from_snapshot(user_doc) if user_doc else None

    def get_many(self, user_ids: Iterable[str]) -> Dict[str, User]:
        """Batched lookup used by read-time hydration; unknown ids are simply absent."""
        refs = [self.users_ref.document(uid) for uid in set(user_ids) if uid]
        if not refs:
            return {}
        return {doc.id: self._from_snapshot(doc) for doc in self.db.get_all(refs) if doc.exists}

    def create(self, user: User) -> User:
        """Stores a new user; the email check and the write share one transaction."""
        user.email = user.email.strip().lower()
        transaction = self.db.transaction()
        user_ref = self.users_ref.document(user.user_id)
        email_query = self.users_ref.where('email', '==', user.email).limit(1)

        @firestore.transactional
        def _create_in_transaction(transaction):
            if any(True for _ in transaction.get(email_query)):
                raise ConflictError("Email already exists")
            transaction.set(user_ref, DateTimeUtils.for_firestore(user.to_dict()))

        _create_in_transaction(transaction)
        return user

    def update(self, user_id: str, fields: Dict[str, Any]) -> Optional[User]:
        user_ref = self.users_ref.document(user_id)
        if not user_ref.get().exists:
            return None
        fields = dict(fields, updated_at=DateTimeUtils.now())
        fields.pop('password_hash', None)
        user_ref.update(DateTimeUtils.for_firestore(fields))
        return self.get(user_id)

    def increment_posts_count(self, user_id: str, amount: int = 1) -> None:
        """Adjusts the denormalized post counter. Decrements never go below zero."""
        user_ref = self.users_ref.document(user_id)
        if amount >= 0:
            user_ref.update({'posts_count': firestore.Increment(amount)})
            return

        transaction = self.db.transaction()

        @firestore.transactional
        def _decrement_in_transaction(transaction):
            snapshot = user_ref.get(transaction=transaction)
            if not snapshot.exists:
                return
            current = snapshot.to_dict().get('posts_count', 0)
            transaction.update(user_ref, {'posts_count': max(0, current + amount)})

        _decrement_in_transaction(transaction)
