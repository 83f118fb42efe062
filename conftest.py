# conftest.py
"""
Shared pytest fixtures.

The Firestore repositories are replaced by in-memory implementations of the
same interface so the services and routes can be exercised without Firebase.
"""
import copy
import uuid
from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token

from cityscope import create_app
from cityscope.api.auth.services import AuthService
from cityscope.api.posts.feed import FeedService
from cityscope.api.posts.services import PostService
from cityscope.api.profile.services import ProfileService
from cityscope.core.errors import ConflictError
from cityscope.models.post import Post
from cityscope.models.user import User
from cityscope.utils.datetime_utils import DateTimeUtils


class InMemoryPostRepository:
    def __init__(self):
        self.documents = {}

    def _write(self, post):
        post.enforce_reaction_exclusivity()
        self.documents[post.post_id] = copy.deepcopy(post)

    def get(self, post_id):
        post = self.documents.get(post_id)
        return copy.deepcopy(post) if post else None

    def create(self, post):
        self._write(post)
        return post

    def mutate(self, post_id, mutator):
        post = self.get(post_id)
        if post is None:
            return None, None
        outcome = mutator(post)
        post.touch()
        self._write(post)
        return post, outcome

    def find(self, post_type=None, author_id=None, city=None):
        return [
            copy.deepcopy(post) for post in self.documents.values()
            if post.is_active
            and (post_type is None or post.post_type == post_type)
            and (author_id is None or post.author_id == author_id)
            and (city is None or post.city == city)
        ]

    def delete(self, post_id):
        self.documents.pop(post_id, None)


class InMemoryUserRepository:
    def __init__(self):
        self.documents = {}
        self.fail_increments = False

    def get(self, user_id):
        user = self.documents.get(user_id)
        return copy.deepcopy(user) if user else None

    def get_by_email(self, email):
        email = email.strip().lower()
        return next((copy.deepcopy(u) for u in self.documents.values() if u.email == email), None)

    def get_many(self, user_ids):
        return {uid: copy.deepcopy(self.documents[uid]) for uid in set(user_ids) if uid in self.documents}

    def create(self, user):
        user.email = user.email.strip().lower()
        if any(u.email == user.email for u in self.documents.values()):
            raise ConflictError("Email already exists")
        self.documents[user.user_id] = copy.deepcopy(user)
        return user

    def update(self, user_id, fields):
        user = self.documents.get(user_id)
        if user is None:
            return None
        for key, value in fields.items():
            if key != 'password_hash':
                setattr(user, key, value)
        user.updated_at = DateTimeUtils.now()
        return copy.deepcopy(user)

    def increment_posts_count(self, user_id, amount=1):
        if self.fail_increments:
            raise RuntimeError("counter write failed")
        user = self.documents.get(user_id)
        if user is not None:
            user.posts_count = max(0, user.posts_count + amount)


class FakeStorageService:
    def __init__(self):
        self.uploaded = []
        self.deleted = []

    def upload_image(self, data, filename, content_type, user_id):
        url = f"https://storage.example.com/posts/{user_id}/{uuid.uuid4()}.{filename.rsplit('.', 1)[-1]}"
        self.uploaded.append(url)
        return url

    def delete_image(self, url):
        self.deleted.append(url)
        return True


@pytest.fixture
def post_repository():
    return InMemoryPostRepository()


@pytest.fixture
def user_repository():
    return InMemoryUserRepository()


@pytest.fixture
def storage_service():
    return FakeStorageService()


@pytest.fixture
def feed_service(post_repository, user_repository):
    return FeedService(post_repository, user_repository)


@pytest.fixture
def post_service(post_repository, user_repository, feed_service, storage_service):
    return PostService(post_repository, user_repository, feed_service=feed_service,
                       storage_service=storage_service)


@pytest.fixture
def make_user(user_repository):
    def _make_user(city="Austin", is_active=True, email=None, **fields):
        user = User(
            user_id=str(uuid.uuid4()),
            email=email or f"{uuid.uuid4().hex[:8]}@example.com",
            password_hash="",
            first_name=fields.pop("first_name", "Test"),
            last_name=fields.pop("last_name", "User"),
            city=city,
            is_active=is_active,
            **fields
        )
        user_repository.create(user)
        return user
    return _make_user


@pytest.fixture
def make_post(post_repository):
    """Stores a post directly, bypassing the service (no counter side effect)."""
    def _make_post(author, content="Hello city", post_type="update", city=None,
                   minutes_ago=0, likes=None, is_active=True):
        post = Post.new(author.user_id, content, post_type, city or author.city)
        post.created_at = DateTimeUtils.now() - timedelta(minutes=minutes_ago)
        post.likes = list(likes or [])
        post.is_active = is_active
        post_repository.create(post)
        return post
    return _make_post


@pytest.fixture
def app(post_repository, user_repository, storage_service, feed_service, post_service):
    services = {
        'storage': storage_service,
        'auth': AuthService(user_repository),
        'profiles': ProfileService(user_repository),
        'feed': feed_service,
        'posts': post_service,
    }
    return create_app('testing', services=services)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        with app.app_context():
            token = create_access_token(identity=user.user_id)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers
