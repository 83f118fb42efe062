# cityscope/api/auth/services.py
import uuid
import logging

from cityscope.api.profile.schemas import UserResponseSchema
from cityscope.core.errors import CityScopeError, UnauthorizedError, ForbiddenError
from cityscope.core.results import ServiceResult
from cityscope.core.security import hash_password, verify_password
from cityscope.models.user import User

logger = logging.getLogger(__name__)


class AuthService:
    """
    Email/password authentication. An unseen email signs the user up;
    a known email logs in. Token issuance stays in the route, which owns
    the response cookie.
    """

    def __init__(self, user_repository):
        self.user_repository = user_repository
        self.user_schema = UserResponseSchema()

    def authenticate(self, email: str, password: str) -> ServiceResult:
        try:
            email = email.strip().lower()
            existing_user = self.user_repository.get_by_email(email)

            if existing_user:
                if not verify_password(existing_user.password_hash, password):
                    raise UnauthorizedError("Invalid credentials")
                if not existing_user.is_active:
                    raise ForbiddenError("Account is deactivated")
                return ServiceResult.ok("Login successful", {
                    "user": self.user_schema.dump(existing_user),
                    "is_new_user": False,
                })

            new_user = User(
                user_id=str(uuid.uuid4()),
                email=email,
                password_hash=hash_password(password),
            )
            self.user_repository.create(new_user)
            logger.info(f"Account created (user_id: {new_user.user_id})")
            return ServiceResult.ok("Account created successfully", {
                "user": self.user_schema.dump(new_user),
                "is_new_user": True,
            }, status_code=201)
        except CityScopeError as e:
            return ServiceResult.fail(e)
        except Exception:
            return ServiceResult.internal("Authentication failed")
