# cityscope/api/profile/services.py
import logging
from typing import Dict, Any

from cityscope.api.profile.schemas import UserResponseSchema
from cityscope.core.errors import CityScopeError, NotFoundError, ForbiddenError, ValidationError
from cityscope.core.results import ServiceResult

logger = logging.getLogger(__name__)


class ProfileService:
    """Reads and updates the profile part of a user document."""

    def __init__(self, user_repository):
        self.user_repository = user_repository
        self.user_schema = UserResponseSchema()

    def _require_active(self, user_id: str):
        if not user_id:
            raise ValidationError("User ID is required")
        user = self.user_repository.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        if not user.is_active:
            raise ForbiddenError("Account is deactivated")
        return user

    def get_profile(self, user_id: str) -> ServiceResult:
        try:
            user = self._require_active(user_id)
            return ServiceResult.ok("Profile retrieved successfully", {"user": self.user_schema.dump(user)})
        except CityScopeError as e:
            return ServiceResult.fail(e)
        except Exception:
            return ServiceResult.internal(f"Profile lookup failed (user_id: {user_id})")

    def update_profile(self, user_id: str, profile_data: Dict[str, Any]) -> ServiceResult:
        """Updates names and city; bio is only replaced when supplied."""
        try:
            user = self._require_active(user_id)
            update_data = {
                "first_name": profile_data["first_name"],
                "last_name": profile_data["last_name"],
                "city": profile_data["city"],
                "bio": profile_data.get("bio", user.bio),
            }
            updated_user = self.user_repository.update(user_id, update_data)
            if not updated_user:
                raise NotFoundError("User not found")
            logger.info(f"Profile updated (user_id: {user_id})")
            return ServiceResult.ok("Profile updated successfully", {"user": self.user_schema.dump(updated_user)})
        except CityScopeError as e:
            return ServiceResult.fail(e)
        except Exception:
            return ServiceResult.internal(f"Profile update failed (user_id: {user_id})")
