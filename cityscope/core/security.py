from flask_bcrypt import Bcrypt
from flask_jwt_extended import JWTManager

from cityscope.core.errors import UnauthorizedError
from cityscope.core.results import ServiceResult

bcrypt = Bcrypt()
jwt_manager = JWTManager()


def hash_password(password: str) -> str:
    return bcrypt.generate_password_hash(password).decode('utf-8')


def verify_password(password_hash: str, candidate: str) -> bool:
    if not password_hash:
        return False
    return bcrypt.check_password_hash(password_hash, candidate)


# --- flask-jwt-extended answers in the same envelope as every other endpoint ---
@jwt_manager.unauthorized_loader
def _missing_token(reason: str):
    return ServiceResult.fail(UnauthorizedError("Access token required"), details={"reason": reason}).to_response()


@jwt_manager.invalid_token_loader
def _invalid_token(reason: str):
    return ServiceResult.fail(UnauthorizedError("Invalid or expired token"), details={"reason": reason}).to_response()


@jwt_manager.expired_token_loader
def _expired_token(jwt_header, jwt_payload):
    return ServiceResult.fail(UnauthorizedError("Invalid or expired token")).to_response()
