import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import (
    AuthenticationError,
    ConflictError,
    InfrastructureError,
    NotFoundError,
    ValidationError,
)
from ..extensions import db
from ..models import User
from ..security.passwords import PasswordHasher
from ..security.tokens import TokenService

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
MIN_ACCOUNT_ID_LENGTH = 3
MAX_ACCOUNT_ID_LENGTH = 20
MAX_NAME_LENGTH = 100


class LoginResult:
    def __init__(self, user, token):
        self.user = user
        self.token = token

    def serialize(self):
        return {"token": self.token, "user": self.user.serialize()}


class AuthService:
    """Registration, login and user lookups.

    The password hasher and token service are injected so tests can swap
    them for doubles.
    """

    def __init__(self, password_hasher=None, token_service=None):
        self.password_hasher = password_hasher or PasswordHasher()
        self.token_service = token_service or TokenService()

    def login(self, account_id, password):
        user = User.query.filter_by(account_id=account_id).first()
        # unknown account and wrong password must be indistinguishable
        if user is None or not self.password_hasher.verify(password, user.password_hash):
            logger.info("Login failed for account %r", account_id)
            raise AuthenticationError("invalid_credentials", code="INVALID_CREDENTIALS")

        return LoginResult(user, self.issue_token(user))

    def issue_token(self, user):
        try:
            return self.token_service.issue(user.id)
        except Exception as e:
            logger.error("Token generation failed for user %s: %s", user.id, e)
            raise InfrastructureError("token_generation_failed", code="TOKEN_GENERATION_FAILED") from e

    def register(self, name, account_id, password):
        name = (name or "").strip()
        account_id = account_id or ""
        password = password or ""

        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError("password_too_short", code="PASSWORD_TOO_SHORT")
        if not MIN_ACCOUNT_ID_LENGTH <= len(account_id) <= MAX_ACCOUNT_ID_LENGTH:
            raise ValidationError("account_id_length", code="INVALID_ACCOUNT_ID")
        if not name or len(name) > MAX_NAME_LENGTH:
            raise ValidationError("name_required", code="INVALID_NAME")

        if User.query.filter_by(account_id=account_id).first() is not None:
            raise ConflictError("account_id_taken", code="ACCOUNT_ID_TAKEN")

        try:
            password_hash = self.password_hasher.hash(password)
        except Exception as e:
            logger.error("Password hashing failed: %s", e)
            raise InfrastructureError("password_processing_failed", code="PASSWORD_PROCESSING_FAILED") from e

        user = User(name=name, account_id=account_id, password_hash=password_hash)
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError as e:
            # lost a race with a concurrent registration of the same account id
            db.session.rollback()
            raise ConflictError("account_id_taken", code="ACCOUNT_ID_TAKEN") from e
        except SQLAlchemyError as e:
            db.session.rollback()
            raise InfrastructureError("database_error", code="USER_CREATE_FAILED") from e

        logger.info("Registered user %s (%s)", user.id, account_id)
        return user

    def get_user_by_id(self, user_id):
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFoundError("user_not_found", code="USER_NOT_FOUND")
        return user

    def get_all_users(self):
        try:
            return User.query.order_by(User.id).all()
        except SQLAlchemyError as e:
            raise InfrastructureError("database_error", code="USER_LIST_FAILED") from e
