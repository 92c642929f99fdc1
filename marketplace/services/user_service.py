from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.data.models.user import UserModel
from marketplace.domain.errors import DuplicateEmailError, NotFoundError
from marketplace.domain.schemas import AccountForm, SignupForm, UserRead
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.security import hash_password, verify_password
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)

    def create_user(self, payload: SignupForm) -> UserRead:
        if self.repo.get_by_email(payload.email):
            raise DuplicateEmailError("Rejestracja nie powiodła się. Spróbuj innego adresu email.")

        user = UserModel(
            name=payload.name,
            email=payload.email,
            password=hash_password(payload.password),
            phone=payload.phone,
            address=payload.address,
        )
        try:
            created = self.repo.create_user(user)
            self.db.commit()
        except IntegrityError:
            #rownolegla rejestracja na ten sam email
            self.db.rollback()
            raise DuplicateEmailError("Rejestracja nie powiodła się. Spróbuj innego adresu email.")

        logger.info(f"Nowy uzytkownik {created.id}")
        return UserRead.model_validate(created)

    def authenticate(self, email: str, password: str) -> UserRead | None:
        user = self.repo.get_by_email(email)
        if not user or not verify_password(password, user.password):
            return None
        return UserRead.model_validate(user)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return UserRead.model_validate(user)

    def update_account(self, user_id: int, payload: AccountForm) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")

        user.name = payload.name
        user.email = payload.email
        user.phone = payload.phone
        user.address = payload.address
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateEmailError("Ten adres email jest już zajęty")

        return UserRead.model_validate(user)
