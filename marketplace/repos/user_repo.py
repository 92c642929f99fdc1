from sqlalchemy import select, update
from sqlalchemy.orm import Session

from marketplace.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel)
            .where(UserModel.email == email)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.flush()
        return user

    def update_password(self, email: str, password_hash: str) -> int:
        result = self.db.execute(
            update(UserModel)
            .where(UserModel.email == email)
            .values(password=password_hash)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
