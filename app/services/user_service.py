from sqlalchemy.orm import Session

from app.data.database import transaction
from app.data.models.user import UserModel
from app.domain.errors import NotFoundError, ValidationError
from app.domain.schemas import UserCreate, UserRead
from app.repos.user_repo import UserRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        with transaction(self.db):
            if self.repo.get_by_email(payload.email):
                raise ValidationError("Uzytkownik z tym adresem email juz istnieje")
            if self.repo.get_by_phone(payload.phone):
                raise ValidationError("Uzytkownik z tym numerem telefonu juz istnieje")

            user = UserModel(
                name=payload.name.strip(),
                email=payload.email,
                phone=payload.phone.strip(),
                role=payload.role.value,
            )
            created = self.repo.create_user(user)

        logger.info(f"User {created.id} created with role {created.role}")
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("Uzytkownik nie istnieje")
        return UserRead.model_validate(user)

    def list_users(self) -> list[UserRead]:
        return [UserRead.model_validate(u) for u in self.repo.list_users()]
