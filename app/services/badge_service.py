# app/services/badge_service.py
from sqlalchemy.orm import Session

from app.data.database import transaction
from app.data.models.badge import BadgeModel
from app.domain.errors import NotFoundError, ValidationError
from app.domain.schemas import BadgeIn, BadgeOut, BadgeUpdate
from app.repos.badge_repo import BadgeRepo
from app.utils.slug import make_unique_slug, slugify
from app.utils.logging import get_logger

logger = get_logger(__name__)


class BadgeService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = BadgeRepo(db)

    def list_badges(self) -> list[BadgeOut]:
        return [BadgeOut.model_validate(b) for b in self.repo.list_badges()]

    def get_badge(self, badge_id: int) -> BadgeOut:
        return BadgeOut.model_validate(self._get(badge_id))

    def create_badge(self, payload: BadgeIn) -> BadgeOut:
        name = payload.name.strip()
        with transaction(self.db):
            if self.repo.get_by_name(name):
                raise ValidationError("Odznaka o tej nazwie juz istnieje")
            badge = self.repo.add(
                BadgeModel(
                    name=name,
                    slug=self._slug_for(name),
                    icon=payload.icon,
                    description=payload.description,
                )
            )
        logger.info(f"Badge {badge.id} '{name}' created")
        return BadgeOut.model_validate(badge)

    def update_badge(self, badge_id: int, payload: BadgeUpdate) -> BadgeOut:
        changes = payload.model_dump(exclude_unset=True)
        with transaction(self.db):
            badge = self._get(badge_id)

            name = (changes.pop("name", None) or "").strip()
            if name and name != badge.name:
                other = self.repo.get_by_name(name)
                if other and other.id != badge.id:
                    raise ValidationError("Odznaka o tej nazwie juz istnieje")
                badge.name = name
                badge.slug = self._slug_for(name, exclude_id=badge.id)

            for field, value in changes.items():
                setattr(badge, field, value)
            self.db.flush()
        logger.info(f"Badge {badge_id} updated")
        return BadgeOut.model_validate(badge)

    def delete_badge(self, badge_id: int) -> None:
        with transaction(self.db):
            self.repo.delete(self._get(badge_id))
        logger.info(f"Badge {badge_id} deleted")

    def _get(self, badge_id: int) -> BadgeModel:
        badge = self.repo.get(badge_id)
        if not badge:
            raise NotFoundError("Odznaka nie istnieje")
        return badge

    def _slug_for(self, name: str, exclude_id: int | None = None) -> str:
        base = slugify(name) or "badge"
        return make_unique_slug(base, lambda s: self.repo.slug_exists(s, exclude_id))
