from sqlalchemy import select

from app.data.models.badge import BadgeModel
from app.repos.slugged_repo import SluggedRepo


class BadgeRepo(SluggedRepo):
    model = BadgeModel

    def get_by_name(self, name: str) -> BadgeModel | None:
        return self.db.execute(select(BadgeModel).where(BadgeModel.name == name)).scalar_one_or_none()

    def list_badges(self) -> list[BadgeModel]:
        return list(self.db.execute(select(BadgeModel).order_by(BadgeModel.name)).scalars())
