# app/repos/slugged_repo.py
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session


class SluggedRepo:
    """
    Wspolne zapytania dla encji ze slugiem (kategorie, odznaki, blogi).
    Podklasa ustawia model.
    """

    model = None

    def __init__(self, db: Session):
        self.db = db

    def get(self, entity_id: int):
        return self.db.get(self.model, entity_id)

    def get_by_slug(self, slug: str):
        return self.db.execute(select(self.model).where(self.model.slug == slug)).scalar_one_or_none()

    def slug_exists(self, slug: str, exclude_id: int | None = None) -> bool:
        stmt = select(self.model.id).where(self.model.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        return self.db.execute(stmt.limit(1)).first() is not None

    def add(self, entity):
        self.db.add(entity)
        self.db.flush()
        return entity

    def delete(self, entity) -> None:
        self.db.delete(entity)
        self.db.flush()

    def search(self, columns, term: str | None, offset: int, limit: int, *filters):
        stmt = select(self.model).where(*filters)
        if term:
            like = f"%{term.lower()}%"
            stmt = stmt.where(or_(*[func.lower(c).like(like) for c in columns]))
        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        rows = self.db.execute(
            stmt.order_by(self.model.created_at.desc(), self.model.id.desc()).offset(offset).limit(limit)
        ).scalars()
        return list(rows), total
