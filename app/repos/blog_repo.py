from app.data.models.blog import BlogModel
from app.repos.slugged_repo import SluggedRepo


class BlogRepo(SluggedRepo):
    model = BlogModel

    def list_active(self, search: str | None, offset: int, limit: int):
        return self.search(
            [BlogModel.title, BlogModel.excerpt],
            search,
            offset,
            limit,
            BlogModel.is_active.is_(True),
        )
