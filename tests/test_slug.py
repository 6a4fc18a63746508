from app.utils.slug import make_unique_slug, slugify


def test_slugify_collapses_non_alphanumerics():
    assert slugify("Koszulka Domowa 2024!") == "koszulka-domowa-2024"
    assert slugify("  --Hello,   World--  ") == "hello-world"


def test_slugify_transliterates_accents():
    assert slugify("Café Crème") == "cafe-creme"


def test_make_unique_slug_picks_first_free_candidate():
    taken = {"news", "news-1"}
    assert make_unique_slug("news", taken.__contains__) == "news-2"
    assert make_unique_slug("fresh", taken.__contains__) == "fresh"
