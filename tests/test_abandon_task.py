from datetime import datetime, timedelta, timezone

from app.data.models import CartModel
from app.tasks.abandon import abandon_stale_carts


def test_stale_active_carts_are_abandoned(session, users):
    now = datetime.now(timezone.utc)
    stale = CartModel(user_id=users["alice"].id, status="active", updated_at=now - timedelta(days=8))
    fresh = CartModel(user_id=users["bob"].id, status="active", updated_at=now - timedelta(hours=1))
    done = CartModel(user_id=users["admin"].id, status="completed", updated_at=now - timedelta(days=30))
    session.add_all([stale, fresh, done])
    session.commit()

    assert abandon_stale_carts(session, idle_seconds=7 * 24 * 3600, now=now) == 1

    session.refresh(stale)
    session.refresh(fresh)
    session.refresh(done)
    assert stale.status == "abandoned"
    assert fresh.status == "active"
    assert done.status == "completed"
