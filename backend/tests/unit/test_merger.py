"""Tests for record reconciliation."""
from zxsgit.constants import ADMIN_EMAIL, UserRole
from zxsgit.models import User
from zxsgit.models.user import seed_admin
from zxsgit.services.merger import dedupe_users, merge_records, merge_users, upsert_users
from zxsgit.utils.hashing import hash_password


def make_user(email, created_at, **fields):
    return User(email=email, name=fields.pop("name", email.split("@")[0]), createdAt=created_at, **fields)


def test_remote_wins_on_shared_email():
    remote = [make_user("ana@example.com", 10, name="Remote Ana")]
    local = [make_user("ANA@example.com", 5, name="Local Ana")]

    merged = merge_users(remote, local)

    assert len(merged) == 1
    assert merged[0].name == "Remote Ana"
    assert merged[0].id == remote[0].id


def test_remote_wins_on_shared_id():
    remote_user = make_user("ana@example.com", 10)
    local_copy = remote_user.model_copy(update={"email": "other@example.com", "name": "Stale"})

    merged = merge_users([remote_user], [local_copy])

    assert [u.name for u in merged] == [remote_user.name]


def test_output_sorted_by_created_at_with_stable_ties():
    a = make_user("a@example.com", 30)
    b = make_user("b@example.com", 10)
    c = make_user("c@example.com", 10)
    d = make_user("d@example.com", 20)

    merged = merge_users([a, b], [c, d])

    assert [u.email for u in merged] == ["b@example.com", "c@example.com", "d@example.com", "a@example.com"]


def test_merge_is_idempotent():
    users = [make_user("a@example.com", 3), make_user("b@example.com", 1), make_user("c@example.com", 2)]

    assert merge_users(users, users) == merge_users(users, [])
    once = merge_users(users, [])
    assert merge_users(once, once) == once


def test_single_admin_when_both_stores_seeded():
    remote_admin = seed_admin()
    local_admin = seed_admin()
    local_admin = local_admin.model_copy(update={"role": UserRole.MEMBER})

    merged = merge_users([remote_admin], [local_admin, make_user("x@example.com", 1)])

    admins = [u for u in merged if u.email == ADMIN_EMAIL]
    assert len(admins) == 1
    assert admins[0].role == UserRole.ADMIN
    assert admins[0].id == remote_admin.id


def test_dedupe_collapses_duplicate_emails():
    first = make_user("dup@example.com", 1, name="First")
    second = make_user("Dup@Example.com", 2, name="Second")

    assert [u.name for u in dedupe_users([first, second])] == ["First"]


def test_merge_records_without_natural_key_uses_ids():
    class Record:
        def __init__(self, id, createdAt):
            self.id = id
            self.createdAt = createdAt

    merged = merge_records([Record("1", 2)], [Record("1", 1), Record("2", 0)])

    assert [(r.id, r.createdAt) for r in merged] == [("2", 0), ("1", 2)]


def test_upsert_overlays_matching_email_and_keeps_id():
    stored = make_user("ana@example.com", 1, name="Ana")
    incoming = User(email="ANA@example.com", name="Ana Maria", password="secret")

    merged = upsert_users([stored], [incoming])

    ana = next(u for u in merged if u.email == "ana@example.com")
    assert ana.id == stored.id
    assert ana.name == "Ana Maria"
    assert ana.passwordHash == hash_password("secret")
    assert "password" not in ana.model_dump()


def test_upsert_appends_new_and_seeds_admin():
    merged = upsert_users([], [User(email="new@example.com", name="New")])

    emails = [u.email for u in merged]
    assert "new@example.com" in emails
    assert emails.count(ADMIN_EMAIL) == 1


def test_upsert_cannot_demote_admin():
    admin = seed_admin()
    incoming = User(email=ADMIN_EMAIL, name="Boss", role=UserRole.MEMBER)

    merged = upsert_users([admin], [incoming])

    assert len(merged) == 1
    assert merged[0].role == UserRole.ADMIN
    assert merged[0].name == "Boss"
    assert merged[0].passwordHash == admin.passwordHash
