from datetime import datetime, timedelta, timezone

import pytest

from projectchat.database.daos import ChatDao, ProjectDao, UserDao, verify_password
from projectchat.database.entities import ChatTurn
from projectchat.errors import PersistenceError

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _turn(project, user, i):
    return ChatTurn(
        project_id=project.id,
        user_id=user.id,
        message=f"message {i}",
        response=f"response {i}",
        tokens=i,
        model="gpt-3.5-turbo",
        created_at=BASE_TIME + timedelta(seconds=i),
        updated_at=BASE_TIME + timedelta(seconds=i),
    )


def test_history_returns_latest_fifty_in_ascending_order(db, seed_user, seed_project):
    alice = seed_user("alice", "alice@example.com")
    bob = seed_user("bob", "bob@example.com")
    mine = seed_project(alice)
    theirs = seed_project(bob)
    db.add_all([_turn(mine, alice, i) for i in range(60)])
    db.add_all([_turn(theirs, bob, i) for i in range(5)])
    db.commit()

    rows = ChatDao(db).query_by_project_and_owner(mine.id, alice.id)

    assert len(rows) == 50
    assert [r.message for r in rows] == [f"message {i}" for i in range(10, 60)]
    assert all(a.created_at <= b.created_at for a, b in zip(rows, rows[1:]))
    assert all(r.project_id == mine.id and r.user_id == alice.id for r in rows)


def test_history_is_empty_for_foreign_project(db, seed_user, seed_project):
    alice = seed_user("alice", "alice@example.com")
    bob = seed_user("bob", "bob@example.com")
    theirs = seed_project(bob)
    db.add(_turn(theirs, bob, 1))
    db.commit()

    assert ChatDao(db).query_by_project_and_owner(theirs.id, alice.id) == []


def test_inserted_turn_reads_back_unchanged(db, seed_user, seed_project):
    alice = seed_user()
    project = seed_project(alice)
    turn = ChatTurn(
        project_id=project.id,
        user_id=alice.id,
        message="hello",
        response="hi there",
        role="user",
        tokens=17,
        model="gpt-3.5-turbo",
    )

    saved = ChatDao(db).insert(turn)
    db.expunge_all()
    (loaded,) = ChatDao(db).query_by_project_and_owner(project.id, alice.id)

    assert loaded.id == saved.id
    for field in ("project_id", "user_id", "message", "response", "role", "tokens", "model"):
        assert getattr(loaded, field) == getattr(turn, field)
    assert loaded.created_at is not None


def test_history_expand_loads_project_and_user(db, seed_user, seed_project):
    alice = seed_user()
    project = seed_project(alice, name="Travel plans")
    ChatDao(db).insert(_turn(project, alice, 1))
    db.expunge_all()

    (row,) = ChatDao(db).query_by_project_and_owner(project.id, alice.id, expand=True)

    assert row.project.name == "Travel plans"
    assert row.user.username == alice.username


@pytest.mark.parametrize("field,value", [("role", "system"), ("tokens", -1)])
def test_rejected_write_raises_persistence_error(db, seed_user, seed_project, field, value):
    alice = seed_user()
    project = seed_project(alice)
    turn = _turn(project, alice, 1)
    setattr(turn, field, value)

    with pytest.raises(PersistenceError):
        ChatDao(db).insert(turn)
    assert ChatDao(db).query_by_project_and_owner(project.id, alice.id) == []


def test_find_owned_filters_by_owner(db, seed_user, seed_project):
    alice = seed_user("alice", "alice@example.com")
    bob = seed_user("bob", "bob@example.com")
    project = seed_project(alice)
    projects = ProjectDao(db)

    assert projects.find_owned(project.id, alice.id).id == project.id
    assert projects.find_owned(project.id, bob.id) is None
    assert projects.find_owned("missing", alice.id) is None


def test_deleting_project_removes_its_turns(db, seed_user, seed_project):
    alice = seed_user()
    project = seed_project(alice)
    ChatDao(db).insert(_turn(project, alice, 1))

    ProjectDao(db).delete_project(project)

    assert ChatDao(db).query_by_project_and_owner(project.id, alice.id) == []


def test_user_password_is_hashed(db):
    user = UserDao(db).create_user("carol", "carol@example.com", "hunter22")

    assert user.password != "hunter22"
    assert verify_password("hunter22", user.password)
    assert not verify_password("wrong", user.password)
    assert UserDao(db).get_by_email("carol@example.com").id == user.id
