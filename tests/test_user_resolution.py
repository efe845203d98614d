import uuid

import pytest
from sqlalchemy import false
from sqlalchemy.exc import IntegrityError

from carrental.models.user import User
from carrental.services.user_service import resolve_user


def _user(db, whatsapp_id, phone, name="Kofi"):
    u = User(id=str(uuid.uuid4()), whatsapp_id=whatsapp_id, phone=phone, name=name)
    db.add(u)
    db.commit()
    return u


def test_creates_user_keyed_by_phone_without_session(db):
    u = resolve_user(db, phone="+233200000001", name="Kofi", email="kofi@example.com")
    db.commit()
    assert u.whatsapp_id == "+233200000001"
    assert u.email == "kofi@example.com"


def test_same_session_twice_is_one_user(db):
    a = resolve_user(db, phone="+233200000001", name="Kofi", session_id="wa-1")
    db.commit()
    b = resolve_user(db, phone="+233200000001", name="Kofi Boateng", session_id="wa-1")
    db.commit()
    assert a.id == b.id
    assert db.query(User).count() == 1
    assert b.name == "Kofi Boateng"


def test_phone_match_is_adopted_and_rekeyed(db):
    existing = _user(db, whatsapp_id="wa-old", phone="+233200000001")
    u = resolve_user(db, phone="+233200000001", name="Kofi", email="k@example.com", session_id="wa-new")
    db.commit()
    assert u.id == existing.id
    assert u.whatsapp_id == "wa-new"
    assert u.email == "k@example.com"
    assert db.query(User).count() == 1


def test_blank_fields_do_not_overwrite(db):
    _user(db, whatsapp_id="wa-1", phone="+233200000001", name="Kofi")
    u = resolve_user(db, phone="+233200000001", name="", email=None, session_id="wa-1")
    assert u.name == "Kofi"


def test_concurrent_insert_is_reread(db, monkeypatch):
    existing = _user(db, whatsapp_id="wa-race", phone="+233200000009")
    real_query = db.query
    calls = {"n": 0}

    def query(*args, **kwargs):
        # both lookups miss, as if the other request had not committed yet
        calls["n"] += 1
        q = real_query(*args, **kwargs)
        return q.filter(false()) if calls["n"] <= 2 else q

    monkeypatch.setattr(db, "query", query)
    u = resolve_user(db, phone="+233200000009", name="Kofi", session_id="wa-race")
    assert u.id == existing.id
    monkeypatch.undo()
    db.commit()
    assert db.query(User).count() == 1


def test_integrity_error_without_winner_propagates(db, monkeypatch):
    _user(db, whatsapp_id="wa-a", phone="+233200000001")
    real_query = db.query
    monkeypatch.setattr(db, "query", lambda *a, **kw: real_query(*a, **kw).filter(false()))
    with pytest.raises(IntegrityError):
        # insert collides on whatsapp_id, and the re-read still sees nothing
        resolve_user(db, phone="+233200000002", name="Esi", session_id="wa-a")
