"""Backup export and restore (validate before mutate)."""

import json

import backup
import notifications
import store
from models import Settings, Severity
from store import Collection
from conftest import make_student


def seed():
    store.add(Collection.STUDENTS, make_student("a"))
    store.save_settings(Settings().with_pricing(monthly_price=1800))
    notifications.append("Merhaba", "ilk", Severity.INFO)


def snapshot():
    return (
        [store.load(c) for c in Collection],
        store.load_settings(),
    )


def test_export_contains_all_collections_and_version(now):
    seed()
    doc = backup.export_all(now)

    assert set(doc) == {"students", "transactions", "settings", "messages", "notifications", "timestamp", "version"}
    assert doc["version"] == backup.BACKUP_VERSION
    assert doc["timestamp"] == "2026-03-10T09:30:00.000Z"
    assert doc["students"][0]["id"] == "a"
    assert doc["settings"]["pricing"]["monthlyPrice"] == 1800


def test_export_then_restore_reproduces_state(now):
    seed()
    text = backup.export_json(now)
    expected = snapshot()

    store.save_all(Collection.STUDENTS, [])
    store.save_settings(Settings())
    result = backup.restore_json(text)

    assert result.success
    assert snapshot() == expected


def test_restore_without_students_changes_nothing():
    seed()
    before = snapshot()

    result = backup.restore({"transactions": [], "settings": {}})

    assert result.success is False
    assert result.message == "Geçersiz yedek dosyası formatı."
    assert snapshot() == before


def test_restore_with_non_list_students_fails():
    seed()
    before = snapshot()
    assert backup.restore({"students": {"id": "x"}}).success is False
    assert snapshot() == before


def test_restore_with_malformed_record_changes_nothing():
    seed()
    before = snapshot()

    result = backup.restore({
        "students": [make_student("b").to_dict()],
        "transactions": [{"id": "t", "amount": "çok"}],
    })

    assert result.success is False
    assert snapshot() == before


def test_partial_document_leaves_absent_collections_untouched():
    seed()
    settings_before = store.load_settings()
    notes_before = store.load(Collection.NOTIFICATIONS)

    result = backup.restore({"students": [make_student("z").to_dict()]})

    assert result.success
    assert result.message == "Yedek başarıyla yüklendi."
    assert [s.id for s in store.load(Collection.STUDENTS)] == ["z"]
    assert store.load_settings() == settings_before
    assert store.load(Collection.NOTIFICATIONS) == notes_before


def test_restore_replaces_students_wholesale():
    store.add(Collection.STUDENTS, make_student("a"))
    store.add(Collection.STUDENTS, make_student("b"))
    backup.restore({"students": [make_student("c").to_dict()]})
    assert [s.id for s in store.load(Collection.STUDENTS)] == ["c"]


def test_restore_accepts_older_document_with_partial_settings():
    doc = {
        "students": [],
        "settings": {"netgsm": {"username": "u", "password": "p", "header": "H"}},
        "version": "1.1",
    }
    assert backup.restore(json.loads(json.dumps(doc))).success
    assert store.load_settings().pricing.monthly_price == 1500
    assert store.load_settings().netgsm.username == "u"


def test_unreadable_file():
    result = backup.restore_json("{ yarım")
    assert result.success is False
    assert result.message == "Dosya okuma hatası."


def test_backup_filename(now):
    assert backup.backup_filename(now) == "demir_hocam_yedek_2026-03-10.json"


def test_restore_keeps_only_the_newest_fifty_notifications():
    notes = [
        {"id": f"n{i}", "title": f"t{i}", "message": "m", "type": "info", "date": "2026-03-10T09:30:00.000Z"}
        for i in range(120)
    ]

    result = backup.restore({"students": [], "notifications": notes})

    restored = store.load(Collection.NOTIFICATIONS)
    assert result.success
    assert len(restored) == 50
    assert [n.id for n in restored[:2]] == ["n0", "n1"]


def test_restore_with_desk_outside_range_changes_nothing():
    seed()
    before = snapshot()

    result = backup.restore({"students": [dict(make_student("b").to_dict(), deskNumber=0)]})

    assert result.success is False
    assert snapshot() == before
