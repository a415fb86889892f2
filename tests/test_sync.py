"""QR sync: payload size budget and id-keyed merge."""

import json

import store
import sync
from models import PaymentStatus
from store import Collection
from conftest import make_student


def test_merge_into_empty_then_repeat():
    imported = [make_student(f"s{i}").to_dict() for i in range(3)]

    first = sync.merge(imported)
    state_after_first = store.load(Collection.STUDENTS)
    second = sync.merge(imported)

    assert (first.success, first.new_count, first.updated_count) == (True, 3, 0)
    assert (second.new_count, second.updated_count) == (0, 3)
    assert store.load(Collection.STUDENTS) == state_after_first
    assert second.message == "Senkronizasyon başarılı: 0 yeni kayıt, 3 güncelleme."


def test_imported_fields_win_and_missing_fields_are_kept():
    store.add(Collection.STUDENTS, make_student("a", notes="yerel not", desk_number=4))

    result = sync.merge([{"id": "a", "paymentStatus": "Ödendi", "fullName": "Güncel Ad"}])

    merged = store.load(Collection.STUDENTS)[0]
    assert result.updated_count == 1
    assert merged.full_name == "Güncel Ad"
    assert merged.payment_status == PaymentStatus.PAID
    assert merged.notes == "yerel not"
    assert merged.desk_number == 4


def test_merge_never_deletes_local_students():
    store.save_all(Collection.STUDENTS, [make_student("a"), make_student("b"), make_student("c")])
    sync.merge([make_student("b", full_name="B2").to_dict(), make_student("d").to_dict()])

    ids = [s.id for s in store.load(Collection.STUDENTS)]
    assert ids == ["a", "b", "c", "d"]


def test_missing_import_fails():
    result = sync.merge(None)
    assert result.success is False
    assert result.message == "Veri boş."


def test_empty_list_is_a_successful_no_op():
    store.add(Collection.STUDENTS, make_student("a"))
    before = store.load(Collection.STUDENTS)

    result = sync.merge([])

    assert (result.success, result.new_count, result.updated_count) == (True, 0, 0)
    assert result.message == "Senkronizasyon başarılı: 0 yeni kayıt, 0 güncelleme."
    assert store.load(Collection.STUDENTS) == before


def test_payload_with_no_room_for_a_student_still_merges():
    payload = sync.build_payload([make_student("big", notes="x" * 3000)])

    assert json.loads(payload) == {"students": []}
    assert sync.merge_payload(payload).success is True


def test_desk_outside_range_rejects_import():
    store.add(Collection.STUDENTS, make_student("a"))
    before = store.load(Collection.STUDENTS)

    result = sync.merge([dict(make_student("b").to_dict(), deskNumber=99)])

    assert result.success is False
    assert store.load(Collection.STUDENTS) == before


def test_null_text_fields_import_as_empty():
    sync.merge([{"id": "n", "fullName": None, "parentPhone": None}])

    imported = store.get(Collection.STUDENTS, "n")
    assert imported.full_name == ""
    assert imported.parent_phone == ""


def test_record_without_id_rejects_whole_import():
    store.add(Collection.STUDENTS, make_student("a"))
    before = store.load(Collection.STUDENTS)

    result = sync.merge([make_student("b").to_dict(), {"fullName": "kimliksiz"}])

    assert result.success is False
    assert store.load(Collection.STUDENTS) == before


def test_payload_fits_budget_and_stays_valid_json():
    students = [make_student(f"id-{i:03d}", notes="x" * 40) for i in range(40)]

    payload = sync.build_payload(students)
    decoded = json.loads(payload)

    assert len(payload) <= sync.MAX_PAYLOAD_CHARS
    assert 0 < len(decoded["students"]) < 40
    assert [d["id"] for d in decoded["students"]] == [s.id for s in students[: len(decoded["students"])]]


def test_truncated_payload_merges_without_touching_other_records():
    local = [make_student(f"id-{i:03d}", notes="x" * 40) for i in range(40)]
    store.save_all(Collection.STUDENTS, local)
    edited = [make_student(s.id, notes="mobil", payment_status=PaymentStatus.PAID) for s in local]

    result = sync.merge_payload(sync.build_payload(edited))

    current = store.load(Collection.STUDENTS)
    assert result.success
    assert result.new_count == 0
    updated = result.updated_count
    assert all(s.notes == "mobil" for s in current[:updated])
    assert current[updated:] == local[updated:]


def test_merge_payload_rejects_garbage():
    assert sync.merge_payload("not json").success is False
    assert sync.merge_payload({"other": []}).success is False
