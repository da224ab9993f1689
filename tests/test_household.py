from cutru_ocr.models import (
    NormalizedRecord,
    PersonInfo,
    group_by_household,
    map_records_to_persons,
)
from cutru_ocr.models.person import normalize_sex


def test_person_defaults_for_missing_fields():
    person = PersonInfo.from_record(NormalizedRecord(sequence_in_household=2, full_name="Trần Thị B"))

    assert person.stt == 2
    assert person.ho_ten == "Trần Thị B"
    assert person.so_cccd == ""
    assert person.dan_toc == "Kinh"
    assert person.quoc_tich == "Việt Nam"
    assert person.gioi_tinh == "Nam"


def test_person_keeps_extracted_values():
    record = NormalizedRecord(sex="nữ", ethnicity="Tày", nationality="Lào", document_code="22402-027531")
    person = PersonInfo.from_record(record, stt=9)

    assert person.stt == 9
    assert person.gioi_tinh == "Nữ"
    assert person.dan_toc == "Tày"
    assert person.quoc_tich == "Lào"
    assert person.so_hsct == "22402-027531"


def test_normalize_sex():
    assert normalize_sex("Nữ") == "Nữ"
    assert normalize_sex("NU") == "Nữ"
    assert normalize_sex("Nam") == "Nam"
    assert normalize_sex(None) == "Nam"


def test_map_records_numbers_consecutively():
    records = [NormalizedRecord(sequence_in_household=1), NormalizedRecord(sequence_in_household=1)]
    persons = map_records_to_persons(records, start_index=5)
    assert [p.stt for p in persons] == [5, 6]


def _person(name, relation):
    return PersonInfo(ho_ten=name, quan_he_voi_chu_ho=relation, dia_chi_thuong_tru=f"Địa chỉ của {name}")


def test_group_by_household():
    persons = [
        _person("Orphan", "Con"),
        _person("Head 1", "Chủ hộ"),
        _person("Wife 1", "Vợ"),
        _person("Child 1", "Con"),
        _person("Head 2", "CHU HO"),
        _person("Son 2", "Con"),
    ]

    result = group_by_household(persons)

    assert result.total_persons == 6
    assert [p.ho_ten for p in result.orphan_persons] == ["Orphan"]
    assert [h.id for h in result.households] == ["household-1", "household-2"]

    first = result.get_household("household-1")
    assert first.head.ho_ten == "Head 1"
    assert [m.ho_ten for m in first.members] == ["Wife 1", "Child 1"]
    assert len(first.all_persons) == 3

    summaries = result.household_summaries()
    assert summaries[1] == {
        "id": "household-2",
        "head_name": "Head 2",
        "member_count": 2,
        "address": "Địa chỉ của Head 2",
    }


def test_group_empty_and_missing():
    result = group_by_household([])
    assert result.households == []
    assert result.total_persons == 0
    assert result.get_household("household-1") is None
