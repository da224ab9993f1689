import logging

from cutru_ocr.models import CorrectionLog, NormalizedRecord
from cutru_ocr.normalization import clean_record, normalize_records


def test_sequence_falls_back_to_position():
    raw = [
        {"sttTrongHo": 1, "hoTen": "Nguyễn Văn A"},
        {"hoTen": "Trần Thị B"},
        {"sttTrongHo": "3", "hoTen": "Nguyễn Văn C"},
    ]

    result = normalize_records(raw)

    assert [r.sequence_in_household for r in result.records] == [1, 2, 3]


def test_non_positive_sequence_uses_position():
    result = normalize_records([{"stt": 0}, {"stt": -4}, {"stt": "abc"}])

    assert [r.sequence_in_household for r in result.records] == [1, 2, 3]


def test_order_and_length_preserved_with_malformed_elements():
    raw = [{"hoTen": "A"}, "not a record", None, 42, ["x"], {"hoTen": "B"}]

    result = normalize_records(raw)

    assert len(result) == len(raw)
    assert result.records[0].full_name == "A"
    assert result.records[5].full_name == "B"
    for index in (1, 2, 3, 4):
        assert result.records[index].is_empty
        assert result.records[index].sequence_in_household == index + 1


def test_null_text_becomes_absent():
    result = normalize_records([{"hoTen": " Lê Văn D ", "soCCCD": "null", "queQuan": "N/A", "danToc": ""}])
    record = result.records[0]

    assert record.full_name == "Lê Văn D"
    assert record.document_number is None
    assert record.origin_place is None
    assert record.ethnicity is None


def test_aliases_for_image_and_pdf_layouts():
    image_row = clean_record({"stt": 2, "soCCCD": "079090001234", "hoKhauThuongTru": "Số 1 Đường A"}, 1)
    pdf_row = clean_record({"sttChinh": "15", "sttTrongHo": 2, "soDDCN_CCCD": "079090001234", "diaChiThuongTru": "Số 1 Đường A"}, 1)

    assert image_row.document_number == pdf_row.document_number == "079090001234"
    assert image_row.permanent_address == pdf_row.permanent_address == "Số 1 Đường A"
    assert image_row.row_index_hint is None
    assert pdf_row.row_index_hint == 15


def test_row_index_hint_is_not_validated():
    result = normalize_records([{"sttChinh": -7}, {"sttChinh": "không có"}])

    assert result.records[0].row_index_hint == -7
    assert result.records[1].row_index_hint is None


def test_corrections_are_aggregated():
    raw = [
        {"quocTich": "22402-027531", "soHSCT": "Việt Nam"},
        {"quocTich": "22402-027532", "soHSCT": "Việt Nam"},
        {"queQuan": "Số 38 Đường ABC, Phường X", "diaChiThuongTru": None},
        {"quocTich": "Việt Nam", "queQuan": "Khánh Hòa"},
    ]

    result = normalize_records(raw)

    assert result.corrections.get("swap_soHSCT_quocTich") == 2
    assert result.corrections.get("move_diaChiThuongTru_from_queQuan") == 1
    assert result.corrections.total == 3
    assert result.records[0].nationality == "Việt Nam"
    assert result.records[0].document_code == "22402-027531"
    assert result.records[2].permanent_address == "Số 38 Đường ABC, Phường X"
    assert result.records[2].origin_place is None


def test_corrections_emit_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="cutru_ocr.normalization.records"):
        normalize_records([{"quocTich": "22402-027531", "soHSCT": "Việt Nam"}])

    assert "swap_soHSCT_quocTich=1" in caplog.text


def test_no_warning_without_corrections(caplog):
    with caplog.at_level(logging.WARNING, logger="cutru_ocr.normalization.records"):
        result = normalize_records([{"hoTen": "A", "quocTich": "Việt Nam"}])

    assert not result.corrections
    assert caplog.records == []


def test_none_and_single_mapping_inputs():
    assert len(normalize_records(None)) == 0
    assert normalize_records(None).corrections.total == 0

    result = normalize_records({"hoTen": "A"})
    assert len(result) == 1
    assert result.records[0].full_name == "A"


def test_result_to_dict_uses_all_correction_keys():
    data = normalize_records([{"hoTen": "A"}]).to_dict()

    assert data["records"][0]["full_name"] == "A"
    assert set(data["corrections"]) == set(CorrectionLog().counts)


def test_normalized_record_round_trip_through_dict():
    record = NormalizedRecord(sequence_in_household=3, full_name="A", nationality="Việt Nam")

    assert NormalizedRecord.from_dict(record.to_dict()) == record
    assert record.to_ocr_dict()["sttTrongHo"] == 3
    assert record.to_ocr_dict()["quocTich"] == "Việt Nam"
