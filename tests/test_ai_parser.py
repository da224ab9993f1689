from cutru_ocr.utils import parse_ai_response, recover_complete_objects, strip_code_fences


def test_plain_json_array():
    rows = parse_ai_response('[{"hoTen": "Nguyễn Văn A"}, {"hoTen": "Trần Thị B"}]')
    assert [r["hoTen"] for r in rows] == ["Nguyễn Văn A", "Trần Thị B"]


def test_fenced_json():
    text = '```json\n[{"stt": 1, "hoTen": "A"}]\n```'
    assert parse_ai_response(text) == [{"stt": 1, "hoTen": "A"}]


def test_unterminated_fence():
    assert strip_code_fences('```json\n[{"stt": 1}]') == '[{"stt": 1}]'


def test_array_with_surrounding_commentary():
    text = 'Đây là kết quả:\n[{"stt": 1}]\nHết.'
    assert parse_ai_response(text) == [{"stt": 1}]


def test_envelope_object():
    assert parse_ai_response('{"records": [{"stt": 1}, {"stt": 2}]}') == [{"stt": 1}, {"stt": 2}]


def test_single_object_becomes_one_row():
    assert parse_ai_response('{"stt": 1, "hoTen": "A"}') == [{"stt": 1, "hoTen": "A"}]


def test_truncated_array_recovers_complete_objects():
    text = '[{"stt": 1, "hoTen": "A"}, {"stt": 2, "hoTen": "B {x}"}, {"stt": 3, "hoTen": "C'
    rows = parse_ai_response(text)
    assert rows == [{"stt": 1, "hoTen": "A"}, {"stt": 2, "hoTen": "B {x}"}]


def test_recover_ignores_escaped_quotes():
    text = '[{"hoTen": "A \\"}\\" B"}, {"hoTen": '
    assert recover_complete_objects(text) == [{"hoTen": 'A "}" B'}]


def test_unparseable_text_returns_empty():
    assert parse_ai_response("Xin lỗi, tôi không đọc được ảnh.") == []
    assert parse_ai_response("") == []
    assert parse_ai_response(None) == []


def test_empty_array():
    assert parse_ai_response("[]") == []
