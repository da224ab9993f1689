import pytest

from cutru_ocr.normalization import (
    fold_text,
    is_likely_detailed_address,
    is_likely_hsct_code,
    is_likely_nationality,
)


def test_fold_text():
    assert fold_text("Đường Nguyễn Trãi") == "duong nguyen trai"
    assert fold_text("  Việt-Nam!! ") == "viet nam"
    assert fold_text(None) == ""


@pytest.mark.parametrize("value", ["Việt Nam", "VIỆT NAM", "Hàn Quốc", "Trung Quốc", "Lào", "Không quốc tịch"])
def test_known_nationalities(value):
    assert is_likely_nationality(value)


@pytest.mark.parametrize("value", ["Viet Nam 123", "Khánh Hòa", "Người Việt Nam", "", None])
def test_not_nationalities(value):
    assert not is_likely_nationality(value)


def test_detailed_address_with_strong_marker():
    assert is_likely_detailed_address("Số 38 Đường Nguyễn Đức Cảnh, Phường Phước Long")
    assert is_likely_detailed_address("Tổ dân phố 5, Phường Vĩnh Hải")
    assert is_likely_detailed_address("Căn hộ A2, Chung cư Mường Thanh")


def test_bare_locality_is_not_detailed_address():
    assert not is_likely_detailed_address("Xã Bắc Ninh Hòa, Tỉnh Khánh Hòa")
    assert not is_likely_detailed_address("Phường Phước Long, Thành phố Nha Trang")
    assert not is_likely_detailed_address("Khánh Hòa")


def test_administrative_with_digits_is_detailed_address():
    assert is_likely_detailed_address("12/4 Phường 14, Quận 10, TP Hồ Chí Minh")


def test_hsct_codes():
    assert is_likely_hsct_code("22402-027531")
    assert is_likely_hsct_code("HSCT 15")
    assert is_likely_hsct_code("A12")


def test_hsct_rejects_dates_nationalities_and_addresses():
    assert not is_likely_hsct_code("12/05/1990")
    assert not is_likely_hsct_code("1-1-2020")
    assert not is_likely_hsct_code("Việt Nam")
    assert not is_likely_hsct_code("Số 38 Đường ABC, Phường X")
    assert not is_likely_hsct_code("Nguyễn Văn A")
    assert not is_likely_hsct_code(None)


@pytest.mark.parametrize("value", [
    "Xã Thanh Hải, Huyện Thanh Hà, Tỉnh Hải Dương",
    "Phường Phú Cường, Tỉnh Bình Dương",
])
def test_province_named_duong_is_not_a_street(value):
    assert not is_likely_detailed_address(value)


def test_street_named_after_province_is_still_a_street():
    assert is_likely_detailed_address("Đường Bình Dương, Phường 9")


def test_date_anywhere_in_value_rejects_code():
    assert not is_likely_hsct_code("HS 12/05/2020")
    assert not is_likely_hsct_code("01-02-123456")
