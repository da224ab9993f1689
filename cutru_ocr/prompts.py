"""
Extraction prompts sent to the vision model.

Both prompts ask for a bare JSON array whose keys match FIELD_ALIASES in
cutru_ocr.models.record.
"""

IMAGE_OCR_PROMPT = """Ảnh đính kèm là tờ khai / sổ đăng ký cư trú của hộ gia đình.

Yêu cầu:
1. Đọc toàn bộ văn bản trong ảnh (OCR), KHÔNG từ chối vì "không đọc được ảnh".
2. KHÔNG suy đoán, KHÔNG thêm thông tin không có trong ảnh.
3. Trường nào không có dữ liệu thì gán null.
4. Giữ nguyên tiếng Việt có dấu.
5. Chỉ trả về JSON đúng định dạng bên dưới, không giải thích.

Thứ tự đọc trong mỗi ô: trái sang phải, trên xuống dưới. Tên bị xuống dòng thì ghép
dòng trên trước rồi đến dòng dưới ("Nguyễn Đức" + "Bình" -> "Nguyễn Đức Bình").

Phân biệt các cột dễ nhầm:
- "ngaySinh" chỉ chứa ngày tháng năm dạng DD/MM/YYYY, không bao giờ là địa chỉ.
- "queQuan" là địa danh cấp xã/huyện/tỉnh, thường không có số nhà.
- "hoKhauThuongTru" là địa chỉ đăng ký thường trú: số nhà, đường, phường, quận.
- "quocTich" là tên quốc gia (ví dụ "Việt Nam"), không phải dãy số.

[
  {
    "stt": number,
    "hoTen": string | null,
    "soCCCD": string | null,
    "ngaySinh": string | null,
    "gioiTinh": string | null,
    "queQuan": string | null,
    "danToc": string | null,
    "quocTich": string | null,
    "quanHeVoiChuHo": string | null,
    "oDauDen": string | null,
    "hoKhauThuongTru": string | null
  }
]"""


PDF_OCR_PROMPT = """Ảnh này là một trang PDF chứa bảng dữ liệu cư trú (mẫu CT3A).

Đọc TẤT CẢ các hàng của bảng, giữ NGUYÊN THỨ TỰ hàng như trong ảnh.

Bảng có 2 cột số thứ tự:
- "sttChinh": cột đầu tiên bên trái, số thứ tự lớn của cả bảng; trống thì gán null.
- "sttTrongHo": cột thứ hai, số thứ tự trong hộ (1 = chủ hộ, 2, 3 ... = thành viên).

Các cột còn lại:
- "hoTen": Họ và tên
- "soDDCN_CCCD": Số ĐDCN/CCCD
- "ngaySinh": Ngày sinh (DD/MM/YYYY)
- "gioiTinh": Giới tính (Nam/Nữ)
- "queQuan": Quê quán (địa danh, thường không có số nhà)
- "danToc": Dân tộc
- "quocTich": Quốc tịch (tên quốc gia)
- "soHSCT": Số hồ sơ cư trú (mã gồm chữ số, dấu gạch)
- "quanHeVoiChuHo": Quan hệ với chủ hộ
- "oDauDen": Ở đâu đến
- "ngayDen": Ngày đến (DD/MM/YYYY)
- "diaChiThuongTru": Địa chỉ thường trú

Quy tắc:
1. Ô trống hoặc không đọc được thì gán null.
2. Văn bản trong ô bị xuống dòng thì ghép lại.
3. Không thêm thông tin không có trong ảnh.
4. Chỉ trả về JSON array, không giải thích.

[
  {
    "sttChinh": number | null,
    "sttTrongHo": number,
    "hoTen": string | null,
    "soDDCN_CCCD": string | null,
    "ngaySinh": string | null,
    "gioiTinh": string | null,
    "queQuan": string | null,
    "danToc": string | null,
    "quocTich": string | null,
    "soHSCT": string | null,
    "quanHeVoiChuHo": string | null,
    "oDauDen": string | null,
    "ngayDen": string | null,
    "diaChiThuongTru": string | null
  }
]

Trang không có dữ liệu bảng (hoặc chỉ có tiêu đề) thì trả về []."""
