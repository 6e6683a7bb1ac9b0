from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeDirectory(Protocol):
    """Giao diện đọc danh bạ nhân viên.

    Lưu ý: việc tạo/sửa/xoá nhân viên thuộc ứng dụng bên ngoài; ở đây chỉ đọc.
    """

    def get_by_id(self, user_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Employee]:
        raise NotImplementedError

    def count_active(self) -> int:
        raise NotImplementedError
