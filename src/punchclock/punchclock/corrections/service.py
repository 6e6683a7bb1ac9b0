from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Sequence
from zoneinfo import ZoneInfo

from ..attendance.model import CorrectedPunch
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local, parse_hhmm
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_ORG_TIMEZONE
from ..core.enums import CorrectionStatus, Role
from ..core.exceptions import AlreadyResolved, AuthorizationError, ValidationError
from .model import Amendment, CorrectionRequest
from .repository import CorrectionRepository

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 1000


class CorrectionService:
    """Pending -> Accepted | Rejected, resolved exactly once.

    Accepting writes ``CorrectedPunch`` values and an amendment row; the
    original punch evidence stays in the amendment trail.
    """

    def __init__(
        self,
        corrections: CorrectionRepository,
        attendance: AttendanceRepository,
        *,
        timezone: str = DEFAULT_ORG_TIMEZONE,
    ):
        self._corrections = corrections
        self._attendance = attendance
        self._tz = ZoneInfo(timezone)

    def submit(
        self,
        *,
        user_id: int,
        work_date: date,
        claimed_check_in: str | None,
        claimed_check_out: str | None,
        message: str,
        today: date | None = None,
    ) -> int:
        message = require_non_empty(message, "Lý do")
        if len(message) > MAX_MESSAGE_LENGTH:
            raise ValidationError(f"Lý do tối đa {MAX_MESSAGE_LENGTH} ký tự", code="message-too-long")

        today = today or now_local(self._tz).date()
        if work_date > today:
            raise ValidationError("Không thể gửi yêu cầu cho ngày trong tương lai", code="future-date")

        check_in_t = parse_hhmm(claimed_check_in)
        check_out_t = parse_hhmm(claimed_check_out)
        if not check_in_t and not check_out_t:
            raise ValidationError("Vui lòng nhập ít nhất 1 thay đổi", code="nothing-to-correct")
        if check_in_t and check_out_t and check_out_t <= check_in_t:
            raise ValidationError("Giờ ra không thể nhỏ hơn giờ vào", code="checkout-before-checkin")

        if check_in_t is None:
            rec = self._attendance.get_for_user_and_date(int(user_id), work_date)
            if not rec or rec.check_in is None:
                raise ValidationError("Chưa có giờ vào cho ngày này, vui lòng nhập giờ vào", code="missing-check-in")

        request_id = self._corrections.create(
            user_id=int(user_id),
            work_date=work_date,
            claimed_check_in=check_in_t,
            claimed_check_out=check_out_t,
            message=message,
        )
        logger.info("correction submitted: request_id=%s user_id=%s date=%s", request_id, user_id, work_date)
        return request_id

    def _get_pending(self, request_id: int) -> CorrectionRequest:
        req = self._corrections.get(request_id=int(request_id))
        if not req:
            raise ValidationError("Yêu cầu không tồn tại", code="request-not-found")
        if req.resolved:
            raise AlreadyResolved()
        return req

    def accept(self, *, current_role: Role, reviewer_id: int, request_id: int, admin_note: str = "") -> CorrectionRequest:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Bạn không có quyền")

        req = self._get_pending(request_id)
        rec = self._attendance.get_for_user_and_date(req.user_id, req.work_date)

        old_in = rec.check_in_time if rec else None
        old_out = rec.check_out_time if rec else None

        check_in = check_out = None
        if req.claimed_check_in:
            check_in = CorrectedPunch(
                at=datetime.combine(req.work_date, req.claimed_check_in),
                request_id=req.request_id,
                corrected_by=int(reviewer_id),
            )
        if req.claimed_check_out:
            check_out = CorrectedPunch(
                at=datetime.combine(req.work_date, req.claimed_check_out),
                request_id=req.request_id,
                corrected_by=int(reviewer_id),
            )

        new_in = check_in.at if check_in else old_in
        new_out = check_out.at if check_out else old_out
        if new_in is None:
            raise ValidationError("Không tìm thấy giờ vào để áp dụng", code="missing-check-in")
        if new_out is not None and new_out <= new_in:
            raise ValidationError("Giờ ra không thể nhỏ hơn giờ vào", code="checkout-before-checkin")

        accepted = self._corrections.accept(
            request_id=req.request_id,
            decided_by=int(reviewer_id),
            admin_note=(admin_note or "").strip() or None,
            user_id=req.user_id,
            work_date=req.work_date,
            expected_check_in=old_in,
            expected_check_out=old_out,
            check_in=check_in,
            check_out=check_out,
        )
        if not accepted:
            raise AlreadyResolved()

        logger.info(
            "correction accepted: request_id=%s reviewer=%s check_in=%s->%s check_out=%s->%s",
            req.request_id,
            reviewer_id,
            old_in,
            new_in,
            old_out,
            new_out,
        )
        return self._corrections.get(request_id=req.request_id)

    def reject(self, *, current_role: Role, reviewer_id: int, request_id: int, admin_note: str = "") -> CorrectionRequest:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Bạn không có quyền")

        req = self._get_pending(request_id)
        if not self._corrections.reject(
            request_id=req.request_id,
            decided_by=int(reviewer_id),
            admin_note=(admin_note or "").strip() or None,
        ):
            raise AlreadyResolved()

        logger.info("correction rejected: request_id=%s reviewer=%s", req.request_id, reviewer_id)
        return self._corrections.get(request_id=req.request_id)

    def list_mine(self, *, user_id: int) -> Sequence[CorrectionRequest]:
        return self._corrections.list_requests(user_id=int(user_id), limit=200)

    def list_pending(self, *, current_role: Role) -> Sequence[CorrectionRequest]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Bạn không có quyền")
        return self._corrections.list_requests(status=CorrectionStatus.PENDING, limit=500)

    def amendments_for(self, *, attendance_id: int) -> Sequence[Amendment]:
        return self._corrections.list_amendments(attendance_id=int(attendance_id))
