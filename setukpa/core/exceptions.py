"""
Domain exceptions for SETUKPA.

Services raise these; the API layer turns them into HTTP responses through
the handler registered in ``setukpa.main``. Messages are user-facing and
written in Indonesian.

Usage:
    from setukpa.core.exceptions import NotFoundError

    if paper is None:
        raise NotFoundError("Paper", paper_id)
"""

from typing import Any, Dict, Optional


class SetukpaError(Exception):
    """Base exception for all SETUKPA domain errors"""

    status_code = 400

    def __init__(
        self,
        message: str,
        code: str = "SETUKPA_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(SetukpaError):
    """Paper, assignment, user or chapter missing"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} dengan ID '{resource_id}' tidak ditemukan",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class PermissionDeniedError(SetukpaError):
    """Role is not authorized for the requested operation"""

    status_code = 403

    def __init__(self, role: str, operation: str):
        super().__init__(
            f"Peran {role} tidak diizinkan melakukan '{operation}'",
            code="PERMISSION_DENIED",
            details={"role": role, "operation": operation},
        )


class InvalidTransitionError(SetukpaError):
    status_code = 409

    def __init__(self, current: str, target: str, message: Optional[str] = None):
        super().__init__(
            message or f"Tidak dapat mengubah status dari {current} ke {target}",
            code="INVALID_TRANSITION",
            details={"current": current, "target": target},
        )


class IncompleteContentError(SetukpaError):
    """Finalize attempted before every chapter is approved"""

    status_code = 409

    def __init__(self, pending_chapters: list[int]):
        super().__init__(
            "Semua bab harus disetujui sebelum dokumen final diproses",
            code="INCOMPLETE_CONTENT",
            details={"pending_chapters": pending_chapters},
        )


class ScoreRangeError(SetukpaError):
    status_code = 422

    def __init__(self, field: str, value: Any, maximum: Any):
        super().__init__(
            f"Nilai {field} harus di antara 0 dan {maximum} (diterima: {value})",
            code="SCORE_OUT_OF_RANGE",
            details={"field": field, "value": str(value), "max": str(maximum)},
        )


class StaleWriteError(SetukpaError):
    """Version token mismatch; caller must re-fetch and retry"""

    status_code = 409

    def __init__(self, resource_type: str, resource_id: Any, expected: Any = None, actual: Any = None):
        super().__init__(
            f"{resource_type} telah diubah oleh pengguna lain, muat ulang dan coba lagi",
            code="STALE_WRITE",
            details={
                "resource_type": resource_type,
                "resource_id": resource_id,
                "expected_version": expected,
                "current_version": actual,
            },
        )


class DanglingReferenceError(SetukpaError):
    """A row points at a parent that no longer exists"""

    status_code = 409

    def __init__(self, resource_type: str, resource_id: Any, missing_type: str, missing_id: Any):
        super().__init__(
            f"{resource_type} '{resource_id}' merujuk ke {missing_type} '{missing_id}' yang sudah dihapus",
            code="DANGLING_REFERENCE",
            details={
                "resource_type": resource_type,
                "resource_id": resource_id,
                "missing_type": missing_type,
                "missing_id": missing_id,
            },
        )


class OutOfRangeError(SetukpaError):
    status_code = 404

    def __init__(self, chapter_index: int, chapter_count: int):
        super().__init__(
            f"Bab ke-{chapter_index} tidak ada (jumlah bab: {chapter_count})",
            code="CHAPTER_OUT_OF_RANGE",
            details={"chapter_index": chapter_index, "chapter_count": chapter_count},
        )


class DuplicatePaperError(SetukpaError):
    status_code = 409

    def __init__(self, assignment_id: int, student_id: int):
        super().__init__(
            "Paper untuk tugas ini sudah ada",
            code="PAPER_EXISTS",
            details={"assignment_id": assignment_id, "student_id": student_id},
        )
