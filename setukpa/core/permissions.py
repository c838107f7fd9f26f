"""
Capability table keyed by (role, operation).

Ownership checks (a student editing their own paper, an advisor reviewing
their own student) are done by the services on top of this table.
"""

from setukpa.core.exceptions import PermissionDeniedError
from setukpa.models.enums import Role

ADMINS = frozenset({Role.ADMIN, Role.SUPER_ADMIN})

CAPABILITIES: dict[str, frozenset[Role]] = {
    "open_paper": frozenset({Role.SISWA}),
    "edit_chapter": frozenset({Role.SISWA}),
    "submit_chapter": frozenset({Role.SISWA}),
    "review_chapter": frozenset({Role.PEMBIMBING}) | ADMINS,
    "reopen_chapter": ADMINS,
    "attach_final_document": frozenset({Role.SISWA}),
    "remove_final_document": frozenset({Role.SISWA}) | ADMINS,
    "review_final_document": frozenset({Role.PEMBIMBING}) | ADMINS,
    "record_advisor_grade": frozenset({Role.PEMBIMBING}) | ADMINS,
    "record_examiner_grade": frozenset({Role.PENGUJI}) | ADMINS,
    "set_grade_override": frozenset({Role.PENGUJI}) | ADMINS,
    "manage_assignments": ADMINS,
    "distribute_papers": ADMINS,
    "view_all_papers": frozenset({Role.PEMBIMBING, Role.PENGUJI, Role.HELPER}) | ADMINS,
}


def can(role: str, operation: str) -> bool:
    try:
        role = Role(role)
    except ValueError:
        return False
    return role in CAPABILITIES.get(operation, frozenset())


def require(role: str, operation: str) -> None:
    if not can(role, operation):
        raise PermissionDeniedError(str(getattr(role, "value", role)), operation)


def is_admin(role: str) -> bool:
    return role in {r.value for r in ADMINS}
