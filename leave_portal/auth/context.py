"""Explicit actor/session context passed to every workflow operation."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from leave_portal.common.constants import ActorRole


class ActorContext(BaseModel):
    """Who is acting, in which role, on which campus/department.

    ``token`` is the opaque bearer credential forwarded to the backend; it is
    excluded from ``repr`` so it never ends up in logs.
    """

    model_config = ConfigDict(frozen=True)

    employee_id: str
    role: ActorRole
    campus: str
    department: Optional[str] = None
    name: Optional[str] = None
    token: str = Field(default="", repr=False)

    @field_validator("campus")
    @classmethod
    def _lower_campus(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("department")
    @classmethod
    def _upper_department(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v

    def is_hod_of(self, department: Optional[str], campus: str) -> bool:
        """True when the actor is the HOD for this department on this campus."""
        return (
            self.role is ActorRole.hod
            and self.department is not None
            and department is not None
            and self.department == department.strip().upper()
            and self.campus == campus.strip().lower()
        )

    def same_campus(self, campus: str) -> bool:
        return self.campus == campus.strip().lower()
