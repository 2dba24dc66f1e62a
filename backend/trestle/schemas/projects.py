"""Pydantic schemas and codecs for projects and milestones."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

from trestle.core.database import MAX_INTEGER
from trestle.models.projects import Project, ProjectStatus
from trestle.schemas.codec import DtoCodec


def _check_dates(start: date | None, end: date | None) -> None:
    if start and end and end < start:
        raise ValueError("end_date must not be before start_date")


# ─── Projects v1.0 ─────────────────────────────────────────────

class ProjectCreateV1(BaseModel):
    """Flat project contract of API v1."""
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    status: ProjectStatus = ProjectStatus.PLANNED
    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def check_dates(self):
        _check_dates(self.start_date, self.end_date)
        return self


class ProjectV1(BaseModel):
    id: int
    name: str
    description: str | None
    status: ProjectStatus
    start_date: date | None
    end_date: date | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


PROJECT_V1 = DtoCodec(create_schema=ProjectCreateV1, read_schema=ProjectV1)


# ─── Projects v2.0 ─────────────────────────────────────────────

class Schedule(BaseModel):
    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def check_dates(self):
        _check_dates(self.start_date, self.end_date)
        return self


class ProjectCreateV2(BaseModel):
    """v2 adds a business code, budget and manager; dates move under schedule."""
    code: str = Field(..., pattern=r"^[A-Z]{2,6}-\d{3,6}$", description="e.g. BRG-0042")
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    status: ProjectStatus = ProjectStatus.PLANNED
    schedule: Schedule = Field(default_factory=Schedule)
    budget: float | None = Field(None, ge=0)
    manager: str | None = Field(None, max_length=200)


class ProjectV2(BaseModel):
    id: int
    code: str | None
    name: str
    description: str | None
    status: ProjectStatus
    schedule: Schedule
    budget: float | None
    manager: str | None
    created_at: datetime
    updated_at: datetime


def project_v2_fields(dto: ProjectCreateV2) -> dict[str, Any]:
    return {
        "code": dto.code,
        "name": dto.name,
        "description": dto.description,
        "status": dto.status,
        "start_date": dto.schedule.start_date,
        "end_date": dto.schedule.end_date,
        "budget": dto.budget,
        "manager": dto.manager,
    }


def project_v2_dto(project: Project) -> ProjectV2:
    return ProjectV2(
        id=project.id,
        code=project.code,
        name=project.name,
        description=project.description,
        status=project.status,
        schedule=Schedule(start_date=project.start_date, end_date=project.end_date),
        budget=project.budget,
        manager=project.manager,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


PROJECT_V2 = DtoCodec(
    create_schema=ProjectCreateV2,
    read_schema=ProjectV2,
    to_fields=project_v2_fields,
    to_dto=project_v2_dto,
)


# ─── Milestones v1.0 ───────────────────────────────────────────

class MilestoneCreateV1(BaseModel):
    project_id: int = Field(..., ge=1, le=MAX_INTEGER)
    name: str = Field(..., min_length=1, max_length=200)
    due_date: date | None = None
    completed: bool = False


class MilestoneV1(BaseModel):
    id: int
    project_id: int
    name: str
    due_date: date | None
    completed: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


MILESTONE_V1 = DtoCodec(create_schema=MilestoneCreateV1, read_schema=MilestoneV1)
