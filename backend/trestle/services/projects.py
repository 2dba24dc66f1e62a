"""
Projects domain services.

Project status machine (both versions):

    planned -> active | cancelled
    active  -> on_hold | completed | cancelled
    on_hold -> active | cancelled
    completed, cancelled: terminal

v2 adds a unique business code and refuses to complete a project whose
schedule has no end date.
"""

from typing import Any

from trestle.core.errors import BusinessRuleError, ValidationError
from trestle.models.projects import Milestone, Project, ProjectStatus
from trestle.schemas.projects import MILESTONE_V1, PROJECT_V1, PROJECT_V2
from trestle.services.base import CrudService, ensure_transition, enum_filter, parse_bool, parse_id
from trestle.services.normalization import normalize_code

PLANNED, ACTIVE, ON_HOLD, COMPLETED, CANCELLED = (s.value for s in ProjectStatus)

PROJECT_TRANSITIONS: dict[str, set[str]] = {
    PLANNED: {ACTIVE, CANCELLED},
    ACTIVE: {ON_HOLD, COMPLETED, CANCELLED},
    ON_HOLD: {ACTIVE, CANCELLED},
    COMPLETED: set(),
    CANCELLED: set(),
}

INITIAL_PROJECT_STATUSES = {PLANNED, ACTIVE}
CLOSED_PROJECT_STATUSES = {COMPLETED, CANCELLED}


def check_initial_status(fields: dict[str, Any]) -> None:
    if fields["status"] not in INITIAL_PROJECT_STATUSES:
        raise BusinessRuleError(
            f"New projects must start as 'planned' or 'active', not '{fields['status']}'",
            rule="initial_status",
        )


class ProjectServiceV1(CrudService[Project]):
    resource = "projects"
    version = "1.0"
    model = Project
    codec = PROJECT_V1
    filters = {"status": enum_filter(ProjectStatus)}
    search_field = "name"

    async def before_create(self, fields: dict[str, Any]) -> None:
        check_initial_status(fields)

    async def before_update(self, entity: Project, fields: dict[str, Any]) -> None:
        ensure_transition("Project", PROJECT_TRANSITIONS, entity.status, fields["status"])


class ProjectServiceV2(CrudService[Project]):
    resource = "projects"
    version = "2.0"
    model = Project
    codec = PROJECT_V2
    filters = {"status": enum_filter(ProjectStatus), "code": normalize_code, "manager": str}
    search_field = "name"

    async def before_create(self, fields: dict[str, Any]) -> None:
        check_initial_status(fields)
        await self.ensure_unique("code", fields["code"])
        self._check_completion(fields)

    async def before_update(self, entity: Project, fields: dict[str, Any]) -> None:
        ensure_transition("Project", PROJECT_TRANSITIONS, entity.status, fields["status"])
        await self.ensure_unique("code", fields["code"], exclude_id=entity.id)
        self._check_completion(fields)

    @staticmethod
    def _check_completion(fields: dict[str, Any]) -> None:
        if fields["status"] == COMPLETED and fields["end_date"] is None:
            raise BusinessRuleError(
                "A project cannot be completed without a schedule end date",
                rule="completion_requires_end_date",
            )


class MilestoneServiceV1(CrudService[Milestone]):
    resource = "milestones"
    version = "1.0"
    model = Milestone
    codec = MILESTONE_V1
    filters = {"project_id": parse_id, "completed": parse_bool}
    search_field = "name"

    async def before_create(self, fields: dict[str, Any]) -> None:
        await self._check_project(fields["project_id"])

    async def before_update(self, entity: Milestone, fields: dict[str, Any]) -> None:
        if fields["project_id"] != entity.project_id:
            await self._check_project(fields["project_id"])

    async def _check_project(self, project_id: int) -> None:
        project = await self.repository_for(Project).find(project_id)
        if project is None:
            raise ValidationError.for_field("project_id", f"Project {project_id} does not exist")
        if project.status in CLOSED_PROJECT_STATUSES:
            raise BusinessRuleError(
                f"Project {project_id} is {project.status}; milestones cannot be added",
                rule="project_closed",
            )
