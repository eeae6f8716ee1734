from fastapi import APIRouter, Depends, HTTPException, status

from folio.api.dependencies import get_projects
from folio.api.schemas import ProjectDetail, ProjectSummary, TocEntry
from folio.core.projects import ProjectCatalog

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[ProjectSummary])
async def list_projects(catalog: ProjectCatalog = Depends(get_projects)) -> list[ProjectSummary]:
    return [ProjectSummary.model_validate(p) for p in await catalog.all()]


@router.get("/{slug}", response_model=ProjectDetail)
async def get_project(slug: str, catalog: ProjectCatalog = Depends(get_projects)) -> ProjectDetail:
    project = await catalog.get(slug)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Project {slug!r} not found")
    return ProjectDetail(
        **ProjectSummary.model_validate(project).model_dump(),
        content=project.rendered.content,
        toc=[TocEntry.model_validate(item) for item in project.rendered.toc],
    )
