"""
Project and asset endpoints
"""
from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
from covergen.core.config import settings
from covergen.core.deps import get_blob_storage, get_current_user
from covergen.db.session import get_db
from covergen.models.enums import AssetType
from covergen.models.user import User
from covergen.schemas.asset import Asset as AssetSchema, SignedUrl
from covergen.schemas.project import Project as ProjectSchema, ProjectCreate, ProjectUpdate
from covergen.services.asset import AssetService
from covergen.services.project import ProjectService
from covergen.services.storage import BlobStorage

router = APIRouter()


@router.get("/projects", response_model=List[ProjectSchema])
async def get_user_projects(
    limit: int = 50,
    offset: int = 0,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List the current user's projects, newest first
    """
    project_service = ProjectService(db)
    return project_service.get_user_projects(current_user.id, limit=limit, offset=offset)


@router.post("/projects", response_model=ProjectSchema, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_in: ProjectCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    project_service = ProjectService(db)
    return project_service.create_project(current_user.id, project_in)


@router.get("/projects/{project_id}", response_model=ProjectSchema)
async def get_project(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    project_service = ProjectService(db)
    return project_service.get_project(project_id, current_user.id)


@router.patch("/projects/{project_id}", response_model=ProjectSchema)
async def update_project(
    project_id: UUID,
    project_in: ProjectUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    project_service = ProjectService(db)
    return project_service.update_project(project_id, current_user.id, project_in)


@router.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
):
    """
    Delete a project with its assets, jobs and outputs
    """
    project_service = ProjectService(db)
    project_service.delete_project(project_id, current_user.id, storage)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/projects/{project_id}/assets", response_model=List[AssetSchema])
async def get_project_assets(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    asset_service = AssetService(db)
    return asset_service.get_assets_by_project(project_id, current_user.id)


@router.post("/projects/{project_id}/assets", response_model=AssetSchema, status_code=status.HTTP_201_CREATED)
async def upload_asset(
    project_id: UUID,
    file: UploadFile = File(...),
    type: AssetType = Form(AssetType.OTHER),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
):
    """
    Upload an image asset to a project.

    Example:
    curl -X POST /api/v1/projects/{project_id}/assets \\
         -H "Authorization: Bearer TOKEN" \\
         -F 'type=app_screenshot' \\
         -F 'file=@screen1.png'
    """
    data = await file.read()
    asset_service = AssetService(db, storage)
    return asset_service.create_asset_from_upload(
        project_id=project_id,
        user_id=current_user.id,
        filename=file.filename,
        data=data,
        asset_type=type
    )


@router.delete("/assets/{asset_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_asset(
    asset_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Soft-delete an asset. Its blob is kept for jobs that already used it.
    """
    asset_service = AssetService(db)
    asset_service.soft_delete_asset(asset_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/assets/{asset_id}/signed-url", response_model=SignedUrl)
async def get_asset_signed_url(
    asset_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
):
    asset_service = AssetService(db, storage)
    url = asset_service.create_signed_url(asset_id, current_user.id)
    return SignedUrl(url=url, expires_in=settings.SIGNED_URL_TTL_SECONDS)
