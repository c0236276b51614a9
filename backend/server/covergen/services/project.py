"""
Project service for managing projects
"""
from typing import List
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import desc
from covergen.models.project import Project
from covergen.models.asset import Asset
from covergen.models.output import GeneratedOutput
from covergen.schemas.project import ProjectCreate, ProjectUpdate
from covergen.core.exceptions import NotFoundError
from covergen.services.storage import BlobStorage
import structlog

logger = structlog.get_logger()


class ProjectService:
    def __init__(self, db: Session):
        self.db = db

    def get_user_projects(self, user_id: UUID, limit: int = 50, offset: int = 0) -> List[Project]:
        """Get user projects with pagination, newest first"""
        return (
            self.db.query(Project)
            .filter(Project.user_id == user_id)
            .order_by(desc(Project.created_at))
            .offset(offset)
            .limit(limit)
            .all()
        )

    def create_project(self, user_id: UUID, project_in: ProjectCreate) -> Project:
        """Create a new project"""
        project = Project(
            user_id=user_id,
            title=project_in.title,
            target_platform=project_in.target_platform.value,
            app_name=project_in.app_name,
            locale=project_in.locale,
            notes=project_in.notes,
        )
        self.db.add(project)
        self.db.commit()
        self.db.refresh(project)
        logger.info(
            "Project created",
            project_id=str(project.id),
            user_id=str(user_id),
            title=project.title
        )
        return project

    def get_project(self, project_id: UUID, user_id: UUID) -> Project:
        """Get project by ID for specific user"""
        project = (
            self.db.query(Project)
            .filter(Project.id == project_id, Project.user_id == user_id)
            .first()
        )
        if not project:
            logger.warning("Project not found or access denied", project_id=str(project_id), user_id=str(user_id))
            raise NotFoundError("Project not found")
        return project

    def update_project(self, project_id: UUID, user_id: UUID, project_in: ProjectUpdate) -> Project:
        """Update project fields that were sent"""
        project = self.get_project(project_id, user_id)
        for field, value in project_in.model_dump(exclude_unset=True).items():
            if field == "target_platform" and value is not None:
                value = value.value
            setattr(project, field, value)
        self.db.commit()
        self.db.refresh(project)
        logger.info("Project updated", project_id=str(project.id), user_id=str(user_id))
        return project

    def delete_project(self, project_id: UUID, user_id: UUID, storage: BlobStorage) -> None:
        """Delete a project, its rows and the blobs of its assets and outputs"""
        project = self.get_project(project_id, user_id)
        asset_keys = [
            key for (key,) in self.db.query(Asset.storage_key).filter(Asset.project_id == project.id)
        ]
        output_keys = [
            key for (key,) in self.db.query(GeneratedOutput.storage_key).filter(GeneratedOutput.project_id == project.id)
        ]

        storage.delete(asset_keys + output_keys)
        self.db.delete(project)
        self.db.commit()
        logger.info(
            "Project deleted",
            project_id=str(project_id),
            user_id=str(user_id),
            deleted_blobs=len(asset_keys) + len(output_keys)
        )
