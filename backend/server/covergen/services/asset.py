"""
Asset service for managing uploaded assets
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from uuid import UUID
import uuid

from sqlalchemy.orm import Session
import structlog

from covergen.core.config import settings
from covergen.core.exceptions import NotFoundError, ValidationError
from covergen.models.asset import Asset
from covergen.models.enums import AssetType
from covergen.models.project import Project
from covergen.services.image_processing import detect_mime_type, read_dimensions
from covergen.services.storage import BlobStorage, asset_storage_key

logger = structlog.get_logger()


class AssetService:
    def __init__(self, db: Session, storage: Optional[BlobStorage] = None):
        self.db = db
        self.storage = storage

    def _get_project(self, project_id: UUID, user_id: UUID) -> Project:
        project = self.db.query(Project).filter(
            Project.id == project_id, Project.user_id == user_id
        ).first()
        if not project:
            logger.warning("Project not found or access denied", project_id=str(project_id), user_id=str(user_id))
            raise NotFoundError("Project not found")
        return project

    def get_asset(self, asset_id: UUID, user_id: UUID) -> Asset:
        """Get a live asset by ID, ensuring it belongs to the user"""
        asset = (
            self.db.query(Asset)
            .join(Project)
            .filter(Asset.id == asset_id, Project.user_id == user_id, Asset.deleted_at.is_(None))
            .first()
        )
        if not asset:
            logger.warning("Asset not found or access denied", asset_id=str(asset_id), user_id=str(user_id))
            raise NotFoundError("Asset not found")
        return asset

    def get_assets_by_project(self, project_id: UUID, user_id: UUID) -> List[Asset]:
        """List the project's assets, excluding soft-deleted ones"""
        self._get_project(project_id, user_id)
        assets = (
            self.db.query(Asset)
            .filter(Asset.project_id == project_id, Asset.deleted_at.is_(None))
            .order_by(Asset.created_at)
            .all()
        )
        logger.info(
            "Assets listed for project",
            project_id=str(project_id),
            user_id=str(user_id),
            asset_count=len(assets)
        )
        return assets

    def get_live_assets(self, project_id: UUID, asset_ids: List[UUID]) -> List[Asset]:
        """Live assets of a project among the given ids"""
        if not asset_ids:
            return []
        return (
            self.db.query(Asset)
            .filter(
                Asset.project_id == project_id,
                Asset.id.in_(asset_ids),
                Asset.deleted_at.is_(None),
            )
            .all()
        )

    def create_asset_from_upload(
        self,
        project_id: UUID,
        user_id: UUID,
        filename: str,
        data: bytes,
        asset_type: AssetType = AssetType.OTHER,
    ) -> Asset:
        """Validate an uploaded image, store its bytes and create the asset row"""
        logger.info(
            "create_asset_from_upload called",
            project_id=str(project_id),
            user_id=str(user_id),
            filename=filename
        )
        project = self._get_project(project_id, user_id)

        extension = Path(filename or "").suffix.lower()
        if extension not in settings.ALLOWED_FILE_TYPES:
            raise ValidationError(
                f"Unsupported file type: {extension or 'none'}. "
                f"Allowed types: {', '.join(settings.ALLOWED_FILE_TYPES)}"
            )
        if not data:
            raise ValidationError("Uploaded file is empty")
        if len(data) > settings.MAX_FILE_SIZE:
            raise ValidationError(f"File too large. Maximum size is {settings.MAX_FILE_SIZE} bytes")

        mime_type = detect_mime_type(data)
        if mime_type is None:
            raise ValidationError("Uploaded file is not a readable image")
        width, height = read_dimensions(data)

        asset_id = uuid.uuid4()
        storage_key = asset_storage_key(project.id, asset_id, extension)
        self.storage.upload(storage_key, data, mime_type)

        asset = Asset(
            id=asset_id,
            project_id=project.id,
            storage_key=storage_key,
            type=asset_type.value,
            original_filename=filename,
            mime_type=mime_type,
            size_bytes=len(data),
            width=width,
            height=height,
        )
        self.db.add(asset)
        self.db.commit()
        self.db.refresh(asset)
        logger.info(
            "Asset created",
            asset_id=str(asset.id),
            project_id=str(project.id),
            user_id=str(user_id),
            asset_type=asset.type,
            size_bytes=asset.size_bytes
        )
        return asset

    def soft_delete_asset(self, asset_id: UUID, user_id: UUID) -> Asset:
        """Tombstone an asset; job snapshots that reference it are kept"""
        asset = self.get_asset(asset_id, user_id)
        asset.deleted_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(asset)
        logger.info("Asset soft-deleted", asset_id=str(asset.id), user_id=str(user_id))
        return asset

    def create_signed_url(self, asset_id: UUID, user_id: UUID) -> str:
        asset = self.get_asset(asset_id, user_id)
        return self.storage.create_signed_url(asset.storage_key, settings.SIGNED_URL_TTL_SECONDS)
