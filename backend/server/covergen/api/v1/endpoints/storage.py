"""
Signed blob download endpoint for the local storage backend
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from covergen.core.deps import get_blob_storage
from covergen.core.security import verify_storage_token
from covergen.services.image_processing import detect_mime_type
from covergen.services.storage import BlobStorage

router = APIRouter()


@router.get("/storage/{key:path}")
async def download_blob(
    key: str,
    token: str = Query(...),
    storage: BlobStorage = Depends(get_blob_storage)
):
    """
    Serve a stored blob when the signed token matches the key and has not expired
    """
    if not verify_storage_token(token, key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired download link",
        )

    data = storage.download(key)
    return Response(
        content=data,
        media_type=detect_mime_type(data) or "application/octet-stream",
        headers={"Cache-Control": "private, max-age=300"}
    )
