"""Apps API endpoints - catalog browsing, paid access and admin management."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status
from loguru import logger

from app.core.config import get_settings
from app.core.deps import AdminUserRequired, CurrentUserRequired, DBSession, Media
from app.core.security import can_download
from app.schemas.app import AppCreate, AppQueryParams, AppUpdate
from app.services.app_service import (
    AppService,
    count_tags,
    parse_system_requirements,
    parse_tags,
)
from app.services.category_service import CategoryService
from app.services.media_service import staged_uploads

router = APIRouter()
settings = get_settings()


def _validate_tag_count(raw_tags: str | None) -> None:
    if count_tags(raw_tags) > settings.max_tags:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot have more than {settings.max_tags} tags",
        )


def _parse_requirements(raw: str | None) -> Any:
    try:
        return parse_system_requirements(raw)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.get("")
async def get_apps(
    db: DBSession,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1),
    q: str | None = Query(None),
    platform: str | None = Query(None),
    architecture: str | None = Query(None),
    tags: str | None = Query(None),
    sort_by: str = Query("popular", alias="sortBy"),
) -> dict:
    """
    List apps with filtering, sorting and pagination.

    - **q**: Case-insensitive title search
    - **platform** / **architecture**: Exact match filters
    - **tags**: Comma-separated; apps must carry all of them
    - **sortBy**: popular, newest, oldest, sizeAsc, sizeDesc, relevance
    - **page** / **limit**: 1-based page and page size

    Paid apps are listed without their download link.
    """
    params = AppQueryParams(
        page=page,
        limit=limit,
        q=q,
        platform=platform,
        architecture=architecture,
        tags=parse_tags(tags),
        sort_by=sort_by,
    )

    app_service = AppService(db)
    apps, total = await app_service.list_apps(params)

    return {
        "apps": [app.to_response(redact=True) for app in apps],
        "total": total,
        "success": True,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_app(
    db: DBSession,
    current_user: AdminUserRequired,
    media: Media,
    title: str = Form(...),
    description: str | None = Form(None),
    platform: str | None = Form(None),
    architecture: str | None = Form(None),
    tags: str | None = Form(None),
    is_paid: bool = Form(False, alias="isPaid"),
    price: float | None = Form(None),
    download_link: str | None = Form(None, alias="downloadLink"),
    size: str | None = Form(None),
    category: str | None = Form(None),
    system_requirements: str | None = Form(None, alias="systemRequirements"),
    release_date: datetime | None = Form(None, alias="releaseDate"),
    thumbnail: list[UploadFile] | None = File(None),
    cover_img: UploadFile | None = File(None, alias="coverImg"),
) -> dict:
    """
    Create an app (admin only).

    Multipart form with one or more **thumbnail** files and an optional
    **coverImg**. **tags** is comma-separated (max 15) and
    **systemRequirements** is a JSON string. The **category** is created
    if it does not exist yet.
    """
    _validate_tag_count(tags)
    tag_list = parse_tags(tags)

    if not category:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Category is required",
        )

    requirements = _parse_requirements(system_requirements)

    files = {
        "thumbnail": thumbnail or [],
        "coverImg": [cover_img] if cover_img else [],
    }
    async with staged_uploads(files) as staged:
        if not staged["thumbnail"]:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No thumbnails uploaded",
            )

        category_obj = await CategoryService(db).get_or_create(category)

        thumbnail_urls = []
        for path in staged["thumbnail"]:
            url = await media.upload(path)
            if not url:
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Failed to upload thumbnail",
                )
            thumbnail_urls.append(url)

        cover_url = None
        if staged["coverImg"]:
            cover_url = await media.upload(staged["coverImg"][0])

        data = AppCreate(
            title=title,
            description=description,
            platform=platform,
            architecture=architecture,
            tags=tag_list,
            is_paid=is_paid,
            price=price,
            download_link=download_link,
            size=size,
            category=category,
            system_requirements=requirements,
            release_date=release_date,
        )
        new_app = await AppService(db).create_app(
            data,
            category_obj,
            thumbnails=thumbnail_urls,
            cover_img=cover_url,
        )

    logger.info(f"App '{new_app.id}' created by {current_user.username}")
    return {"newApp": new_app.to_response(redact=False), "success": True}


@router.get("/{app_id}")
async def get_app(
    app_id: str,
    db: DBSession,
) -> dict:
    """
    Get app by ID and count the view.

    Returns the app as read before the view counters were incremented.
    Paid apps are returned without their download link; use
    ``/{app_id}/access`` for the full record.
    """
    app_service = AppService(db)
    app = await app_service.get_app(app_id)

    if not app:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="App not found",
        )

    dto = app_service.to_dto(app, expand_reviews=True)
    await app_service.record_view(app_id)

    return {"app": dto.to_response(redact=True), "success": True}


@router.get("/{app_id}/access")
async def get_paid_app_access(
    app_id: str,
    db: DBSession,
    current_user: CurrentUserRequired,
) -> dict:
    """
    Get a paid app including its download link.

    Requires admin role or a purchase of the app.
    """
    app_service = AppService(db)
    app = await app_service.get_app(app_id)

    if not app:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="App not found",
        )

    if not app.is_paid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This app is free. Access it from the public route.",
        )

    if not can_download(current_user, app.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You need to purchase this app to access it.",
        )

    dto = app_service.to_dto(app, expand_reviews=True)
    return {"app": dto.to_response(redact=False), "success": True}


@router.post("/{app_id}/download")
async def record_download(
    app_id: str,
    db: DBSession,
) -> dict:
    """Record a download and return the new total."""
    app_service = AppService(db)
    total = await app_service.record_download(app_id)

    if total is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="App not found",
        )

    return {
        "message": "Download recorded",
        "totalDownloads": total,
        "success": True,
    }


@router.put("/{app_id}")
async def update_app(
    app_id: str,
    db: DBSession,
    current_user: AdminUserRequired,
    media: Media,
    title: str | None = Form(None),
    description: str | None = Form(None),
    platform: str | None = Form(None),
    architecture: str | None = Form(None),
    tags: str | None = Form(None),
    is_paid: bool | None = Form(None, alias="isPaid"),
    price: float | None = Form(None),
    download_link: str | None = Form(None, alias="downloadLink"),
    size: str | None = Form(None),
    category: str | None = Form(None),
    system_requirements: str | None = Form(None, alias="systemRequirements"),
    release_date: datetime | None = Form(None, alias="releaseDate"),
    thumbnail: list[UploadFile] | None = File(None),
    cover_img: UploadFile | None = File(None, alias="coverImg"),
) -> dict:
    """
    Update an app (admin only).

    Only supplied fields change. New **thumbnail** files replace the
    thumbnail list; a new **coverImg** replaces the cover.
    """
    _validate_tag_count(tags)
    tag_list = parse_tags(tags) if tags else None

    requirements = _parse_requirements(system_requirements) if system_requirements else None

    files = {
        "thumbnail": thumbnail or [],
        "coverImg": [cover_img] if cover_img else [],
    }
    async with staged_uploads(files) as staged:
        app_service = AppService(db)
        app = await app_service.get_app(app_id)

        if not app:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="App not found",
            )

        category_obj = None
        if category:
            category_obj = await CategoryService(db).get_or_create(category)

        cover_url = None
        if staged["coverImg"]:
            cover_url = await media.upload(staged["coverImg"][0])

        thumbnail_urls = None
        if staged["thumbnail"]:
            uploaded = [await media.upload(path) for path in staged["thumbnail"]]
            thumbnail_urls = [url for url in uploaded if url] or None

        data = AppUpdate(
            title=title or None,
            description=description or None,
            platform=platform or None,
            architecture=architecture or None,
            tags=tag_list,
            is_paid=is_paid,
            price=price,
            download_link=download_link or None,
            size=size or None,
            system_requirements=requirements,
            release_date=release_date,
        )
        updated_app = await app_service.update_app(
            app,
            data,
            category=category_obj,
            thumbnails=thumbnail_urls,
            cover_img=cover_url,
        )

    logger.info(f"App '{app_id}' updated by {current_user.username}")
    return {"updatedApp": updated_app.to_response(redact=False), "success": True}


@router.delete("/{app_id}")
async def delete_app(
    app_id: str,
    db: DBSession,
    current_user: AdminUserRequired,
) -> dict:
    """Delete an app (admin only)."""
    app_service = AppService(db)
    success = await app_service.delete_app(app_id)

    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="App not found",
        )

    logger.info(f"App '{app_id}' deleted by {current_user.username}")
    return {"message": "App deleted successfully", "success": True}
