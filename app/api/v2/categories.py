"""Category API endpoints."""

from fastapi import APIRouter, HTTPException, Query, status

from app.core.config import get_settings
from app.core.deps import DBSession
from app.schemas.app import AppQueryParams
from app.services.app_service import AppService, parse_tags
from app.services.category_service import CategoryService

router = APIRouter()
settings = get_settings()


@router.get("")
async def get_categories(
    db: DBSession,
) -> dict:
    """List all categories."""
    category_service = CategoryService(db)
    categories = await category_service.get_all_dto()
    return {
        "categories": [c.model_dump() for c in categories],
        "success": True,
    }


@router.get("/{category_name}/apps")
async def get_apps_by_category(
    category_name: str,
    db: DBSession,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1),
    platform: str | None = Query(None),
    architecture: str | None = Query(None),
    tags: str | None = Query(None),
    size_range: str | None = Query(None, alias="sizeRange"),
    sort_by: str = Query("newest", alias="sortBy"),
) -> dict:
    """
    List apps in a category.

    - **sizeRange**: 5-10, 10-20, 20-40, 50-80, 80-100, 100-150 or 150+ (GB)
    - **sortBy**: newest (default), oldest, popular, sizeAsc, sizeDesc, relevance

    Responds 404 when the category is unknown or has no matching apps.
    Paid apps are always listed without their download link.
    """
    category = await CategoryService(db).get_by_name(category_name)
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found",
        )

    params = AppQueryParams(
        page=page,
        limit=limit,
        platform=platform,
        architecture=architecture,
        tags=parse_tags(tags),
        size_range=size_range,
        sort_by=sort_by,
    )

    app_service = AppService(db)
    apps, total = await app_service.list_apps(params, category_id=category.id)

    if not apps:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No apps found for this category",
        )

    return {
        "apps": [app.to_response(redact=True) for app in apps],
        "total": total,
        "success": True,
    }
