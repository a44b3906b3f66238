"""
Visitor-facing pages.

Each endpoint returns the JSON document a front end renders for the page:
home, about, the style preference form and the explore page.
"""

import structlog
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from fashion_api.config import Settings
from fashion_api.dependencies import (
    get_explore_service,
    get_settings_dependency,
    get_style_repository,
)
from fashion_api.models.explore import ExplorePage
from fashion_api.models.style import StyleListPage
from fashion_api.repositories.style_repo import StyleRepository
from fashion_api.services.explore_service import ExploreService

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Pages"])


@router.get("/", summary="Home page")
def home() -> dict:
    return {"title": "Home"}


@router.get("/about", summary="About page")
def about() -> dict:
    return {"title": "About"}


@router.get("/styleform", response_model=StyleListPage, summary="Style preference form")
def style_form(
    style_repo: StyleRepository = Depends(get_style_repository)
) -> StyleListPage:
    """List the styles a visitor can choose from."""
    return StyleListPage(title="Style Form", styles=style_repo.list_styles())


@router.get(
    "/explore",
    response_model=ExplorePage,
    summary="Explore page",
    description="""
    Current weather for a city with photos matching the chosen styles
    and accessories suited to the weather.

    **Query Parameters:**
    - city: City name (default: toronto)
    - gender: Gender keyword (default: Woman)
    - styles: Chosen style names, repeatable

    **Error Responses:**
    - 404: City not found
    - 500: Weather or photo service failure
    """,
)
async def explore(
    city: Optional[str] = Query(default=None),
    gender: Optional[str] = Query(default=None),
    styles: List[str] = Query(default=[]),
    explore_service: ExploreService = Depends(get_explore_service),
    settings: Settings = Depends(get_settings_dependency)
) -> ExplorePage:
    city = city or settings.default_city
    gender = gender or settings.default_gender

    logger.info("explore_requested", city=city, gender=gender, styles=styles)

    return await explore_service.explore(city=city, gender=gender, styles=styles)
