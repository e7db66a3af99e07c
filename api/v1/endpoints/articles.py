# api/v1/endpoints/articles.py
from fastapi import APIRouter

from models.responses import ArticleLink, ArticlesResponse
from services.catalog.config_loader import CategoryNotFoundError, get_category_articles

router = APIRouter()


@router.get("/articles/{category}", response_model=ArticlesResponse)
async def list_articles(category: str):
    try:
        entries = get_category_articles(category)
    except CategoryNotFoundError:
        # the start page just renders an empty list
        entries = []

    return ArticlesResponse(
        articles=[ArticleLink(title=e.display_title, url=str(e.url)) for e in entries]
    )
