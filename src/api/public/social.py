"""
Social qualification API

- POST /api/check-user-exists
- POST /api/social-qualify-form
- POST /api/contractor-request
- GET  /api/reddit/top
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from src.clients.reddit_client import (
    DEFAULT_SUBREDDIT,
    DEFAULT_TOP_LIMIT,
    MAX_TOP_LIMIT,
    RedditClient,
    get_reddit_client,
)
from src.database import get_db
from src.services.contractor import ContractorRequestService
from src.services.qualification import (
    ApplicantInput,
    CompanyCatalog,
    QualificationService,
    load_company_catalog,
)

router = APIRouter(prefix="/api", tags=["Social Qualification"])

_catalog: CompanyCatalog | None = None


def get_company_catalog() -> CompanyCatalog:
    global _catalog
    if _catalog is None:
        _catalog = load_company_catalog()
    return _catalog


# ============ Schema ============
# Every field is optional at the schema level so missing values reach the
# service and come back as a 400 ValidationError with a readable message.


class _CamelModel(BaseModel):
    # Phones often arrive as JSON numbers
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class CheckUserExistsRequest(_CamelModel):
    email: str | None = None
    phone: str | None = None


class SocialQualifyRequest(_CamelModel):
    email: str | None = None
    phone: str | None = None
    reddit_username: str | None = Field(None, alias="redditUsername")
    twitter_username: str | None = Field(None, alias="twitterUsername")
    youtube_username: str | None = Field(None, alias="youtubeUsername")
    facebook_username: str | None = Field(None, alias="facebookUsername")


class ContractorRequestBody(_CamelModel):
    email: str | None = None
    company_slug: str | None = Field(None, alias="companySlug")
    company_name: str | None = Field(None, alias="companyName")


# ============ Routes ============


@router.post("/check-user-exists")
async def check_user_exists(
    body: CheckUserExistsRequest,
    db: Session = Depends(get_db),
    reddit: RedditClient = Depends(get_reddit_client),
    catalog: CompanyCatalog = Depends(get_company_catalog),
) -> Any:
    service = QualificationService(db, reddit, catalog=catalog)
    exists = service.check_user_exists(body.email, body.phone)
    return {"success": True, "userExists": exists}


@router.post("/social-qualify-form")
async def social_qualify_form(
    body: SocialQualifyRequest,
    db: Session = Depends(get_db),
    reddit: RedditClient = Depends(get_reddit_client),
    catalog: CompanyCatalog = Depends(get_company_catalog),
) -> Any:
    data = ApplicantInput.build(
        email=body.email,
        phone=body.phone,
        reddit_username=body.reddit_username,
        twitter_username=body.twitter_username,
        youtube_username=body.youtube_username,
        facebook_username=body.facebook_username,
    )
    result = await QualificationService(db, reddit, catalog=catalog).submit(data)
    return result.to_dict()


@router.post("/contractor-request")
async def contractor_request(
    body: ContractorRequestBody,
    db: Session = Depends(get_db),
) -> Any:
    result = await ContractorRequestService(db).submit(
        body.email, body.company_slug, body.company_name
    )
    return result.to_dict()


@router.get("/reddit/top")
async def reddit_top_posts(
    subreddit: str = Query(DEFAULT_SUBREDDIT, max_length=64),
    limit: int = Query(DEFAULT_TOP_LIMIT, ge=1, le=MAX_TOP_LIMIT),
    reddit: RedditClient = Depends(get_reddit_client),
) -> Any:
    posts = await reddit.top_posts(subreddit, limit)
    return {"success": True, "posts": [p.to_dict() for p in posts]}
