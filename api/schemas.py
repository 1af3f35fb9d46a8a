"""Pydantic models for API request/response schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class MatchRequest(BaseModel):
    """Request model for sponsor matching."""

    tags: list[str] = Field(
        default_factory=list, description="Respondent interest tags across all survey questions"
    )
    event_id: Optional[str] = Field(
        default=None, description="Event whose sponsors are eligible (resolved server-side)"
    )
    event_company_ids: Optional[list[str]] = Field(
        default=None, description="Explicit company id scope; overrides event_id when given"
    )
    include_debug: bool = Field(default=False, description="Attach the ranked score table")

    model_config = {
        "json_schema_extra": {
            "example": {
                "tags": ["education", "cram_school", "age_4_6"],
                "event_id": "evt-summer",
                "include_debug": True,
            }
        }
    }


class CreativesInfo(BaseModel):
    short: str = ""
    preview: str = ""
    full: str = ""


class CompanyInfo(BaseModel):
    """Company payload handed to the renderer."""

    company_id: str
    company_name: str
    tier: str = Field(..., description="platinum, gold, silver or bronze")
    tags: list[str] = Field(default_factory=list)
    creatives: CreativesInfo
    logo_url: str = ""
    offer_text: str = ""
    offer_url: str = ""
    coupon_code: Optional[str] = None


class ScoreBreakdownInfo(BaseModel):
    tag_match_score: int
    age_match_bonus: int
    category_breadth: int
    tier_bonus: int
    tag_match_details: list[str] = Field(default_factory=list)


class CompanyScoreInfo(BaseModel):
    company_id: str
    company_name: str
    tier: str
    total_score: int
    breakdown: ScoreBreakdownInfo


class MatchDebugInfo(BaseModel):
    all_scores: list[CompanyScoreInfo] = Field(..., description="Every candidate, ranked")
    platinum_scores: list[CompanyScoreInfo] = Field(..., description="Platinum candidates, ranked")
    reason: str = Field(..., description="One-line rationale per slot")


class MatchResponse(BaseModel):
    """Response model for sponsor matching."""

    platinum_cm: Optional[CompanyInfo] = Field(None, description="Fixed short-slot creative")
    matched_cm: Optional[CompanyInfo] = Field(None, description="Variable-slot creative")
    debug: Optional[MatchDebugInfo] = None


class CompanyListResponse(BaseModel):
    """Response model for company list."""

    total: int = Field(..., description="Total number of companies in the catalog")
    companies: list[CompanyInfo]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    companies_loaded: int = Field(..., description="Number of companies in the catalog")
    events_loaded: int = Field(..., description="Number of event scopes")


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str = Field(..., description="Error message")
