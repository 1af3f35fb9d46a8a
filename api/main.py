"""FastAPI service exposing the sponsor matcher.

Run with:
    SPONSOR_CATALOG_PATH=data/sponsor_catalog.csv \
    SPONSOR_EVENTS_PATH=data/event_scopes.json \
    uvicorn api.main:app --port 8000
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from core import ScoringWeights
from sponsor_matcher import company_to_dict, demo_match, match_result_to_dict

from .catalog_index import CatalogIndex, get_catalog_index, init_catalog_index
from .schemas import (
    CompanyInfo,
    CompanyListResponse,
    ErrorResponse,
    HealthResponse,
    MatchRequest,
    MatchResponse,
)

load_dotenv()

DEFAULT_CATALOG_PATH = "data/sponsor_catalog.csv"
DEFAULT_EVENTS_PATH = "data/event_scopes.json"


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        get_catalog_index()
    except RuntimeError:
        catalog_path = os.getenv("SPONSOR_CATALOG_PATH", DEFAULT_CATALOG_PATH)
        events_path = os.getenv("SPONSOR_EVENTS_PATH", DEFAULT_EVENTS_PATH)
        index = init_catalog_index(catalog_path, events_path, ScoringWeights.from_env())
        logging.info(f"Loaded {len(index.companies)} companies, {index.total_events} events")
    yield


app = FastAPI(
    title="Sponsor Matcher API",
    description="Selects platinum and matched sponsor creatives for survey respondents",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthResponse)
async def health_check(index: CatalogIndex = Depends(get_catalog_index)):
    """Health check endpoint"""
    return HealthResponse(
        companies_loaded=len(index.companies),
        events_loaded=index.total_events,
    )


@app.get("/companies", response_model=CompanyListResponse)
async def list_companies(index: CatalogIndex = Depends(get_catalog_index)):
    """List the sponsor catalog in admin order"""
    companies = [
        CompanyInfo.model_validate(company_to_dict(c))
        for c in index.companies
    ]
    return CompanyListResponse(total=len(companies), companies=companies)


def _resolve_event_scope(request: MatchRequest, index: CatalogIndex) -> Optional[List[str]]:
    """Explicit company ids win over event_id; an unknown event is a 404."""
    if request.event_company_ids is not None:
        return request.event_company_ids
    if not request.event_id:
        return None
    if not index.has_event(request.event_id):
        raise HTTPException(status_code=404, detail=f"Event not found: {request.event_id}")
    return index.event_company_ids(request.event_id)


@app.post(
    "/match",
    response_model=MatchResponse,
    responses={404: {"model": ErrorResponse}},
)
def match_sponsors(request: MatchRequest, index: CatalogIndex = Depends(get_catalog_index)):
    """Select the platinum and matched creatives for one respondent"""
    result = index.matcher.match(
        request.tags,
        _resolve_event_scope(request, index),
        include_debug=request.include_debug,
    )
    return MatchResponse.model_validate(match_result_to_dict(result))


@app.post(
    "/match/demo",
    response_model=MatchResponse,
    responses={404: {"model": ErrorResponse}},
)
def match_sponsors_demo(request: MatchRequest, index: CatalogIndex = Depends(get_catalog_index)):
    """Simplified demo matching, scoped the same way as /match"""
    result = demo_match(index.companies, request.tags, _resolve_event_scope(request, index))
    return MatchResponse.model_validate(match_result_to_dict(result))
