"""
Temporal Signature Engine: API Server
=====================================

HTTP surface over one SignatureEngine instance.

Endpoints:
- GET    /health                  -> Engine status
- POST   /api/v1/signatures       -> Extract a signature from events
- POST   /api/v1/similarity       -> Compare two signatures
- POST   /api/v1/matches          -> Rank a corpus against a signature
- POST   /api/v1/predictions      -> Trajectory prediction
- POST   /api/v1/sustainability   -> Sustainability assessment
- GET    /api/v1/cache/stats      -> Per-cache statistics
- DELETE /api/v1/cache            -> Clear all caches
- GET    /api/v1/audit            -> Audit report

Usage:
    uvicorn signature_engine.api.server:create_app --factory --reload
"""
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import EngineConfig
from ..engine import SignatureEngine
from .mapper import (
    cache_stats_to_model,
    events_to_raw,
    match_to_model,
    pattern_from_model,
    prediction_to_model,
    signature_from_model,
    signature_to_model,
    sustainability_to_model,
)
from .models import (
    CacheStatsModel,
    MatchRequest,
    MatchResponse,
    PredictionRequest,
    PredictionResponse,
    SignatureModel,
    SignatureRequest,
    SimilarityRequest,
    SimilarityResponse,
    SustainabilityRequest,
    SustainabilityResponse,
)


def get_engine(request: Request) -> SignatureEngine:
    return request.app.state.engine


def create_app(
    config: Optional[EngineConfig] = None,
    engine: Optional[SignatureEngine] = None
) -> FastAPI:
    """
    Build an app bound to its own engine.

    Without arguments the engine is configured from TSE_* environment
    variables.
    """
    engine = engine or SignatureEngine(config or EngineConfig.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.engine.observability.log_audit("startup", stage="pipeline")
        yield
        app.state.engine.observability.log_audit("shutdown", stage="pipeline")

    app = FastAPI(
        title="Temporal Signature Engine API",
        version="0.1.0",
        description="Signature extraction, pattern matching and trajectory prediction",
        lifespan=lifespan
    )
    app.state.engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    # =========================================================================
    # ENDPOINTS
    # =========================================================================

    @app.get("/health")
    async def health_check(request: Request):
        """System status."""
        adapter = get_engine(request).adapter
        return {"status": "online", "domain": adapter.domain}

    @app.post("/api/v1/signatures", response_model=SignatureModel)
    async def extract_signature(body: SignatureRequest, request: Request):
        signature = get_engine(request).extract(events_to_raw(body.events))
        return signature_to_model(signature)

    @app.post("/api/v1/similarity", response_model=SimilarityResponse)
    async def compare_signatures(body: SimilarityRequest, request: Request):
        similarity = get_engine(request).similarity(
            signature_from_model(body.a),
            signature_from_model(body.b)
        )
        return SimilarityResponse(similarity=similarity)

    @app.post("/api/v1/matches", response_model=MatchResponse)
    async def find_matches(body: MatchRequest, request: Request):
        engine = get_engine(request)
        corpus = None
        if body.corpus is not None:
            corpus = [pattern_from_model(p) for p in body.corpus]

        matches = engine.find_matches(
            signature_from_model(body.signature),
            corpus,
            min_similarity=body.min_similarity,
            limit=body.limit,
            archetypes=body.archetypes,
            outcomes=body.outcomes
        )
        return MatchResponse(
            matches=[match_to_model(m) for m in matches],
            outcome_probabilities=engine.outcome_probabilities(matches),
            confidence=engine.pipeline.matcher.confidence(matches)
        )

    @app.post("/api/v1/predictions", response_model=PredictionResponse)
    async def predict_trajectory(body: PredictionRequest, request: Request):
        engine = get_engine(request)
        signature = signature_from_model(body.signature)
        corpus = None
        if body.corpus is not None:
            corpus = [pattern_from_model(p) for p in body.corpus]

        matches = engine.find_matches(signature, corpus)
        prediction = engine.predict(
            signature,
            matches,
            body.current_position,
            body.total_expected_length
        )
        return prediction_to_model(prediction, engine.divergence(signature, matches))

    @app.post("/api/v1/sustainability", response_model=SustainabilityResponse)
    async def assess_sustainability(body: SustainabilityRequest, request: Request):
        assessment = get_engine(request).sustainability(signature_from_model(body.signature))
        return sustainability_to_model(assessment)

    @app.get("/api/v1/cache/stats", response_model=Dict[str, CacheStatsModel])
    async def cache_stats(request: Request):
        stats = get_engine(request).cache_stats()
        return {name: cache_stats_to_model(s) for name, s in stats.items()}

    @app.delete("/api/v1/cache")
    async def clear_cache(request: Request):
        get_engine(request).clear_caches()
        return {"cleared": True}

    @app.get("/api/v1/audit")
    async def audit_report(request: Request):
        return get_engine(request).audit_report()

    return app
