from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status

from grounding.engine import GroundingEngine, get_engine
from grounding.errors import EmbeddingBackendUnavailable, ExtractionFailed, GenerationUnavailable, NoUsableContent
from grounding.models.schemas import (
    CacheClearResponse,
    IngestRequest,
    IngestResponse,
    ReadingRequest,
    ReadingResponse,
    SearchHit,
    SearchRequest,
    SearchResponse,
    StatusResponse,
)
from grounding.rag.generation import ReadingMetadata

router = APIRouter()
logger = logging.getLogger(__name__)


def _check_admin_token(engine: GroundingEngine, x_admin_token: str | None) -> None:
    admin_token = engine.settings.admin_token
    if not admin_token:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Admin token is not configured",
        )
    if x_admin_token != admin_token.get_secret_value():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


@router.post("/admin/ingest", response_model=IngestResponse, summary="Ingest reference document")
async def admin_ingest(
    ingest_request: IngestRequest,
    x_admin_token: str | None = Header(default=None, alias="X-Admin-Token"),
    engine: GroundingEngine = Depends(get_engine),
) -> IngestResponse:
    _check_admin_token(engine, x_admin_token)
    logger.info("Admin ingest requested", extra={"path": ingest_request.document_path, "force": ingest_request.force})

    try:
        summary = await engine.ingest(ingest_request.document_path, force=ingest_request.force)
    except (ExtractionFailed, NoUsableContent) as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"reason": exc.reason, "message": str(exc)},
        ) from exc
    except EmbeddingBackendUnavailable as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"reason": exc.reason, "message": str(exc)},
        ) from exc

    ingestion = summary.status
    response = IngestResponse(
        result="already_processed" if summary.already_processed else "processed",
        status=ingestion.state.value,
        chunks=ingestion.chunk_count,
        embeddings=ingestion.embedding_count,
        total_text_length=ingestion.source_length,
        elapsed_sec=round(summary.elapsed_sec, 2),
    )
    logger.info("Admin ingest completed", extra={"result": response.result, "chunks": response.chunks})
    return response


@router.post("/admin/cache/clear", response_model=CacheClearResponse, summary="Clear query cache")
def admin_clear_cache(
    x_admin_token: str | None = Header(default=None, alias="X-Admin-Token"),
    engine: GroundingEngine = Depends(get_engine),
) -> CacheClearResponse:
    _check_admin_token(engine, x_admin_token)
    return CacheClearResponse(cleared=engine.clear_cache())


@router.get("/api/v1/status", response_model=StatusResponse, summary="Corpus, cache and ingestion status")
def knowledge_status(engine: GroundingEngine = Depends(get_engine)) -> StatusResponse:
    return StatusResponse(**engine.status())


@router.post("/api/v1/search", response_model=SearchResponse, summary="Search the reference document")
async def search(request: SearchRequest, engine: GroundingEngine = Depends(get_engine)) -> SearchResponse:
    query = request.query.strip()
    if not query:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Query must not be empty")

    grounding = await engine.search(query, top_k=request.top_k)
    return SearchResponse(
        source=grounding.provenance.value,
        low_confidence=grounding.low_confidence,
        results=[SearchHit(**result.to_dict()) for result in grounding.results],
        error=grounding.error,
    )


@router.post("/api/v1/reading", response_model=ReadingResponse, summary="Generate a grounded reading")
async def reading(request: ReadingRequest, engine: GroundingEngine = Depends(get_engine)) -> ReadingResponse:
    question = request.question.strip()
    if not question:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Question must not be empty")

    logger.info("Reading request", extra={"len": len(question)})
    try:
        result = await engine.generate_reading(question, request.subject_data)
    except GenerationUnavailable as exc:
        metadata = ReadingMetadata.from_grounding(exc.grounding, model=engine.reading.llm_client.model)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"reason": exc.reason, "message": str(exc), "metadata": metadata.to_dict()},
        ) from exc

    return ReadingResponse(answer=result.answer, metadata=result.metadata.to_dict())


__all__ = ["router"]
