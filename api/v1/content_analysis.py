"""
Content analysis pass-through.

Forwards call, email and website checks to the analysis collaborator.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import get_content_analysis_service
from schemas.content_analysis import ContentAnalysisRequest
from services.content_analysis_service import ContentAnalysisService

router = APIRouter()


@router.post("")
async def analyze_content(
    request: ContentAnalysisRequest,
    service: ContentAnalysisService = Depends(get_content_analysis_service),
):
    result = await service.analyze(
        request.type,
        request.content,
        user_id=request.user_id,
        context=request.context,
    )
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Content analysis unavailable",
        )
    return result.to_wire()
