import httpx
from typing import Any, Optional
from pydantic import ValidationError

from core.config import settings
from core.logging import get_logger
from schemas.content_analysis import AnalysisType, ContentAnalysisRequest, ContentAnalysisResult


logger = get_logger(__name__)


class ContentAnalysisService:
    """Thin client for the scam content-analysis endpoint.

    The classifier behind it is opaque to this service: requests go out
    as {type, content, userId, context} and come back as
    {analysis, riskLevel, recommendations}.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url if base_url is not None else settings.CONTENT_ANALYSIS_URL
        self.timeout = timeout or settings.CONTENT_ANALYSIS_TIMEOUT
        self.transport = transport
        if not self.base_url:
            logger.warning("CONTENT_ANALYSIS_URL not configured; content analysis will be disabled")

    def _is_enabled(self) -> bool:
        return bool(self.base_url)

    async def analyze(
        self,
        analysis_type: AnalysisType,
        content: str,
        user_id: Optional[str] = None,
        context: Optional[Any] = None,
    ) -> Optional[ContentAnalysisResult]:
        if not self._is_enabled():
            return None

        body = ContentAnalysisRequest(
            type=analysis_type,
            content=content,
            user_id=user_id,
            context=context,
        ).to_wire()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(self.base_url, json=body)
                resp.raise_for_status()
                result = ContentAnalysisResult.model_validate(resp.json())
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.error(f"Content analysis request failed: {str(e)}")
            return None

        logger.info(
            "Content analysis completed",
            user_id=user_id,
            analysis_type=body["type"],
            risk_level=result.risk_level.value,
        )
        return result


content_analysis_service = ContentAnalysisService()
