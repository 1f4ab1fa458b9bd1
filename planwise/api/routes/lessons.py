import logging

from fastapi import APIRouter, Depends
from starlette.responses import Response

from planwise.ai.extractors import SectionKind, extract_with_strategy
from planwise.ai.illustrations import IllustrationService
from planwise.ai.orchestrator import LessonOrchestrator
from planwise.ai.pipeline.contracts import LessonRequest
from planwise.api.deps import get_illustration_service, get_orchestrator
from planwise.api.models import ExtractQuestionsResponse, ExtractRequest, GenerateLessonResponse
from planwise.api.msgspec_utils import encode_msgspec_response

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/generate")
async def generate_lesson(
  request: LessonRequest,
  orchestrator: LessonOrchestrator = Depends(get_orchestrator),  # noqa: B008
  illustrations: IllustrationService | None = Depends(get_illustration_service),  # noqa: B008
) -> Response:
  """Generate, normalize and gate a lesson, then attach illustrations when requested."""
  result = await orchestrator.generate(request)

  if request.generate_images and illustrations is not None:
    await illustrations.illustrate(result.document)

  logger.info("Lesson generated topic=%r attempts=%d", request.topic, result.attempt_count)
  return encode_msgspec_response(GenerateLessonResponse(lesson=result.document, attempts=result.attempt_count))


@router.post("/extract/{kind}")
async def extract_questions(kind: SectionKind, payload: ExtractRequest) -> Response:
  """Find comprehension, discussion or quiz questions in a raw or normalized document."""
  strategy, questions = extract_with_strategy(kind, payload.document)
  return encode_msgspec_response(ExtractQuestionsResponse(strategy=strategy, questions=questions))
