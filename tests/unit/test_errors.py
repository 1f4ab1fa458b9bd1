import pytest

from planwise.ai.errors import GenerationExhausted, ProviderTransportError, QualityRejected, UnparsableResponse, is_policy_refusal
from planwise.ai.orchestrator import AttemptOutcome, AttemptRecord, AttemptStage


@pytest.mark.parametrize(
  "message",
  [
    "Request blocked by the content policy",
    "Gemini prompt was blocked: SAFETY",
    "This topic is not appropriate for generation.",
  ],
)
def test_refusal_phrasing_is_recognised(message: str) -> None:
  assert is_policy_refusal(RuntimeError(message))


def test_ordinary_failures_are_not_refusals() -> None:
  assert not is_policy_refusal("Connection reset by peer")
  assert not is_policy_refusal(ValueError("Expecting value"))


def test_transport_error_records_the_provider() -> None:
  error = ProviderTransportError("Gemini request timed out after 60s", provider="gemini")

  assert error.provider == "gemini"
  assert str(error) == "Gemini request timed out after 60s"
  assert ProviderTransportError("boom").provider is None


def test_unparsable_response_carries_position() -> None:
  error = UnparsableResponse("Expecting ',' delimiter", offset=42, context='"a": 1 "b"')

  assert error.offset == 42
  assert error.reason == "Expecting ',' delimiter"
  assert "offset 42" in str(error)
  assert '"a": 1 "b"' in str(error)


def test_quality_rejection_joins_violations() -> None:
  assert str(QualityRejected(["one", "two"])) == "one; two"
  assert QualityRejected([]).violations == []


def test_exhaustion_exposes_attempt_logs() -> None:
  record = AttemptRecord(number=1, stage=AttemptStage.PARSE, outcome=AttemptOutcome.FAILED, duration_ms=12, error_type="UnparsableResponse", message="bad")

  error = GenerationExhausted("failed", attempts=[record])

  assert error.logs == ["Attempt 1 failed at parse (12 ms): UnparsableResponse: bad"]
