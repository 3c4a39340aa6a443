"""Tests for the generation hand-off."""

from unittest.mock import MagicMock

import pytest

from grounding.errors import GenerationUnavailable
from grounding.index.base import CONTEXT_SEPARATOR, Provenance
from grounding.llm.client import LLMClient
from grounding.rag.generation import GenerationPayload, ReadingService
from grounding.rag.prompts import SYSTEM_PROMPT, build_user_prompt

SUBJECT = {
    "name": "Anita",
    "gender": "female",
    "birthDate": "1990-04-12",
    "ascendant": {"sign": "Leo", "degree": "12°"},
    "nakshatra": {"name": "Magha", "lord": {"name": "Ketu"}},
    "planetaryPositions": [
        {"name": "Jupiter", "sign": "Cancer", "degree": "4°", "house": 12, "is_retrograde": True},
    ],
}


@pytest.mark.asyncio
async def test_reading_is_grounded_on_indexed_context(engine, fake_llm):
    await engine.ingest()

    reading = await engine.generate_reading("How is my career?", SUBJECT)

    assert reading.answer == "A grounded reading."
    assert reading.metadata.source == Provenance.INDEXED.value
    assert reading.metadata.chunks_used == reading.grounding.chunks_used
    assert reading.metadata.model == "fake-llm"

    system, user = fake_llm.calls[0]
    assert system["content"] == SYSTEM_PROMPT
    assert "Jupiter brings career growth." in user["content"]
    assert "Anita" in user["content"]
    assert "Question: How is my career?" in user["content"]


@pytest.mark.asyncio
async def test_reading_without_corpus_uses_static_context(engine, fake_llm):
    reading = await engine.generate_reading("What does Saturn show?")

    assert reading.metadata.source == Provenance.STATIC_DEFAULT.value
    assert reading.grounding.low_confidence
    assert CONTEXT_SEPARATOR in fake_llm.calls[0][1]["content"]


@pytest.mark.asyncio
async def test_llm_failure_keeps_grounding_for_retry(engine, fake_llm):
    await engine.ingest()
    fake_llm.error = ConnectionError("rate limited")

    with pytest.raises(GenerationUnavailable) as excinfo:
        await engine.generate_reading("career", SUBJECT)

    err = excinfo.value
    assert err.reason == "generation_failed"
    assert err.grounding.provenance is Provenance.INDEXED
    assert err.payload.grounding_context == err.grounding.context
    assert err.payload.subject_data["name"] == "Anita"

    fake_llm.error = None
    reading = await engine.reading.complete(err.payload, err.grounding)
    assert reading.answer == "A grounded reading."
    assert reading.grounding is err.grounding


@pytest.mark.asyncio
async def test_empty_answer_is_a_generation_failure(engine, fake_llm):
    fake_llm.answer = "   "

    with pytest.raises(GenerationUnavailable, match="empty answer"):
        await engine.generate_reading("career")


@pytest.mark.asyncio
async def test_payload_context_joins_results_with_separator(engine, fake_llm):
    await engine.ingest()
    grounding = await engine.search("career growth")

    payload = GenerationPayload(grounding_context=grounding.context, user_question="career growth")
    await ReadingService(engine.orchestrator, fake_llm).complete(payload, grounding)

    assert grounding.context == CONTEXT_SEPARATOR.join(r.content for r in grounding.results)
    assert grounding.context_length == len(grounding.context)


def test_prompt_fills_missing_subject_fields():
    prompt = build_user_prompt("career", {}, "")

    assert "- Name: the native" in prompt
    assert "- Birth date: Not specified" in prompt
    assert "Planetary positions not available" in prompt
    assert "Houses data not available" in prompt
    assert "(none)" in prompt


def test_prompt_formats_chart_details():
    prompt = build_user_prompt("career", SUBJECT, "context passage")

    assert "- Ascendant: Leo 12°" in prompt
    assert "- Nakshatra: Magha (Lord: Ketu)" in prompt
    assert "- Jupiter: Cancer 4° in house 12, Nakshatra: Unknown (Retrograde)" in prompt
    assert "context passage" in prompt


def test_llm_client_sends_chat_request():
    openai_client = MagicMock()
    openai_client.chat.completions.create.return_value = MagicMock(
        choices=[MagicMock(message=MagicMock(content="Saturn delays, then rewards."))]
    )
    llm = LLMClient(model="gpt-test", temperature=0.2, max_tokens=256, client=openai_client)

    answer = llm.chat([{"role": "user", "content": "career"}])

    assert answer == "Saturn delays, then rewards."
    openai_client.chat.completions.create.assert_called_once_with(
        model="gpt-test",
        temperature=0.2,
        messages=[{"role": "user", "content": "career"}],
        max_tokens=256,
    )


def test_llm_client_without_choices_returns_empty_answer():
    openai_client = MagicMock()
    openai_client.chat.completions.create.return_value = MagicMock(choices=[])

    assert LLMClient(client=openai_client).chat([]) == ""
