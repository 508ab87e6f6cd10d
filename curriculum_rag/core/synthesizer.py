"""
Grounded answer synthesis.

Renders the assembled context as numbered sources, asks the chat model
for an answer that cites them as [n], and accounts tokens and cost. The
result also carries the model's self-rated confidence, the sources grouped
by document, and pairs of sources that look contradictory.

Dependencies: langchain_core, tenacity, curriculum_rag.core.memory_integrator
System role: Synthesis stage of the query pipeline
"""

import logging
import re
from dataclasses import dataclass, field
from uuid import UUID

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage
from langchain_core.prompts import ChatPromptTemplate
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential_jitter

from curriculum_rag.core.exceptions import ProviderError
from curriculum_rag.core.memory_integrator import AssembledContext
from curriculum_rag.core.text_utils import estimate_tokens, sanitize_for_prompt, tokenize
from curriculum_rag.models.retrieval import RetrievedChunk

logger = logging.getLogger(__name__)

# USD per million tokens.
PRICING: dict[str, dict[str, float]] = {
    "gemini-2.5-pro": {"input": 1.25, "output": 10.00},
    "gemini-2.5-flash": {"input": 0.30, "output": 2.50},
    "gemini-2.5-flash-lite": {"input": 0.10, "output": 0.40},
    "gemini-2.0-flash": {"input": 0.10, "output": 0.40},
}
DEFAULT_PRICING = PRICING["gemini-2.5-flash"]

# Used when the model does not rate itself.
DEFAULT_CONFIDENCE = 0.5

MIN_SHARED_TERMS = 3

_CONFIDENCE_RE = re.compile(r"^\s*confidence\s*:\s*(\d*\.?\d+)\s*$", re.IGNORECASE | re.MULTILINE)
_NEGATION_RE = re.compile(r"\b(not|no|never|cannot|isn't|aren't|doesn't)\b")

SYSTEM_PROMPT = """You are a study assistant for an online curriculum. Answer learner questions using the numbered sources provided.

## Instructions
1. Use ONLY the numbered sources to answer
2. Cite every claim with the source number in brackets, e.g. [1] or [2][3]
3. If the sources do not contain enough information, say so clearly instead of guessing
4. If sources contradict each other, acknowledge the contradiction and cite both sides
5. Be concise but thorough
6. End with a final line "Confidence: <0.0-1.0>" rating how well the sources support your answer

## Conversation History
Earlier turns, when present, explain follow-up questions. They are not sources and must never be cited."""

SYNTHESIS_PROMPT = ChatPromptTemplate.from_messages([
    ("system", SYSTEM_PROMPT),
    ("human", """{history}

Sources:
{sources}

Question: {question}"""),
])


@dataclass
class DocumentSources:
    """Source numbers that came from one document."""

    document_id: UUID
    document_title: str
    source_numbers: list[int] = field(default_factory=list)


@dataclass
class SynthesisResult:
    """Answer text with usage accounting."""

    answer: str
    input_tokens: int
    output_tokens: int
    cost: float
    model: str
    confidence: float = DEFAULT_CONFIDENCE
    contradictions: list[str] = field(default_factory=list)
    documents: list[DocumentSources] = field(default_factory=list)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


def calculate_cost(
    model: str,
    input_tokens: int,
    output_tokens: int,
    pricing: dict[str, dict[str, float]] = PRICING,
) -> float:
    """
    Cost of a call in USD.

    Args:
        model: Model identifier
        input_tokens: Prompt tokens
        output_tokens: Completion tokens
        pricing: Per-model USD-per-million rates

    Returns:
        input * input_rate + output * output_rate; unknown models use the default rate
    """
    rates = pricing.get(model, DEFAULT_PRICING)
    return (input_tokens * rates["input"] + output_tokens * rates["output"]) / 1_000_000


def format_sources(context: AssembledContext) -> str:
    """Render chunk items as numbered sources in context order."""
    blocks = []
    for number, chunk in enumerate(context.chunks, start=1):
        header = f"[{number}] {chunk.document_title}"
        if chunk.heading:
            header += f" > {chunk.heading}"
        blocks.append(f"{header}\n{chunk.content}")
    return "\n\n".join(blocks) if blocks else "(no sources found)"


def format_history(context: AssembledContext) -> str:
    """Render surviving memory turns, or an empty string."""
    lines = [f"{item.role}: {item.content}" for item in context.items if item.is_memory]
    if not lines:
        return ""
    return "Conversation history:\n" + "\n".join(lines)


def group_by_document(context: AssembledContext) -> list[DocumentSources]:
    """Source numbers grouped by document, in order of first appearance."""
    groups: dict[UUID, DocumentSources] = {}
    for number, chunk in enumerate(context.chunks, start=1):
        group = groups.get(chunk.document_id)
        if group is None:
            group = groups[chunk.document_id] = DocumentSources(
                document_id=chunk.document_id,
                document_title=chunk.document_title,
            )
        group.source_numbers.append(number)
    return list(groups.values())


def detect_contradictions(chunks: list[RetrievedChunk]) -> list[str]:
    """
    Flag source pairs that may disagree.

    A pair is flagged when exactly one of the two texts is negated and
    they share at least MIN_SHARED_TERMS words longer than four letters.
    This is a cheap lexical hint, not a semantic check.

    Args:
        chunks: Sources in prompt order

    Returns:
        One message per flagged pair, naming both source numbers and up to
        three shared terms
    """
    negated = [bool(_NEGATION_RE.search(chunk.content.lower())) for chunk in chunks]
    terms = [
        list(dict.fromkeys(word for word in tokenize(chunk.content) if len(word) > 4))
        for chunk in chunks
    ]
    flagged = []
    for i in range(len(chunks)):
        for j in range(i + 1, len(chunks)):
            if negated[i] == negated[j]:
                continue
            other = set(terms[j])
            shared = [word for word in terms[i] if word in other]
            if len(shared) >= MIN_SHARED_TERMS:
                flagged.append(
                    f"Sources [{i + 1}] and [{j + 1}] may disagree about: {', '.join(shared[:3])}"
                )
    return flagged


def extract_confidence(text: str) -> tuple[str, float]:
    """
    Split the trailing "Confidence: x" line off a model reply.

    Returns:
        (answer without the line, confidence clamped to [0, 1]); the reply
        unchanged and DEFAULT_CONFIDENCE when no such line is present
    """
    matches = list(_CONFIDENCE_RE.finditer(text))
    if not matches:
        return text, DEFAULT_CONFIDENCE
    last = matches[-1]
    answer = (text[: last.start()] + text[last.end() :]).strip()
    return answer, min(1.0, max(0.0, float(last.group(1))))


def _message_text(message: AIMessage) -> str:
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class Synthesizer:
    """
    Produces grounded answers from assembled context.

    Retries happen only when max_retries > 0, with exponential backoff.
    """

    def __init__(
        self,
        chat_model: BaseChatModel,
        model_name: str,
        max_retries: int = 0,
        pricing: dict[str, dict[str, float]] | None = None,
    ) -> None:
        self.chat_model = chat_model
        self.model_name = model_name
        self.max_retries = max_retries
        self.pricing = pricing if pricing is not None else PRICING

    async def _invoke(self, messages) -> AIMessage:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential_jitter(initial=1, max=30),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:synthesize - Retry {retry_state.attempt_number}/{self.max_retries}"
            ),
            reraise=True,
        ):
            with attempt:
                return await self.chat_model.ainvoke(messages)

    async def synthesize(self, query: str, context: AssembledContext) -> SynthesisResult:
        """
        Answer query from context.

        Args:
            query: Learner question (sanitized before prompting)
            context: Assembled context

        Returns:
            SynthesisResult with answer, token counts, cost, confidence,
            contradiction hints and per-document source groups

        Raises:
            ProviderError: If the chat model fails
        """
        messages = SYNTHESIS_PROMPT.format_messages(
            history=format_history(context),
            sources=format_sources(context),
            question=sanitize_for_prompt(query),
        )

        try:
            response = await self._invoke(messages)
        except Exception as e:
            logger.error(f"{__name__}:synthesize - {type(e).__name__}: {e}")
            raise ProviderError(f"Synthesis failed: {e}", provider="synthesis") from e

        reply = _message_text(response).strip()
        answer, confidence = extract_confidence(reply)
        usage = getattr(response, "usage_metadata", None)
        if usage:
            input_tokens = usage.get("input_tokens", 0)
            output_tokens = usage.get("output_tokens", 0)
        else:
            prompt_text = "".join(str(message.content) for message in messages)
            input_tokens = estimate_tokens(prompt_text)
            output_tokens = estimate_tokens(reply)

        cost = calculate_cost(self.model_name, input_tokens, output_tokens, self.pricing)
        contradictions = detect_contradictions(context.chunks)
        logger.info(
            f"{__name__}:synthesize - model={self.model_name} tokens={input_tokens}+{output_tokens} "
            f"cost=${cost:.6f} confidence={confidence} contradictions={len(contradictions)}"
        )
        return SynthesisResult(
            answer=answer,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=cost,
            model=self.model_name,
            confidence=confidence,
            contradictions=contradictions,
            documents=group_by_document(context),
        )
