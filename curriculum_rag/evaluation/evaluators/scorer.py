"""
LLM-as-judge answer scorer.

Asks a chat model to rate faithfulness, relevance and coverage of a
generated answer on a 0-1 scale and parses its JSON reply.

Dependencies: langchain_core, tenacity
System role: Scoring stage of the evaluation harness
"""

import json
import logging

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential_jitter
from tenacity.wait import wait_base

from curriculum_rag.core.exceptions import ProviderError, ScoringError
from curriculum_rag.evaluation.models.metrics_models import EvaluationMetrics

logger = logging.getLogger(__name__)


class AnswerScorer:
    """LLM judge for generated answers.

    Usage:
        scorer = AnswerScorer(chat_model)
        metrics = await scorer.score(
            question="What is TypeScript?",
            answer="TypeScript is a typed superset of JavaScript [1].",
            contexts=["TypeScript is a typed superset of JavaScript..."],
            ground_truth="A typed superset of JavaScript.",
        )
    """

    def __init__(
        self,
        chat_model: BaseChatModel,
        max_retries: int = 3,
        wait: wait_base | None = None,
    ) -> None:
        self.chat_model = chat_model
        self.max_retries = max_retries
        self.wait = wait if wait is not None else wait_exponential_jitter(initial=1, max=10)

    async def score(
        self,
        question: str,
        answer: str,
        contexts: list[str],
        ground_truth: str | None = None,
    ) -> EvaluationMetrics:
        """Score one answer.

        Args:
            question: Dataset question
            answer: Generated answer
            contexts: Chunk texts the answer was generated from
            ground_truth: Optional reference answer

        Returns:
            EvaluationMetrics with scores clamped to [0, 1]

        Raises:
            ScoringError: If the judge reply cannot be parsed after retries
            ProviderError: If the judge model keeps failing
        """
        prompt = self._build_prompt(question, answer, contexts, ground_truth)
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=self.wait,
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:score - Retry {retry_state.attempt_number}/{self.max_retries}"
            ),
            reraise=True,
        ):
            with attempt:
                try:
                    response = await self.chat_model.ainvoke([HumanMessage(content=prompt)])
                except Exception as e:
                    raise ProviderError(f"Scoring model failed: {e}", provider="scoring") from e
                metrics = self._parse_response(response.content, question)
        logger.info(f"Judge scores: {metrics.to_dict()}")
        return metrics

    def _build_prompt(
        self,
        question: str,
        answer: str,
        contexts: list[str],
        ground_truth: str | None,
    ) -> str:
        """Build evaluation prompt for the judge."""
        context_block = "\n\n".join(
            f"[{number}] {text}" for number, text in enumerate(contexts, start=1)
        ) or "(no context retrieved)"
        reference = ground_truth or "(no reference answer provided)"
        return f"""You are an expert evaluator assessing an AI tutor's answer to a learner question.

QUESTION:
{question}

REFERENCE ANSWER:
{reference}

RETRIEVED CONTEXT:
{context_block}

GENERATED ANSWER TO EVALUATE:
{answer}

---

Rate the generated answer on these criteria (0.0-1.0 scale):

1. FAITHFULNESS: Are all claims supported by the retrieved context?
   - 1.0: Every claim is grounded in the context
   - 0.0: Claims contradict or go beyond the context

2. RELEVANCE: Does the answer address the question?
   - 1.0: Directly and fully addresses the question
   - 0.0: Does not address the question

3. COVERAGE: Does the answer use the relevant evidence in the context (and the reference answer's key points)?
   - 1.0: Uses all relevant evidence
   - 0.0: Ignores the evidence

---

Respond in JSON format ONLY (no markdown, no extra text):
{{
    "faithfulness": <0.0-1.0>,
    "relevance": <0.0-1.0>,
    "coverage": <0.0-1.0>,
    "reasoning": "<brief explanation>"
}}"""

    def _parse_response(self, response_text, question: str) -> EvaluationMetrics:
        """Parse judge JSON.

        Handles replies wrapped in markdown code blocks.
        """
        text = response_text if isinstance(response_text, str) else str(response_text)
        try:
            if "```json" in text:
                text = text.split("```json")[1].split("```")[0]
            elif "```" in text:
                text = text.split("```")[1].split("```")[0]

            data = json.loads(text.strip())
            metrics = EvaluationMetrics(
                faithfulness=float(data["faithfulness"]),
                relevance=float(data["relevance"]),
                coverage=float(data["coverage"]),
            )
        except (json.JSONDecodeError, ValueError, KeyError, TypeError, IndexError) as e:
            logger.warning(f"Failed to parse judge response: {e}")
            logger.debug(f"Raw response: {response_text}")
            raise ScoringError(
                f"Unparseable judge response: {type(e).__name__}",
                question=question,
            ) from e

        # Clamp scores to 0-1 range
        metrics.faithfulness = min(1.0, max(0.0, metrics.faithfulness))
        metrics.relevance = min(1.0, max(0.0, metrics.relevance))
        metrics.coverage = min(1.0, max(0.0, metrics.coverage))
        return metrics
