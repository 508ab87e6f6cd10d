"""
Answer pipeline.

Runs retrieval, memory-aware context assembly and synthesis for one
question. Shared by the query service and the evaluation harness; it
writes nothing to the store.

Dependencies: curriculum_rag.core
System role: Read-only question answering pipeline
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.core.memory_integrator import AssembledContext, MemoryIntegrator
from curriculum_rag.core.synthesizer import SynthesisResult, Synthesizer


@dataclass
class PipelineOutput:
    """Context used for a question and the answer produced from it."""

    context: AssembledContext
    synthesis: SynthesisResult


class AnswerPipeline:
    """Retrieve, assemble, synthesize."""

    def __init__(self, memory_integrator: MemoryIntegrator, synthesizer: Synthesizer) -> None:
        self.memory_integrator = memory_integrator
        self.synthesizer = synthesizer

    async def run(
        self,
        session: AsyncSession,
        query: str,
        identity: str,
        conversation_id: str | None = None,
        limit: int | None = None,
    ) -> PipelineOutput:
        """
        Answer one question.

        Args:
            session: Async database session (not shared across tasks)
            query: Question text
            identity: Requesting identity
            conversation_id: Conversation to draw memory from
            limit: Retrieval limit

        Returns:
            PipelineOutput with the assembled context and synthesis result
        """
        context = await self.memory_integrator.assemble(
            session,
            identity,
            query,
            conversation_id=conversation_id,
            limit=limit,
        )
        synthesis = await self.synthesizer.synthesize(query, context)
        return PipelineOutput(context=context, synthesis=synthesis)
