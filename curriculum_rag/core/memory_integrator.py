"""
Memory-aware context assembly.

Merges retrieved curriculum chunks with relevant turns of the learner's
conversation, removes duplicates and trims the result to a character
budget before synthesis.

Dependencies: curriculum_rag.core.retriever, curriculum_rag.boundary.db
System role: Context assembly stage of the query pipeline
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.boundary.db.CRUD.conversation_crud import conversation_crud
from curriculum_rag.boundary.db.models.conversation_model import ConversationTurnModel
from curriculum_rag.core.retriever import HybridRetriever
from curriculum_rag.core.text_utils import lexical_overlap, normalize_for_dedup
from curriculum_rag.models.retrieval import RetrievedChunk

logger = logging.getLogger(__name__)

CHUNK = "chunk"
MEMORY = "memory"


@dataclass
class ContextItem:
    """
    One unit of assembled context.

    Attributes:
        key: Stable identifier (chunk id, or "turn:<id>" for memory)
        kind: CHUNK or MEMORY
        content: Text placed in the prompt
        relevance: Score in [0, 1] used for ordering and budget trimming
        chunk: Source chunk for CHUNK items
        role: Speaker for MEMORY items
    """

    key: str
    kind: str
    content: str
    relevance: float
    chunk: RetrievedChunk | None = None
    role: str | None = None

    @property
    def is_memory(self) -> bool:
        return self.kind == MEMORY


@dataclass
class AssembledContext:
    """Ordered, budgeted context handed to the synthesizer."""

    items: list[ContextItem] = field(default_factory=list)
    has_memory_context: bool = False

    @property
    def chunks(self) -> list[RetrievedChunk]:
        """Retrieved chunks in context order (memory turns excluded)."""
        return [item.chunk for item in self.items if item.chunk is not None]

    @property
    def total_chars(self) -> int:
        return sum(len(item.content) for item in self.items)


def score_turns(query: str, turns: list[ConversationTurnModel]) -> list[ContextItem]:
    """
    Score conversation turns for relevance to query.

    relevance = 0.5 * lexical overlap + 0.5 * recency, where the newest
    turn has recency 1.0 and older turns decay linearly.

    Args:
        query: Query text
        turns: Turns ordered newest first

    Returns:
        Memory context items in the same order
    """
    count = len(turns)
    items = []
    for position, turn in enumerate(turns):
        recency = 1.0 - position / count
        relevance = 0.5 * lexical_overlap(query, turn.content) + 0.5 * recency
        items.append(
            ContextItem(
                key=f"turn:{turn.id}",
                kind=MEMORY,
                content=turn.content,
                relevance=relevance,
                role=turn.role.value,
            )
        )
    return items


def _rank_key(item: ContextItem) -> tuple:
    return (-item.relevance, item.key)


def _pick_victim(items: list[ContextItem]) -> ContextItem:
    """Lowest relevance; ties drop memory before chunks, then the larger key."""
    lowest = min(item.relevance for item in items)
    tied = [item for item in items if item.relevance == lowest]
    memory = [item for item in tied if item.is_memory]
    return max(memory or tied, key=lambda item: item.key)


def fit_to_budget(items: list[ContextItem], budget_chars: int) -> list[ContextItem]:
    """
    Merge, deduplicate and trim items to a character budget.

    Args:
        items: Candidate items from all sources
        budget_chars: Maximum total characters

    Returns:
        Surviving items ordered by relevance descending, key ascending
    """
    ordered = sorted(items, key=_rank_key)

    seen: set[str] = set()
    unique: list[ContextItem] = []
    for item in ordered:
        normalized = normalize_for_dedup(item.content)
        if normalized in seen:
            continue
        seen.add(normalized)
        unique.append(item)

    total = sum(len(item.content) for item in unique)
    while unique and total > budget_chars:
        victim = _pick_victim(unique)
        unique.remove(victim)
        total -= len(victim.content)

    return unique


class MemoryIntegrator:
    """
    Assembles retrieval results and conversation memory into one context.

    Usage:
        integrator = MemoryIntegrator(retriever)
        context = await integrator.assemble(db, "learner-1", "What is a closure?", "conv-9")
    """

    def __init__(
        self,
        retriever: HybridRetriever,
        context_budget_chars: int = 8000,
        turn_limit: int = 20,
        memory_results: int = 3,
    ) -> None:
        self.retriever = retriever
        self.context_budget_chars = context_budget_chars
        self.turn_limit = turn_limit
        self.memory_results = memory_results

    async def load_memory(
        self,
        session: AsyncSession,
        identity: str,
        query: str,
        conversation_id: str,
    ) -> list[ContextItem]:
        """Top-scoring turns of the identity's conversation."""
        turns = list(
            await conversation_crud.get_recent(
                session,
                conversation_id=conversation_id,
                user_id=identity,
                limit=self.turn_limit,
            )
        )
        if not turns:
            return []
        scored = sorted(score_turns(query, turns), key=_rank_key)
        return scored[: self.memory_results]

    async def assemble(
        self,
        session: AsyncSession,
        identity: str,
        query: str,
        conversation_id: str | None = None,
        limit: int | None = None,
    ) -> AssembledContext:
        """
        Build the budgeted context for a query.

        Args:
            session: Async database session
            identity: Requesting identity
            query: Query text
            conversation_id: Conversation to draw memory from
            limit: Retrieval limit passed to the retriever

        Returns:
            AssembledContext with items ordered by relevance
        """
        chunks = await self.retriever.retrieve(session, query, identity, limit=limit)
        items = [
            ContextItem(
                key=str(chunk.chunk_id),
                kind=CHUNK,
                content=chunk.content,
                relevance=chunk.score,
                chunk=chunk,
            )
            for chunk in chunks
        ]

        if conversation_id:
            items.extend(await self.load_memory(session, identity, query, conversation_id))

        kept = fit_to_budget(items, self.context_budget_chars)
        has_memory = any(item.is_memory for item in kept)
        logger.info(
            f"{__name__}:assemble - {len(chunks)} chunks, {len(items) - len(chunks)} turns "
            f"-> {len(kept)} items (memory={has_memory})"
        )
        return AssembledContext(items=kept, has_memory_context=has_memory)
