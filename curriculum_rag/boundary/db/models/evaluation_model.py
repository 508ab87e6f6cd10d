"""
Evaluation ORM models.

Datasets of labeled questions, evaluation runs over a dataset, and one
result row per scored question of a run.

Dependencies: sqlalchemy, curriculum_rag.boundary.db.base
System role: Evaluation persistence
"""

import enum
from uuid import UUID

from sqlalchemy import JSON, Boolean, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from curriculum_rag.boundary.db.base import Base, UUIDMixin, TimestampMixin


class RunStatus(str, enum.Enum):
    """Evaluation run lifecycle states."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class EvaluationDatasetModel(Base, UUIDMixin, TimestampMixin):
    """Named set of evaluation questions."""

    __tablename__ = "rag_eval_datasets"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    questions = relationship(
        "EvaluationQuestionModel",
        back_populates="dataset",
        cascade="all, delete-orphan",
        order_by="EvaluationQuestionModel.position",
    )


class EvaluationQuestionModel(Base, UUIDMixin, TimestampMixin):
    """Single labeled question; ground truth is optional."""

    __tablename__ = "rag_eval_questions"

    dataset_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("rag_eval_datasets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    ground_truth_answer: Mapped[str | None] = mapped_column(Text, nullable=True)

    dataset = relationship("EvaluationDatasetModel", back_populates="questions")


class EvaluationRunModel(Base, UUIDMixin, TimestampMixin):
    """One execution of the harness over a dataset."""

    __tablename__ = "rag_eval_runs"

    dataset_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("rag_eval_datasets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    requested_by: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[RunStatus] = mapped_column(
        Enum(RunStatus, native_enum=False),
        nullable=False,
        default=RunStatus.RUNNING,
    )
    summary: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    results = relationship(
        "EvaluationResultModel",
        back_populates="run",
        cascade="all, delete-orphan",
    )


class EvaluationResultModel(Base, UUIDMixin, TimestampMixin):
    """Scored outcome of one question within one run."""

    __tablename__ = "rag_eval_results"

    run_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("rag_eval_runs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    dataset_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    question_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("rag_eval_questions.id", ondelete="CASCADE"),
        nullable=False,
    )
    generated_answer: Mapped[str] = mapped_column(Text, nullable=False)
    retrieved_chunks: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    metrics: Mapped[dict] = mapped_column(JSON, nullable=False)
    passed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    run = relationship("EvaluationRunModel", back_populates="results")
