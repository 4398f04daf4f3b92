"""
SequenceService -- revenue-update nonce allocation.

Each named sequence is one row in ``sequence_counters`` holding the value
the next allocation returns.  Allocation locks that row, hands out its
value and bumps it, all inside the caller's transaction.

Architecture position:
    Kernel > Services.  RevenueIngestionService allocates a nonce only
    after every check on a submission has passed.

Invariants enforced:
    - The first nonce is 0 and each later one is exactly one more.
      Nonces are never derived from ``max(nonce) + 1`` over the log.
    - A rolled-back submission takes its increment with it, so committed
      nonces have no gaps.

Failure modes:
    - IntegrityError if two transactions insert the same counter row
      concurrently.  ``initialize_sequences()`` pre-creates the known rows.
"""

from sqlalchemy import BigInteger, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from yield_kernel.db.base import Base
from yield_kernel.logging_config import get_logger

logger = get_logger("services.sequence")


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    next_value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


class SequenceService:
    """Named gap-free counters.  Flushes, never commits."""

    REVENUE_NONCE = "revenue_update_nonce"
    KNOWN_SEQUENCES = (REVENUE_NONCE,)

    def __init__(self, session: Session):
        self._session = session

    def _find(self, name: str, lock: bool = False) -> SequenceCounter | None:
        stmt = select(SequenceCounter).where(SequenceCounter.name == name)
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self._session.execute(stmt).scalar_one_or_none()

    def next_value(self, sequence_name: str) -> int:
        """
        Allocate and return the next value of ``sequence_name``.

        A sequence seen for the first time starts at 0.  The counter row
        stays locked until the surrounding transaction ends.
        """
        counter = self._find(sequence_name, lock=True)
        if counter is None:
            counter = SequenceCounter(name=sequence_name, next_value=0)
            self._session.add(counter)

        allocated = counter.next_value
        counter.next_value = allocated + 1
        self._session.flush()

        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": allocated},
        )
        return allocated

    def current_value(self, sequence_name: str) -> int:
        """Value the next allocation would return; 0 for an unused sequence."""
        counter = self._find(sequence_name)
        return 0 if counter is None else counter.next_value

    def initialize_sequences(self) -> None:
        """Insert a zeroed row for each known sequence that lacks one."""
        for name in self.KNOWN_SEQUENCES:
            if self._find(name) is None:
                self._session.add(SequenceCounter(name=name, next_value=0))
        self._session.flush()
