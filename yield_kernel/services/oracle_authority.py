"""
OracleAuthorityService -- the single trusted revenue submitter.

Responsibility:
    Holds the one identity allowed to call submit_revenue and lets that
    identity hand the role to a successor.

Architecture position:
    Kernel > Services -- imperative shell.
    Consulted by RevenueIngestionService on every submission.

Invariants enforced:
    - One authority row per deployment, seeded once by initialize().
    - Rotation is self-gated: only the current oracle may name the next.
    - set_oracle() reports refusal as ``False`` rather than raising.  It
      is the one kernel operation with a boolean contract; existing
      callers branch on the bool.

Failure modes:
    - NotAuthorizedOracleError from require_oracle() for any other caller,
      including every caller when no oracle was ever initialized.
    - InvalidIdentityError from initialize() for an empty identity.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from yield_kernel.domain.clock import Clock, SystemClock
from yield_kernel.domain.validation import require_identity
from yield_kernel.exceptions import InvalidIdentityError, NotAuthorizedOracleError
from yield_kernel.logging_config import get_logger
from yield_kernel.models.oracle_authority import OracleAuthority
from yield_kernel.services.base import BaseService

logger = get_logger("services.oracle_authority")


class OracleAuthorityService(BaseService[OracleAuthority]):
    """Current-oracle lookup, authorization check, and self-rotation."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def initialize(self, oracle: str) -> str:
        """
        Seed the authority row.  A second call leaves the existing oracle
        in place and returns it.
        """
        require_identity("oracle", oracle)
        row = self._load(for_update=True)
        if row is not None:
            return row.oracle

        self.session.add(
            OracleAuthority(slot=OracleAuthority.DEFAULT_SLOT, oracle=oracle)
        )
        self.session.flush()
        logger.info("oracle_initialized", extra={"oracle": oracle})
        return oracle

    def current_oracle(self) -> str | None:
        row = self._load()
        return row.oracle if row is not None else None

    def require_oracle(self, caller: str) -> None:
        """
        Raises:
            NotAuthorizedOracleError: If caller is not the current oracle.
        """
        current = self.current_oracle()
        if current is None or caller != current:
            raise NotAuthorizedOracleError(caller)

    def set_oracle(self, new_oracle: str, caller: str) -> bool:
        """
        Hand the oracle role to ``new_oracle``.

        Returns:
            True on rotation; False if ``caller`` is not the current
            oracle or ``new_oracle`` is not a usable identity.  Nothing
            changes on False.
        """
        row = self._load(for_update=True)
        if row is None or caller != row.oracle:
            logger.warning(
                "oracle_rotation_refused",
                extra={"caller": caller, "reason": "caller_not_oracle"},
            )
            return False

        try:
            require_identity("oracle", new_oracle)
        except InvalidIdentityError:
            logger.warning(
                "oracle_rotation_refused",
                extra={"caller": caller, "reason": "invalid_new_oracle"},
            )
            return False

        previous = row.oracle
        row.oracle = new_oracle
        row.rotated_at = self._clock.now()
        self.session.flush()

        logger.info(
            "oracle_rotated",
            extra={"previous_oracle": previous, "new_oracle": new_oracle},
        )
        return True

    def _load(self, for_update: bool = False) -> OracleAuthority | None:
        stmt = select(OracleAuthority).where(
            OracleAuthority.slot == OracleAuthority.DEFAULT_SLOT
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()
