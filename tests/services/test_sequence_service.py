"""Tests for SequenceService nonce allocation."""

from yield_kernel.services.sequence_service import SequenceService


class TestSequenceService:
    def test_revenue_nonce_starts_at_zero(self, sequence_service):
        assert sequence_service.current_value(SequenceService.REVENUE_NONCE) == 0
        assert sequence_service.next_value(SequenceService.REVENUE_NONCE) == 0

    def test_values_strictly_increase(self, sequence_service):
        values = [sequence_service.next_value(SequenceService.REVENUE_NONCE) for _ in range(5)]

        assert values == [0, 1, 2, 3, 4]
        assert sequence_service.current_value(SequenceService.REVENUE_NONCE) == 5

    def test_unknown_sequence_created_on_first_use(self, sequence_service):
        assert sequence_service.current_value("other") == 0
        assert sequence_service.next_value("other") == 0
        assert sequence_service.next_value("other") == 1

    def test_sequences_are_independent(self, sequence_service):
        sequence_service.next_value(SequenceService.REVENUE_NONCE)

        assert sequence_service.next_value("other") == 0

    def test_initialize_is_idempotent(self, sequence_service):
        sequence_service.next_value(SequenceService.REVENUE_NONCE)
        sequence_service.initialize_sequences()

        assert sequence_service.current_value(SequenceService.REVENUE_NONCE) == 1

    def test_rollback_returns_value(self, session, sequence_service):
        session.commit()
        sequence_service.next_value(SequenceService.REVENUE_NONCE)
        session.rollback()

        assert sequence_service.next_value(SequenceService.REVENUE_NONCE) == 0
