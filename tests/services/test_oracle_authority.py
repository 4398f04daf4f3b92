"""Tests for OracleAuthorityService: bootstrap, authorization, rotation."""

import pytest

from yield_kernel.exceptions import InvalidIdentityError, NotAuthorizedOracleError
from yield_kernel.services.oracle_authority import OracleAuthorityService

ORACLE = "ST1ORACLE"
HACKER = "ST1HACKER"
NEW_ORACLE = "ST2ORACLE"


class TestInitialize:
    def test_seeds_oracle(self, oracle_authority):
        assert oracle_authority.current_oracle() == ORACLE

    def test_second_initialize_keeps_existing(self, oracle_authority):
        assert oracle_authority.initialize(HACKER) == ORACLE
        assert oracle_authority.current_oracle() == ORACLE

    def test_empty_identity_rejected(self, session):
        service = OracleAuthorityService(session)

        with pytest.raises(InvalidIdentityError):
            service.initialize("")

    def test_identity_wider_than_column_rejected(self, session):
        service = OracleAuthorityService(session)

        with pytest.raises(InvalidIdentityError):
            service.initialize("S" * 129)

        assert service.current_oracle() is None

    def test_uninitialized_rejects_everyone(self, session):
        service = OracleAuthorityService(session)

        assert service.current_oracle() is None
        with pytest.raises(NotAuthorizedOracleError):
            service.require_oracle(ORACLE)


class TestRequireOracle:
    def test_current_oracle_passes(self, oracle_authority):
        oracle_authority.require_oracle(ORACLE)

    def test_other_caller_fails(self, oracle_authority):
        with pytest.raises(NotAuthorizedOracleError):
            oracle_authority.require_oracle(HACKER)


class TestSetOracle:
    def test_current_oracle_can_rotate(self, oracle_authority, captured_logs):
        assert oracle_authority.set_oracle(NEW_ORACLE, ORACLE) is True

        assert oracle_authority.current_oracle() == NEW_ORACLE
        rotated = [r for r in captured_logs() if r["message"] == "oracle_rotated"]
        assert rotated[0]["previous_oracle"] == ORACLE
        assert rotated[0]["new_oracle"] == NEW_ORACLE

    def test_previous_oracle_loses_authority(self, oracle_authority):
        oracle_authority.set_oracle(NEW_ORACLE, ORACLE)

        with pytest.raises(NotAuthorizedOracleError):
            oracle_authority.require_oracle(ORACLE)
        assert oracle_authority.set_oracle(ORACLE, ORACLE) is False

    def test_other_caller_refused(self, oracle_authority, captured_logs):
        assert oracle_authority.set_oracle(HACKER, HACKER) is False

        assert oracle_authority.current_oracle() == ORACLE
        refused = [r for r in captured_logs() if r["message"] == "oracle_rotation_refused"]
        assert refused[0]["reason"] == "caller_not_oracle"

    @pytest.mark.parametrize("new_oracle", ["", "  ", None, "S" * 129])
    def test_invalid_new_oracle_refused(self, oracle_authority, new_oracle):
        assert oracle_authority.set_oracle(new_oracle, ORACLE) is False
        assert oracle_authority.current_oracle() == ORACLE

    def test_rotation_before_initialize_refused(self, session):
        assert OracleAuthorityService(session).set_oracle(NEW_ORACLE, ORACLE) is False
