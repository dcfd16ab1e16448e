from envprec.outcome import (
    EXIT_OK,
    EXIT_STRICT_FAILURE,
    OUTCOME_UNKNOWN,
    OUTCOME_UNSUPPORTED,
    SANITY_MISMATCH,
    SANITY_NOT_APPLICABLE,
    SANITY_OK,
    SANITY_UNKNOWN,
    STATUS_INCONCLUSIVE,
    STATUS_MISMATCH,
    STATUS_OK,
    is_definite_outcome,
    resolve_exit_code,
    resolve_run_status,
)


def test_is_definite_outcome() -> None:
    assert is_definite_outcome("_JAVA_OPTIONS") is True
    assert is_definite_outcome(OUTCOME_UNSUPPORTED) is False
    assert is_definite_outcome(OUTCOME_UNKNOWN) is False
    assert is_definite_outcome("") is False
    assert is_definite_outcome(None) is False


def test_resolve_run_status_inconclusive_wins_over_sanity() -> None:
    assert resolve_run_status(order_found=False, sanity_classification=SANITY_MISMATCH) == STATUS_INCONCLUSIVE
    assert resolve_run_status(order_found=False, sanity_classification=SANITY_NOT_APPLICABLE) == STATUS_INCONCLUSIVE


def test_resolve_run_status_mismatch_and_ok() -> None:
    assert resolve_run_status(order_found=True, sanity_classification=SANITY_MISMATCH) == STATUS_MISMATCH
    assert resolve_run_status(order_found=True, sanity_classification=SANITY_OK) == STATUS_OK
    assert resolve_run_status(order_found=True, sanity_classification=SANITY_UNKNOWN) == STATUS_OK


def test_resolve_exit_code_policies() -> None:
    assert resolve_exit_code([STATUS_INCONCLUSIVE], policy="relaxed") == EXIT_OK
    assert resolve_exit_code([STATUS_MISMATCH]) == EXIT_OK
    assert resolve_exit_code([STATUS_OK], policy="strict") == EXIT_OK
    assert resolve_exit_code([STATUS_OK, STATUS_MISMATCH], policy="strict") == EXIT_STRICT_FAILURE
    assert resolve_exit_code([STATUS_INCONCLUSIVE], policy="STRICT") == EXIT_STRICT_FAILURE
