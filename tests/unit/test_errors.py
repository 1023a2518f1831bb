import pytest

from photo_tagger.core.errors import (
    RECORD_ERRORS,
    BackendError,
    NormalizationError,
    PhotoTaggerError,
    StorageIOError,
    backend_error_guard,
    classify_backend_error,
)


def test_taxonomy():
    for cls in (BackendError, NormalizationError, StorageIOError):
        assert issubclass(cls, PhotoTaggerError)
    assert StorageIOError not in RECORD_ERRORS
    assert set(RECORD_ERRORS) == {BackendError, NormalizationError}


def test_classify_passes_backend_errors_through():
    e = BackendError("x")
    assert classify_backend_error(e) is e


def test_classify_timeouts():
    assert str(classify_backend_error(TimeoutError("slow"))).startswith("timeout:")
    assert str(classify_backend_error(RuntimeError("request timed out"))).startswith("timeout:")


def test_classify_generic():
    err = classify_backend_error(ConnectionError("refused"))
    assert isinstance(err, BackendError)
    assert "ConnectionError: refused" in str(err)


def test_guard_wraps_and_chains():
    with pytest.raises(BackendError) as ei:
        with backend_error_guard():
            raise KeyError("boom")
    assert isinstance(ei.value.__cause__, KeyError)
