import pytest

from photosite import apperr
from photosite.constants import MSG_INTERNAL_SERVER_ERROR, MSG_PHOTO_NOT_FOUND, ErrorCode


def test_new_without_cause():
    err = apperr.new(404, ErrorCode.PHOTO_NOT_FOUND, MSG_PHOTO_NOT_FOUND)
    assert err.http_status == 404
    assert err.code == ErrorCode.PHOTO_NOT_FOUND
    assert err.message == MSG_PHOTO_NOT_FOUND
    assert err.cause is None
    assert str(err) == MSG_PHOTO_NOT_FOUND


def test_wrap_includes_cause_text():
    cause = RuntimeError("connection refused")
    err = apperr.wrap(500, ErrorCode.PHOTOS_LIST, MSG_INTERNAL_SERVER_ERROR, cause)
    assert err.cause is cause
    assert err.__cause__ is cause
    assert str(err) == f"{MSG_INTERNAL_SERVER_ERROR}: {cause}"


def test_wrap_without_cause_uses_message_only():
    err = apperr.wrap(500, ErrorCode.TAG_LIST, MSG_INTERNAL_SERVER_ERROR, None)
    assert err.http_status == 500
    assert err.code == ErrorCode.TAG_LIST
    assert err.cause is None
    assert str(err) == MSG_INTERNAL_SERVER_ERROR


def test_as_app_error_finds_raised_error():
    err = apperr.new(400, ErrorCode.INVALID_UUID, "invalid uuid")
    with pytest.raises(apperr.AppError) as info:
        raise err
    found = apperr.as_app_error(info.value)
    assert found is err
    assert found.http_status == 400


def test_as_app_error_direct():
    err = apperr.new(400, ErrorCode.INVALID_UUID, "invalid uuid")
    assert apperr.as_app_error(err) is err


def test_as_app_error_through_cause_chain():
    inner = apperr.new(404, ErrorCode.PHOTO_NOT_FOUND, MSG_PHOTO_NOT_FOUND)
    try:
        try:
            raise inner
        except apperr.AppError as exc:
            raise ValueError("outer") from exc
    except ValueError as outer:
        assert apperr.as_app_error(outer) is inner


def test_as_app_error_absent():
    assert apperr.as_app_error(ValueError("plain")) is None
    assert apperr.as_app_error(None) is None