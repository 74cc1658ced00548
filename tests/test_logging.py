import logging

from app.core.logging import QuerySecretFilter, configure_logging, redact_query


def test_redact_query_masks_token_and_secret() -> None:
    path = "/digitalocean/sso?resource_uuid=abc-123&token=deadbeef&timestamp=1"
    assert redact_query(path) == (
        "/digitalocean/sso?resource_uuid=abc-123&token=****&timestamp=1"
    )
    assert redact_query("/login?secret=eyJhbGciOi.x.y") == "/login?secret=****"
    assert redact_query("/activities?uuid=abc-123") == "/activities?uuid=abc-123"


def test_filter_rewrites_access_log_arguments() -> None:
    record = logging.LogRecord(
        name="uvicorn.access",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg='%s - "%s %s HTTP/%s" %d',
        args=("127.0.0.1:5000", "POST", "/digitalocean/sso?token=abcd", "1.1", 307),
        exc_info=None,
    )

    assert QuerySecretFilter().filter(record) is True
    assert "abcd" not in record.getMessage()
    assert record.args[-1] == 307


def test_configure_logging_installs_filter_once() -> None:
    configure_logging("INFO")
    configure_logging("INFO")

    filters = logging.getLogger("uvicorn.access").filters
    assert sum(isinstance(f, QuerySecretFilter) for f in filters) == 1
