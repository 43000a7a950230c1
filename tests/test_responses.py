import logging

import pytest

from interledger_payments.core.codec import ResourceCodec
from interledger_payments.core.errors import RemoteError
from interledger_payments.core.models import ApiError, PaymentPointer
from interledger_payments.core.responses import read_error, read_response, remote_error
from interledger_payments.core.transport import TransportResponse

codec = ResourceCodec()


def _response(status: int, body: str = "") -> TransportResponse:
    return TransportResponse(status_code=status, url="https://auth.test/", headers={"X-Request": "1"}, body=body)


def test_json_error_envelope_is_parsed() -> None:
    error = read_error('{"error":{"code":"invalid_client","description":"Unknown key"}}', codec)
    assert error == ApiError(code="invalid_client", description="Unknown key")


@pytest.mark.parametrize("body", ["Unauthorized", "forbidden", "Could not get wallet address"])
def test_known_plain_text_errors_become_descriptions(body) -> None:
    assert read_error(body, codec) == ApiError(description=body)


@pytest.mark.parametrize("body", ["", "   ", "Something else broke", "<html>502</html>", "[1,2]", '"text"', '""'])
def test_unrecognized_bodies_give_an_empty_error(body) -> None:
    assert read_error(body, codec) == ApiError()


@pytest.mark.parametrize("body, description", [('"forbidden"', "forbidden"), ('" Unauthorized "', "Unauthorized")])
def test_json_string_bodies_match_known_errors(body, description) -> None:
    assert read_error(body, codec) == ApiError(description=description)


def test_remote_error_description_format() -> None:
    assert remote_error(_response(401, "Unauthorized"), codec).description == "[401](no code) Unauthorized"
    assert remote_error(_response(500), codec).description == "[500](no code) no description"
    coded = remote_error(_response(400, '{"error":{"code":"invalid_request","description":"Missing field"}}'), codec)
    assert coded.description == "[400](invalid_request) Missing field"
    assert coded.code == "invalid_request"
    assert str(coded) == coded.description


def test_read_response_raises_remote_error_with_context() -> None:
    with pytest.raises(RemoteError) as excinfo:
        read_response(_response(403, "Forbidden"), PaymentPointer, codec)
    error = excinfo.value
    assert error.status_code == 403
    assert error.body == "Forbidden"
    assert error.headers == {"X-Request": "1"}
    assert error.headers["x-request"] == "1"

    with pytest.raises(RemoteError) as excinfo:
        read_response(_response(404), PaymentPointer, codec)
    assert excinfo.value.body == "[no body]"


def test_read_response_decodes_success() -> None:
    body = (
        '{"id":"https://ilp.test/a","assetCode":"EUR","assetScale":2,'
        '"authServer":"https://auth.test","resourceServer":"https://ilp.test"}'
    )
    pointer = read_response(_response(200, body), PaymentPointer, codec)
    assert pointer.asset_code == "EUR"


def test_log_level_follows_status_class(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        remote_error(_response(404), codec)
        remote_error(_response(503), codec)
        remote_error(_response(302), codec)
    levels = [record.levelname for record in caplog.records]
    assert levels == ["WARNING", "ERROR", "WARNING"]
