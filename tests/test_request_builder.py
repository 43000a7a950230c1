import pytest

from interledger_payments.core.config import ClientOptions
from interledger_payments.core.models import AccessAction, AccessItemType, GrantAccessRequest, WalletAddress
from interledger_payments.core.request import PreparedRequest, SignedRequestBuilder

from conftest import CLIENT_WALLET, TEST_CREATED, TEST_KEY_ID

ENCODED_GRANT = (
    b'{"client":"https://ilp.interledger-test.dev/andrejfliqatestwallet",'
    b'"access_token":{"access":[{"type":"incoming-payment","actions":["complete","create","read"]}]}}'
)
ENCODED_GRANT_DIGEST = (
    "sha-512=:y3D2BTbM6Q4Y/L3h7M1kNaGER4vzZGKPjJ0GEcXMCS29m2TMMQ4d01chRt5AYaoevCIpXHsq0DTDN49CXtA8gg==:"
)
ENCODED_GRANT_SIGNATURE = (
    "eJRoTpNxgTK88ujbipcn0/8TDf0oUhbqTgOoKcOFnUslyNYYBk7Ar/5Mw8HvBubrQMbGt+AcjONb/6sKC8IXAQ=="
)
GET_SIGNATURE = "AEmfj+CY+Ck2/bCHv/jtAPiwbVs4mEURhIuJCYuTdFDT06r/MscWPjFtddN5EQ3iSlT+dfSY8IcuRuAuBBcEDQ=="


def _grant_request() -> GrantAccessRequest:
    return GrantAccessRequest.build(
        WalletAddress(CLIENT_WALLET),
        AccessItemType.INCOMING_PAYMENT,
        {AccessAction.READ, AccessAction.COMPLETE, AccessAction.CREATE},
    )


@pytest.fixture
def builder(private_key) -> SignedRequestBuilder:
    return SignedRequestBuilder(private_key, TEST_KEY_ID)


def test_grant_request_is_signed_over_canonical_body(builder) -> None:
    builder.post(_grant_request()).target("https://auth.interledger-test.dev").finalize(created=TEST_CREATED)

    assert builder.body == ENCODED_GRANT
    assert builder.target_value == "https://auth.interledger-test.dev/"
    assert builder.signature() == ENCODED_GRANT_SIGNATURE
    assert builder.signature_input_header() == (
        'sig1=("@method" "@target-uri" "content-digest" "content-length" "content-type");'
        f'keyid="{TEST_KEY_ID}";created={TEST_CREATED}'
    )
    assert builder.signature_header() == f"sig1=:{ENCODED_GRANT_SIGNATURE}:"

    headers = builder.headers()
    assert list(headers) == [
        "Accept",
        "Content-Type",
        "Content-Digest",
        "Signature-Input",
        "Signature",
    ]
    assert headers["Content-Digest"] == ENCODED_GRANT_DIGEST
    assert headers["Content-Type"] == "application/json"


def test_component_order_does_not_depend_on_call_order(private_key) -> None:
    first = (
        SignedRequestBuilder(private_key, TEST_KEY_ID)
        .post(_grant_request())
        .target("https://auth.interledger-test.dev")
        .bearer_token("abc")
        .finalize(created=TEST_CREATED)
    )
    second = (
        SignedRequestBuilder(private_key, TEST_KEY_ID)
        .bearer_token("abc")
        .target("https://auth.interledger-test.dev")
        .post(_grant_request())
        .finalize(created=TEST_CREATED)
    )
    assert first.signature_base() == second.signature_base()
    assert first.signature() == second.signature()


def test_get_with_bearer_token(builder) -> None:
    builder.get().target("https://ilp.interledger-test.dev/incoming-payments/abc").bearer_token("token-123")
    builder.finalize(created=TEST_CREATED)

    assert builder.signature() == GET_SIGNATURE
    headers = builder.headers()
    assert list(headers) == ["Accept", "Authorization", "Signature-Input", "Signature"]
    assert headers["Authorization"] == "GNAP token-123"


def test_raw_json_string_is_signed_as_given(builder) -> None:
    builder.post('{"interact_ref":"ref"}').target("https://auth.test/continue/1").finalize(created=TEST_CREATED)
    assert builder.body == b'{"interact_ref":"ref"}'
    assert '"content-length": 22' in builder.signature_base()


def test_method_and_target_can_only_be_set_once(builder) -> None:
    builder.get().target("https://ilp.test/a")
    with pytest.raises(ValueError):
        builder.post()
    with pytest.raises(ValueError):
        builder.target("https://ilp.test/b")


@pytest.mark.parametrize("method", ["PATCH", "OPTIONS", "", None])
def test_rejects_unsupported_methods(builder, method) -> None:
    with pytest.raises(ValueError):
        builder.method(method)


def test_rejects_empty_token_and_body(builder) -> None:
    with pytest.raises(ValueError):
        builder.bearer_token(" ")
    with pytest.raises(ValueError):
        builder.json_body("   ")


def test_finalize_requires_method_and_target(builder) -> None:
    with pytest.raises(RuntimeError):
        builder.finalize()
    builder.get()
    with pytest.raises(RuntimeError):
        builder.finalize()


def test_signature_outputs_require_finalize(builder) -> None:
    builder.get().target("https://ilp.test/a")
    with pytest.raises(RuntimeError):
        builder.signature()
    with pytest.raises(RuntimeError):
        builder.signature_input_header()
    with pytest.raises(RuntimeError):
        builder.headers()


def test_mutation_after_finalize_invalidates_signature(builder) -> None:
    builder.get().target("https://ilp.test/a").finalize(created=TEST_CREATED)
    builder.signature()
    builder.bearer_token("late")
    with pytest.raises(RuntimeError):
        builder.signature()
    builder.finalize(created=TEST_CREATED)
    assert '"authorization": GNAP late' in builder.signature_base()


def test_to_request_consumes_the_builder(builder) -> None:
    options = ClientOptions(connect_timeout=3, request_timeout=7)
    request = builder.post(_grant_request()).target("https://auth.test").to_request(options)

    assert isinstance(request, PreparedRequest)
    assert request.method == "POST"
    assert request.url == "https://auth.test/"
    assert request.body == ENCODED_GRANT
    assert request.timeout == (3, 7)
    assert "Signature" in request.headers

    with pytest.raises(RuntimeError):
        builder.to_request(options)
    with pytest.raises(RuntimeError):
        builder.bearer_token("again")


def test_prepared_request_headers_are_read_only(builder) -> None:
    request = builder.get().target("https://ilp.test/a").to_request(ClientOptions())
    with pytest.raises(TypeError):
        request.headers["Authorization"] = "GNAP forged"  # type: ignore[index]


def test_builder_requires_key_and_key_id(private_key) -> None:
    with pytest.raises(ValueError):
        SignedRequestBuilder(None, TEST_KEY_ID)
    with pytest.raises(ValueError):
        SignedRequestBuilder(private_key, "")
