"""Property tests for the envelope decoder."""

from __future__ import annotations

import json

from hypothesis import given, settings, strategies as st

from better_auth.api.decoder import ApiFailure, EnvelopeDecoder, Ok
from better_auth.models import AuthData, EmptyResponse

decoder = EnvelopeDecoder()

_text = st.text(min_size=1, max_size=40)

_error = st.fixed_dictionaries(
    {"message": st.text(max_size=40)},
    optional={"code": st.one_of(st.none(), st.sampled_from(["INVALID_CREDENTIALS", "UNAUTHORIZED"]), _text)},
)

_auth_payload = st.fixed_dictionaries(
    {"session": st.fixed_dictionaries({"token": _text})},
    optional={"user": st.fixed_dictionaries({"id": _text}, optional={"email": _text})},
)

_json_values = st.recursive(
    st.one_of(st.none(), st.booleans(), st.integers(), st.text(max_size=20)),
    lambda children: st.one_of(
        st.lists(children, max_size=4),
        st.dictionaries(st.text(max_size=10), children, max_size=4),
    ),
    max_leaves=10,
)

_non_success_status = st.integers(min_value=100, max_value=599).filter(lambda s: not 200 <= s <= 299)


@settings(max_examples=100)
@given(
    error=_error,
    success=st.sampled_from([None, True, False]),
    data=st.one_of(st.none(), _auth_payload, _json_values),
    status=st.integers(min_value=200, max_value=299),
)
def test_top_level_error_always_yields_api_failure(error, success, data, status):
    """An envelope with an error decodes to ApiFailure whatever success/data say."""
    envelope = {"error": error}
    if success is not None:
        envelope["success"] = success
    if data is not None:
        envelope["data"] = data

    result = decoder.decode(status, json.dumps(envelope).encode(), AuthData)

    assert isinstance(result, ApiFailure)
    assert result.error.message == error["message"]
    assert result.error.code == error.get("code")


@settings(max_examples=100)
@given(payload=_auth_payload)
def test_bare_payload_matches_wrapped_payload(payload):
    """A bare payload decodes to the same value as {"data": payload}."""
    bare = decoder.decode(200, json.dumps(payload).encode(), AuthData)
    wrapped = decoder.decode(200, json.dumps({"data": payload}).encode(), AuthData)

    assert isinstance(bare, Ok)
    assert isinstance(wrapped, Ok)
    assert bare.value == wrapped.value


@settings(max_examples=200)
@given(
    status=_non_success_status,
    body=st.one_of(
        _json_values.map(lambda value: json.dumps(value).encode()),
        _auth_payload.map(lambda value: json.dumps({"success": True, "data": value}).encode()),
        st.text(max_size=60).map(str.encode),
    ),
    payload_type=st.sampled_from([AuthData, EmptyResponse, dict]),
)
def test_non_success_status_is_never_ok(status, body, payload_type):
    result = decoder.decode(status, body, payload_type)

    assert not isinstance(result, Ok)
    assert not result.is_ok
