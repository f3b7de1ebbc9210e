from __future__ import annotations

import httpx
import pytest
import respx
from httpx import Response
from pydantic import ValidationError

from adapters.gotify_client import MESSAGE_PAGE_LIMIT, GotifyCounter
from core.errors import (
    DecodeError,
    PaginationLimitError,
    TransportError,
    UpstreamStatusError,
)
from tests.conftest import ACCESS_KEY, BASE_URL, message_page


@respx.mock
def test_count_applications_returns_number_of_records(counter):
    route = respx.get(f"{BASE_URL}/application").mock(
        return_value=Response(200, json=[{"id": 1, "name": "backup"}, {"id": 2, "name": "ci"}])
    )

    assert counter.count_applications() == 2
    assert route.call_count == 1
    assert route.calls[0].request.headers["X-Gotify-Key"] == ACCESS_KEY


@respx.mock
def test_count_applications_non_200_raises_status_error(counter):
    respx.get(f"{BASE_URL}/application").mock(return_value=Response(401, json={"error": "Unauthorized"}))

    with pytest.raises(UpstreamStatusError) as excinfo:
        counter.count_applications()

    assert excinfo.value.status_code == 401
    assert excinfo.value.status == "401 Unauthorized"
    assert excinfo.value.endpoint == "/application"


@respx.mock
def test_count_clients_empty_list(counter):
    respx.get(f"{BASE_URL}/client").mock(return_value=Response(200, json=[]))

    assert counter.count_clients() == 0


@respx.mock
def test_count_clients_malformed_json_raises_decode_error(counter):
    respx.get(f"{BASE_URL}/client").mock(return_value=Response(200, text="<html>oops</html>"))

    with pytest.raises(DecodeError) as excinfo:
        counter.count_clients()

    assert excinfo.value.endpoint == "/client"
    assert excinfo.value.phase == "decode"


@respx.mock
def test_count_clients_rejects_non_object_records(counter):
    respx.get(f"{BASE_URL}/client").mock(return_value=Response(200, json=[{"id": 1}, "not-a-client"]))

    with pytest.raises(DecodeError):
        counter.count_clients()


@respx.mock
def test_count_clients_rejects_object_body(counter):
    respx.get(f"{BASE_URL}/client").mock(return_value=Response(200, json={"clients": []}))

    with pytest.raises(DecodeError):
        counter.count_clients()


@respx.mock
def test_single_message_page(counter):
    route = respx.get(f"{BASE_URL}/message").mock(return_value=Response(200, json=message_page(50, 0)))

    assert counter.count_messages() == 50
    assert route.call_count == 1
    params = route.calls[0].request.url.params
    assert params["limit"] == str(MESSAGE_PAGE_LIMIT)
    assert params["since"] == "0"


@pytest.mark.parametrize(
    "sizes",
    [
        [0],
        [200, 200, 13],
        [200, 0, 7],
        [1, 1, 1, 1, 1, 1],
    ],
)
@respx.mock
def test_count_messages_sums_every_page(counter, sizes):
    cursors = [1000 - 10 * i for i in range(1, len(sizes))] + [0]
    respx.get(f"{BASE_URL}/message").mock(
        side_effect=[Response(200, json=message_page(s, c)) for s, c in zip(sizes, cursors)]
    )

    assert counter.count_messages() == sum(sizes)


@respx.mock
def test_empty_page_with_cursor_keeps_paginating(counter):
    route = respx.get(f"{BASE_URL}/message").mock(
        side_effect=[
            Response(200, json=message_page(0, 17)),
            Response(200, json=message_page(5, 0)),
        ]
    )

    assert counter.count_messages() == 5
    assert route.call_count == 2


@respx.mock
def test_cursor_is_threaded_between_pages(counter):
    route = respx.get(f"{BASE_URL}/message").mock(
        side_effect=[
            Response(200, json=message_page(200, 812)),
            Response(200, json=message_page(200, 409)),
            Response(200, json=message_page(9, 0)),
        ]
    )

    assert counter.count_messages() == 409

    sent = [call.request.url.params["since"] for call in route.calls]
    assert sent == ["0", "812", "409"]
    assert all(call.request.headers["X-Gotify-Key"] == ACCESS_KEY for call in route.calls)


@respx.mock
def test_missing_since_is_treated_as_last_page(counter):
    respx.get(f"{BASE_URL}/message").mock(
        return_value=Response(200, json={"messages": [], "paging": {"size": 3, "limit": 200}})
    )

    assert counter.count_messages() == 3


@respx.mock
def test_failure_on_later_page_discards_partial_total(counter):
    respx.get(f"{BASE_URL}/message").mock(
        side_effect=[
            Response(200, json=message_page(200, 500)),
            Response(500, text="internal error"),
        ]
    )

    with pytest.raises(UpstreamStatusError) as excinfo:
        counter.count_messages()

    assert excinfo.value.status_code == 500
    assert excinfo.value.endpoint == "/message"


@pytest.mark.parametrize(
    "body",
    [
        {"messages": []},
        {"paging": {"since": 0}},
        {"paging": {"size": -1, "since": 0}},
        {"paging": {"size": "many", "since": 0}},
    ],
)
@respx.mock
def test_unexpected_message_body_raises_decode_error(counter, body):
    respx.get(f"{BASE_URL}/message").mock(return_value=Response(200, json=body))

    with pytest.raises(DecodeError):
        counter.count_messages()


@respx.mock
def test_timeout_raises_transport_error(counter):
    respx.get(f"{BASE_URL}/message").mock(side_effect=httpx.ReadTimeout("timed out"))

    with pytest.raises(TransportError) as excinfo:
        counter.count_messages()

    assert isinstance(excinfo.value.__cause__, httpx.TimeoutException)
    assert excinfo.value.phase == "fetch"


@respx.mock
def test_connection_error_raises_transport_error(counter):
    respx.get(f"{BASE_URL}/application").mock(side_effect=httpx.ConnectError("refused"))

    with pytest.raises(TransportError):
        counter.count_applications()


@respx.mock
def test_max_pages_stops_runaway_pagination(endpoint, settings):
    route = respx.get(f"{BASE_URL}/message").mock(return_value=Response(200, json=message_page(200, 42)))

    with GotifyCounter(endpoint, settings, max_pages=3) as counter:
        with pytest.raises(PaginationLimitError) as excinfo:
            counter.count_messages()

    assert route.call_count == 3
    assert excinfo.value.pages == 3
    assert excinfo.value.cursor == 42


@respx.mock
def test_max_pages_does_not_trigger_when_last_page_fits(endpoint, settings):
    respx.get(f"{BASE_URL}/message").mock(
        side_effect=[
            Response(200, json=message_page(200, 99)),
            Response(200, json=message_page(4, 0)),
        ]
    )

    with GotifyCounter(endpoint, settings, max_pages=2) as counter:
        assert counter.count_messages() == 204


@respx.mock
def test_repeated_calls_return_identical_counts(counter):
    pages = {"0": message_page(200, 300), "300": message_page(120, 0)}

    def serve(request: httpx.Request) -> Response:
        return Response(200, json=pages[request.url.params["since"]])

    respx.get(f"{BASE_URL}/message").mock(side_effect=serve)
    respx.get(f"{BASE_URL}/application").mock(return_value=Response(200, json=[{"id": 1}]))

    assert counter.count_messages() == counter.count_messages() == 320
    assert counter.count_applications() == counter.count_applications() == 1


@respx.mock
def test_base_url_path_prefix_is_kept(settings):
    from core.domain.models import EndpointConfig

    endpoint = EndpointConfig.build(base_url="http://proxy.test/gotify/", access_key=ACCESS_KEY)
    route = respx.get("http://proxy.test/gotify/client").mock(return_value=Response(200, json=[{}, {}, {}]))

    with GotifyCounter(endpoint, settings) as counter:
        assert counter.count_clients() == 3
    assert route.called


def test_injected_client_is_not_closed(endpoint, settings):
    client = httpx.Client()
    counter = GotifyCounter(endpoint, settings, client=client)
    counter.close()

    assert not client.is_closed
    client.close()


@respx.mock
def test_from_settings_applies_configured_max_pages():
    from core.config import AppSettings

    settings = AppSettings(_env_file=None, url=BASE_URL, key=ACCESS_KEY, max_pages=2)
    route = respx.get(f"{BASE_URL}/message").mock(return_value=Response(200, json=message_page(200, 7)))

    with GotifyCounter.from_settings(settings) as counter:
        assert counter.endpoint.base_url == BASE_URL
        with pytest.raises(PaginationLimitError):
            counter.count_messages()

    assert route.call_count == 2


@respx.mock
def test_decode_error_keeps_validation_error_as_cause(counter):
    respx.get(f"{BASE_URL}/message").mock(return_value=Response(200, json={"paging": {"since": 3}}))

    with pytest.raises(DecodeError) as excinfo:
        counter.count_messages()

    assert isinstance(excinfo.value.__cause__, ValidationError)


@respx.mock
def test_records_with_arbitrary_fields_are_counted(counter):
    respx.get(f"{BASE_URL}/application").mock(
        return_value=Response(200, json=[{"id": "a1", "name": 5}, {"token": None}, {}])
    )

    assert counter.count_applications() == 3


@respx.mock
def test_redirect_loop_raises_transport_error(counter):
    respx.get(f"{BASE_URL}/application").mock(
        return_value=Response(302, headers={"Location": f"{BASE_URL}/application"})
    )

    with pytest.raises(TransportError) as excinfo:
        counter.count_applications()

    assert isinstance(excinfo.value.__cause__, httpx.TooManyRedirects)
    assert excinfo.value.endpoint == "/application"


@respx.mock
def test_corrupt_compressed_body_raises_decode_error(counter):
    # Streamed so the body is only decompressed when the client reads it.
    respx.get(f"{BASE_URL}/client").mock(
        side_effect=lambda request: Response(
            200, headers={"Content-Encoding": "gzip"}, content=iter([b"not-gzip"])
        )
    )

    with pytest.raises(DecodeError) as excinfo:
        counter.count_clients()

    assert isinstance(excinfo.value.__cause__, httpx.DecodingError)
    assert excinfo.value.endpoint == "/client"
