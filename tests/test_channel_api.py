import pytest


@pytest.mark.parametrize(
    "method, path",
    [
        ("GET", "/user"),
        ("GET", "/user/1/channel"),
        ("POST", "/user/1/channel/1/subscribe"),
        ("POST", "/user/1/channel/1/unsubscribe"),
        ("GET", "/channel/1"),
        ("GET", "/channel/1/subscribers"),
        ("GET", "/channel/1/movie"),
        ("POST", "/channel"),
        ("PUT", "/channel/1"),
        ("DELETE", "/channel/1"),
        ("GET", "/user/abc/channel"),
        ("POST", "/user/abc/channel/xyz/subscribe"),
        ("GET", "/channel/abc"),
        ("PUT", "/channel/abc"),
    ],
)
def test_unimplemented_endpoints_return_empty_ok(client, method, path):
    r = client.request(method, path)
    assert r.status_code == 200
    assert r.content == b""
