"""Unit tests for the remote user client."""

import pytest
import requests

from clientbook.clients.client_models import RemoteUser
from clientbook.errors import DecodeError, NetworkError
from conftest import BASE_URL, make_response

USERS = [
    {
        "id": 1,
        "name": "Leanne Graham",
        "username": "Bret",
        "email": "Sincere@april.biz",
        "address": {"city": "Gwenborough"},
        "phone": "1-770-736-8031 x56442",
    },
    {"id": 2, "name": "Ervin Howell", "username": "Antonette", "email": "Shanna@melissa.tv"},
]


def test_fetch_users_decodes_array_and_ignores_extra_fields(remote, http_session):
    http_session.request.return_value = make_response(200, USERS)

    users = remote.fetch_users()

    assert users == [
        RemoteUser(id=1, name="Leanne Graham", email="Sincere@april.biz", username="Bret"),
        RemoteUser(id=2, name="Ervin Howell", email="Shanna@melissa.tv", username="Antonette"),
    ]
    method, url = http_session.request.call_args.args
    assert (method, url) == ("GET", f"{BASE_URL}/users")
    assert http_session.request.call_args.kwargs["timeout"] == 5
    assert http_session.request.call_args.kwargs["headers"]["User-Agent"] == "clientbook-tests"


def test_remote_user_maps_username_to_external_ref():
    record = RemoteUser(id=1, name="A", email="a@x.com", username="u1").to_client_record()

    assert (record.id, record.name, record.email, record.external_ref) == (1, "A", "a@x.com", "u1")


def test_http_error_status_raises_network_error(remote, http_session):
    http_session.request.return_value = make_response(500, "Internal Server Error")

    with pytest.raises(NetworkError) as exc_info:
        remote.fetch_users()

    assert exc_info.value.status_code == 500


def test_redirect_status_is_not_success(remote, http_session):
    http_session.request.return_value = make_response(304)

    with pytest.raises(NetworkError):
        remote.fetch_users()


def test_connection_failure_raises_network_error(remote, http_session):
    http_session.request.side_effect = requests.ConnectionError("Name or service not known")

    with pytest.raises(NetworkError) as exc_info:
        remote.fetch_users()

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, requests.ConnectionError)


def test_timeout_raises_network_error(remote, http_session):
    http_session.request.side_effect = requests.Timeout("read timed out")

    with pytest.raises(NetworkError):
        remote.fetch_users()


@pytest.mark.parametrize(
    "body",
    [
        "<html>not json</html>",
        {"users": []},
        [{"id": 1, "name": "No email", "username": "x"}],
        [{"id": "abc", "name": "A", "email": "a@x.com", "username": "u"}],
        ["just a string"],
    ],
)
def test_malformed_payload_raises_decode_error(remote, http_session, body):
    http_session.request.return_value = make_response(200, body)

    with pytest.raises(DecodeError):
        remote.fetch_users()


def test_fetch_user_by_id(remote, http_session):
    http_session.request.return_value = make_response(200, USERS[1])

    user = remote.fetch_user(2)

    assert user.username == "Antonette"
    assert http_session.request.call_args.args == ("GET", f"{BASE_URL}/users/2")


def test_create_user_posts_without_id(remote, http_session):
    http_session.request.return_value = make_response(
        201, {"id": 11, "name": "New", "email": "new@x.com", "username": "newbie"}
    )

    created = remote.create_user(RemoteUser(id=0, name="New", email="new@x.com", username="newbie"))

    assert created.id == 11
    assert http_session.request.call_args.args == ("POST", f"{BASE_URL}/users")
    assert http_session.request.call_args.kwargs["json"] == {
        "name": "New",
        "email": "new@x.com",
        "username": "newbie",
    }


def test_update_user_puts_full_record(remote, http_session):
    user = RemoteUser(id=3, name="Clementine", email="c@x.com", username="Samantha")
    http_session.request.return_value = make_response(200, user.model_dump())

    assert remote.update_user(user) == user
    assert http_session.request.call_args.args == ("PUT", f"{BASE_URL}/users/3")


def test_delete_user_ignores_body(remote, http_session):
    http_session.request.return_value = make_response(200, "{}")

    assert remote.delete_user(3) is None
    assert http_session.request.call_args.args == ("DELETE", f"{BASE_URL}/users/3")


def test_delete_user_not_found(remote, http_session):
    http_session.request.return_value = make_response(404, "{}")

    with pytest.raises(NetworkError) as exc_info:
        remote.delete_user(999)

    assert exc_info.value.status_code == 404
