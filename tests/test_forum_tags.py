import json

import pytest
import respx
from httpx import Response

from forum_bridge.errors import DecodeError, DiscordAPIError, TagNotFoundError
from forum_bridge.forum import ForumClient

CHANNEL_URL = "https://discord.com/api/v10/channels/555"


@pytest.fixture
def client():
    with ForumClient.create(token="bot-token", forum_channel_id="555") as client:
        yield client


def test_existing_tag_is_reused_without_update(client):
    with respx.mock(assert_all_called=False) as router:
        fetch = router.get(CHANNEL_URL).mock(
            return_value=Response(200, json={"id": "555", "available_tags": [{"id": "1", "name": "repoA"}]})
        )
        update = router.patch(CHANNEL_URL).mock(return_value=Response(200, json={}))

        assert client.get_or_create_repo_tag("repoA") == "1"

    assert fetch.call_count == 1
    assert not update.called


def test_repeat_lookup_after_creation_takes_fast_path(client):
    with respx.mock(assert_all_called=False) as router:
        fetch = router.get(CHANNEL_URL).mock(
            side_effect=[
                Response(200, json={"available_tags": []}),
                Response(200, json={"available_tags": [{"id": "42", "name": "repoB"}]}),
            ]
        )
        update = router.patch(CHANNEL_URL).mock(
            return_value=Response(200, json={"available_tags": [{"id": "42", "name": "repoB"}]})
        )

        assert client.get_or_create_repo_tag("repoB") == "42"
        assert client.get_or_create_repo_tag("repoB") == "42"

    assert fetch.call_count == 2
    assert update.call_count == 1


@respx.mock
def test_fast_path_issues_no_patch(client):
    respx.get(CHANNEL_URL).mock(
        return_value=Response(200, json={"available_tags": [{"id": "1", "name": "repoA"}]})
    )

    assert client.get_or_create_repo_tag("repoA") == "1"
    assert [call.request.method for call in respx.calls] == ["GET"]


@respx.mock
def test_missing_tag_is_created(client):
    fetch = respx.get(CHANNEL_URL).mock(return_value=Response(200, json={"available_tags": []}))
    update = respx.patch(CHANNEL_URL).mock(
        return_value=Response(200, json={"available_tags": [{"id": "42", "name": "repoB"}]})
    )

    assert client.get_or_create_repo_tag("repoB") == "42"
    assert fetch.call_count == 1
    assert update.call_count == 1
    request = update.calls.last.request
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.content) == {"available_tags": [{"name": "repoB"}]}


@respx.mock
def test_update_appends_to_existing_catalog(client):
    respx.get(CHANNEL_URL).mock(
        return_value=Response(
            200,
            json={
                "available_tags": [
                    {"id": "1", "name": "repoA", "moderated": True, "emoji_name": "🐛"},
                ]
            },
        )
    )
    update = respx.patch(CHANNEL_URL).mock(
        return_value=Response(
            200,
            json={"available_tags": [{"id": "1", "name": "repoA"}, {"id": "7", "name": "repoC"}]},
        )
    )

    assert client.get_or_create_repo_tag("repoC") == "7"
    sent = json.loads(update.calls.last.request.content)
    assert sent == {
        "available_tags": [
            {"id": "1", "name": "repoA", "moderated": True, "emoji_name": "🐛"},
            {"name": "repoC"},
        ]
    }


@respx.mock
def test_tag_match_is_case_sensitive(client):
    respx.get(CHANNEL_URL).mock(
        return_value=Response(200, json={"available_tags": [{"id": "1", "name": "RepoA"}]})
    )
    update = respx.patch(CHANNEL_URL).mock(
        return_value=Response(
            200,
            json={"available_tags": [{"id": "1", "name": "RepoA"}, {"id": "2", "name": "repoa"}]},
        )
    )

    assert client.get_or_create_repo_tag("repoa") == "2"
    assert update.called


@respx.mock
def test_tag_absent_after_update_fails(client):
    respx.get(CHANNEL_URL).mock(return_value=Response(200, json={"available_tags": []}))
    respx.patch(CHANNEL_URL).mock(
        return_value=Response(200, json={"available_tags": [{"id": "9", "name": "other"}]})
    )

    with pytest.raises(TagNotFoundError, match="tag created but not found"):
        client.get_or_create_repo_tag("repoB")


@respx.mock
def test_fetch_error_surfaces_status_and_body(client):
    respx.get(CHANNEL_URL).mock(
        return_value=Response(404, text='{"message": "Unknown Channel", "code": 10003}')
    )

    with pytest.raises(DiscordAPIError) as excinfo:
        client.get_or_create_repo_tag("repoA")
    assert excinfo.value.status_code == 404
    assert excinfo.value.body == '{"message": "Unknown Channel", "code": 10003}'


@respx.mock
def test_update_error_surfaces_status(client):
    respx.get(CHANNEL_URL).mock(return_value=Response(200, json={"available_tags": []}))
    respx.patch(CHANNEL_URL).mock(return_value=Response(403, text="Missing Permissions"))

    with pytest.raises(DiscordAPIError, match="status 403.*Missing Permissions"):
        client.get_or_create_repo_tag("repoB")


@respx.mock
def test_malformed_channel_is_decode_error(client):
    respx.get(CHANNEL_URL).mock(return_value=Response(200, text="<html>gateway</html>"))

    with pytest.raises(DecodeError):
        client.get_or_create_repo_tag("repoA")


@respx.mock
def test_wrong_tag_shape_is_decode_error(client):
    respx.get(CHANNEL_URL).mock(return_value=Response(200, json={"available_tags": [{"id": "1"}]}))

    with pytest.raises(DecodeError):
        client.get_or_create_repo_tag("repoA")
