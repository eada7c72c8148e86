"""Tests for project, repository and content calls against a mocked server."""

import json

import httpx
import pytest

from centraldogma.shared.errors import DecodeError, ErrorResponse, InvalidParams
from centraldogma.shared.models import (
    HEAD,
    Change,
    ChangeType,
    CommitMessage,
    EntryType,
    Query,
)

from conftest import entry_json

AUTHOR = {"name": "minux", "email": "minux@m.x"}


class Recorder:
    """Returns the same response to every request and keeps the requests."""

    def __init__(self, status=200, body=None, content=None):
        self.status = status
        self.body = body
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request):
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status, content=self.content)
        if self.body is None:
            return httpx.Response(self.status)
        return httpx.Response(self.status, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def sent_json(request):
    return json.loads(request.content)


@pytest.mark.asyncio
async def test_list_projects(make_client):
    server = Recorder(body=[{"name": "foo", "creator": AUTHOR, "url": "/api/v1/projects/foo"}, {"name": "bar", "creator": AUTHOR}])
    client = make_client(server)

    projects = await client.list_projects()

    assert [p.name for p in projects] == ["foo", "bar"]
    assert projects[0].creator.email == "minux@m.x"
    assert server.last.method == "GET"
    assert server.last.url.path == "/api/v1/projects"
    await client.aclose()


@pytest.mark.asyncio
async def test_list_projects_with_empty_body(make_client):
    client = make_client(Recorder(content=b""))

    assert await client.list_projects() == []
    await client.aclose()


@pytest.mark.asyncio
async def test_list_removed_projects(make_client):
    server = Recorder(body=[{"name": "foo"}, {"name": "bar"}])
    client = make_client(server)

    assert await client.list_removed_projects() == ["foo", "bar"]
    assert server.last.url.params["status"] == "removed"
    await client.aclose()


@pytest.mark.asyncio
async def test_create_project(make_client):
    server = Recorder(status=201, body={"name": "foo", "creator": AUTHOR})
    client = make_client(server)

    project = await client.create_project("foo")

    assert project.name == "foo"
    assert server.last.method == "POST"
    assert sent_json(server.last) == {"name": "foo"}
    await client.aclose()


@pytest.mark.asyncio
async def test_remove_and_purge_project(make_client):
    server = Recorder(status=204)
    client = make_client(server)

    await client.remove_project("foo")
    await client.purge_project("foo")

    assert [(r.method, r.url.path) for r in server.requests] == [
        ("DELETE", "/api/v1/projects/foo"),
        ("DELETE", "/api/v1/projects/foo/removed"),
    ]
    await client.aclose()


@pytest.mark.asyncio
async def test_unremove_project(make_client):
    server = Recorder(body={"name": "foo", "creator": AUTHOR, "url": "/api/v1/projects/foo"})
    client = make_client(server)

    project = await client.unremove_project("foo")

    assert project.url == "/api/v1/projects/foo"
    assert server.last.method == "PATCH"
    assert server.last.headers["content-type"] == "application/json-patch+json"
    assert sent_json(server.last) == [{"op": "replace", "path": "/status", "value": "active"}]
    await client.aclose()


@pytest.mark.asyncio
async def test_error_status_raises_error_response(make_client):
    client = make_client(Recorder(status=409, body={"message": "project exists"}))

    with pytest.raises(ErrorResponse) as exc_info:
        await client.create_project("foo")

    assert exc_info.value.status_code == 409
    assert str(exc_info.value) == "Error response: [409] project exists"
    await client.aclose()


@pytest.mark.asyncio
async def test_unexpected_body_raises_decode_error(make_client):
    client = make_client(Recorder(body={"unexpected": True}))

    with pytest.raises(DecodeError):
        await client.create_project("foo")
    await client.aclose()


@pytest.mark.asyncio
async def test_repo_crud_is_scoped_to_project(make_client):
    repo_json = {"name": "bar", "creator": AUTHOR, "headRevision": 2}
    server = Recorder(body=repo_json)
    client = make_client(server)
    project = client.project("foo")

    created = await project.create_repo("bar")
    await project.remove_repo("bar")
    await project.purge_repo("bar")
    restored = await project.unremove_repo("bar")

    assert created.head_revision == 2
    assert restored.name == "bar"
    assert [(r.method, r.url.path) for r in server.requests] == [
        ("POST", "/api/v1/projects/foo/repos"),
        ("DELETE", "/api/v1/projects/foo/repos/bar"),
        ("DELETE", "/api/v1/projects/foo/repos/bar/removed"),
        ("PATCH", "/api/v1/projects/foo/repos/bar"),
    ]
    assert sent_json(server.requests[0]) == {"name": "bar"}
    await client.aclose()


@pytest.mark.asyncio
async def test_list_repos(make_client):
    server = Recorder(body=[{"name": "bar", "creator": AUTHOR, "headRevision": 5}])
    client = make_client(server)

    repos = await client.project("foo").list_repos()

    assert repos[0].head_revision == 5
    assert server.last.url.path == "/api/v1/projects/foo/repos"
    await client.aclose()


@pytest.mark.asyncio
async def test_list_removed_repos_with_empty_body(make_client):
    server = Recorder(content=b"")
    client = make_client(server)

    assert await client.project("foo").list_removed_repos() == []
    assert server.last.url.params["status"] == "removed"
    await client.aclose()


@pytest.mark.asyncio
async def test_get_file(make_client):
    server = Recorder(body=entry_json(3, {"a": "b"}))
    client = make_client(server)

    entry = await client.repo("foo", "bar").get_file(HEAD, Query.of_json_path("/a.json", ["$.a"]))

    assert entry.type is EntryType.JSON
    assert entry.content == {"a": "b"}
    assert server.last.url.path == "/api/v1/projects/foo/repos/bar/contents/a.json"
    assert server.last.url.params.get_list("jsonpath") == ["$.a"]
    assert server.last.url.params["revision"] == "-1"
    await client.aclose()


@pytest.mark.asyncio
async def test_get_files_and_list_files(make_client):
    server = Recorder(body=[entry_json(1, {"x": 1}, path="/x.json")])
    client = make_client(server)
    repo = client.repo("foo", "bar")

    entries = await repo.get_files(path_pattern="*.json")
    listed = await repo.list_files(revision=1)

    assert entries[0].path == "/x.json"
    assert listed[0].type is EntryType.JSON
    assert server.requests[0].url.path == "/api/v1/projects/foo/repos/bar/contents/**/*.json"
    assert server.requests[1].url.path == "/api/v1/projects/foo/repos/bar/list/**"
    await client.aclose()


@pytest.mark.asyncio
async def test_get_history(make_client):
    commit = {
        "revision": 2,
        "author": AUTHOR,
        "commitMessage": {"summary": "Add a", "markup": "PLAINTEXT"},
        "pushedAt": "2024-01-01T00:00:00Z",
    }
    server = Recorder(body=[commit])
    client = make_client(server)

    history = await client.repo("foo", "bar").get_history(1, 2, "/a.json", max_commits=10)

    assert history[0].commit_message.summary == "Add a"
    assert server.last.url.path == "/api/v1/projects/foo/repos/bar/commits/1"
    assert server.last.url.params["maxCommits"] == "10"
    await client.aclose()


@pytest.mark.asyncio
async def test_get_diff_and_diffs(make_client):
    change = {"path": "/a.json", "type": "APPLY_JSON_PATCH", "content": [{"op": "add", "path": "/a", "value": 1}]}
    client = make_client(Recorder(body=change))
    repo = client.repo("foo", "bar")

    diff = await repo.get_diff(1, 2, Query.identity("/a.json"))
    assert diff.type is ChangeType.APPLY_JSON_PATCH
    await client.aclose()

    client = make_client(Recorder(body=[change]))
    diffs = await client.repo("foo", "bar").get_diffs(1, 2, "*.json")
    assert diffs[0].path == "/a.json"
    await client.aclose()


@pytest.mark.asyncio
async def test_push(make_client):
    server = Recorder(body={"revision": 4, "pushedAt": "2024-01-01T00:00:00Z"})
    client = make_client(server)

    result = await client.repo("foo", "bar").push(
        HEAD,
        CommitMessage(summary="Add a"),
        [Change(path="/a.json", type=ChangeType.UPSERT_JSON, content={"a": 1})],
    )

    assert result.revision == 4
    assert server.last.method == "POST"
    assert server.last.url.params["revision"] == "-1"
    assert sent_json(server.last) == {
        "commitMessage": {"summary": "Add a"},
        "changes": [{"path": "/a.json", "type": "UPSERT_JSON", "content": {"a": 1}}],
    }
    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "summary,changes",
    [
        ("", [Change(path="/a.json", type=ChangeType.REMOVE)]),
        ("Remove a", []),
    ],
)
async def test_push_rejects_bad_arguments_without_sending(make_client, summary, changes):
    server = Recorder(body={"revision": 4})
    client = make_client(server)

    with pytest.raises(InvalidParams):
        await client.repo("foo", "bar").push(HEAD, CommitMessage(summary=summary), changes)

    assert server.requests == []
    await client.aclose()
