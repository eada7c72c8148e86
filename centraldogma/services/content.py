"""
MODULE OVERVIEW:
Reading and writing file content in one repository.

WHAT IS HAPPENING HERE:
Every read takes a revision; passing None leaves it to the server (HEAD).
Path patterns follow the glob variant documented in `paths.normalize_path_pattern`,
e.g. "*.json" matches JSON files anywhere and "*.json,/bar/*.txt" combines two patterns.
"""
from typing import TYPE_CHECKING

from centraldogma.shared import paths
from centraldogma.shared.client_utils import decode_json
from centraldogma.shared.errors import InvalidParams
from centraldogma.shared.models import (
    Change,
    Commit,
    CommitMessage,
    Entry,
    ListEntry,
    PushRequest,
    PushResult,
    Query,
    Revision,
)

if TYPE_CHECKING:
    from centraldogma.client.base_client import Client

async def list_files(
    client: "Client", project_name: str, repo_name: str, revision: Revision | None, path_pattern: str
) -> list[ListEntry]:
    """Lists the files matched by `path_pattern`, without their content."""
    p = paths.list_contents_path(project_name, repo_name, revision, path_pattern)
    resp = client.status_unwrap(await client.request(client.new_request("GET", p)))
    return decode_json(resp, list[ListEntry])

async def get_file(
    client: "Client", project_name: str, repo_name: str, revision: Revision | None, query: Query
) -> Entry:
    p = paths.content_path(project_name, repo_name, revision, query)
    resp = client.status_unwrap(await client.request(client.new_request("GET", p)))
    return decode_json(resp, Entry)

async def get_files(
    client: "Client", project_name: str, repo_name: str, revision: Revision | None, path_pattern: str
) -> list[Entry]:
    p = paths.contents_path(project_name, repo_name, revision, path_pattern)
    resp = client.status_unwrap(await client.request(client.new_request("GET", p)))
    return decode_json(resp, list[Entry])

async def get_history(
    client: "Client",
    project_name: str,
    repo_name: str,
    from_rev: Revision | None,
    to_rev: Revision | None,
    path: str,
    max_commits: int | None = None,
) -> list[Commit]:
    """
    Commit metadata for the files matched by `path` between two revisions.
    No diffs here; use get_diff / get_diffs for those.
    """
    p = paths.content_commits_path(project_name, repo_name, from_rev, to_rev, path, max_commits)
    resp = client.status_unwrap(await client.request(client.new_request("GET", p)))
    return decode_json(resp, list[Commit])

async def get_diff(
    client: "Client",
    project_name: str,
    repo_name: str,
    from_rev: Revision | None,
    to_rev: Revision | None,
    query: Query,
) -> Change:
    p = paths.content_compare_path(project_name, repo_name, from_rev, to_rev, query)
    resp = client.status_unwrap(await client.request(client.new_request("GET", p)))
    return decode_json(resp, Change)

async def get_diffs(
    client: "Client",
    project_name: str,
    repo_name: str,
    from_rev: Revision | None,
    to_rev: Revision | None,
    path_pattern: str,
) -> list[Change]:
    p = paths.contents_compare_path(project_name, repo_name, from_rev, to_rev, path_pattern)
    resp = client.status_unwrap(await client.request(client.new_request("GET", p)))
    return decode_json(resp, list[Change])

async def push(
    client: "Client",
    project_name: str,
    repo_name: str,
    base_revision: Revision | None,
    commit_message: CommitMessage,
    changes: list[Change],
) -> PushResult:
    if not commit_message.summary:
        raise InvalidParams("summary of commit_message cannot be empty")
    if not changes:
        raise InvalidParams("no changes to commit")

    body = PushRequest(commit_message=commit_message, changes=changes).model_dump(
        by_alias=True, exclude_none=True, mode="json"
    )
    p = paths.contents_push_path(project_name, repo_name, base_revision)
    resp = client.status_unwrap(await client.request(client.new_request("POST", p, json=body)))
    return decode_json(resp, PushResult)
