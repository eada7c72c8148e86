"""
MODULE OVERVIEW:
The HTTP client every service call and watch stream goes through.

WHAT IS HAPPENING HERE:
One `httpx.AsyncClient` (and therefore one connection pool) is shared by every call made
through a `Client`, including any number of concurrent watch streams.
Building a request and sending it are separate steps on purpose: a request that cannot
even be built (a token with a newline in it, a URL that doesn't parse) is a programming
error that no amount of retrying fixes, while a failed send usually is worth retrying.
The watch loop relies on that split to tell fatal failures from transient ones.
"""
from typing import Any

import httpx
from loguru import logger

from centraldogma.client.targets import FileWatchTarget, RepoWatchTarget
from centraldogma.client.watch_client import WatchStream
from centraldogma.services import content, project, repository
from centraldogma.shared.config import Settings, settings as default_settings
from centraldogma.shared.errors import ErrorResponse, RequestBuildError
from centraldogma.shared.models import (
    HEAD,
    Change,
    Commit,
    CommitMessage,
    Entry,
    ListEntry,
    Project,
    PushResult,
    Query,
    Repository,
    Revision,
)

def _header_value(value: str) -> str:
    if not value.isascii() or not value.isprintable():
        raise RequestBuildError(f"Invalid header value: {value!r}")
    return value

class Client:
    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or default_settings
        self.base_url = (base_url or self.settings.BASE_URL).rstrip('/')
        self.token = token if token is not None else self.settings.TOKEN
        self.client = httpx.AsyncClient(timeout=self.settings.REQUEST_TIMEOUT_S, transport=transport)

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    # ==========================
    # REQUEST BUILDING
    # ==========================
    def new_request(
        self,
        method: str,
        path: str,
        json: Any = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Request:
        try:
            url = httpx.URL(f"{self.base_url}{path}")
        except httpx.InvalidURL as e:
            raise RequestBuildError(f"Invalid URL: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise RequestBuildError(f"Invalid URL: {url}")

        content_type = "application/json-patch+json" if method == "PATCH" else "application/json"
        all_headers = {
            "Authorization": _header_value(f"Bearer {self.token or 'anonymous'}"),
            "Content-Type": content_type,
        }
        for key, value in (headers or {}).items():
            all_headers[key] = _header_value(value)

        kwargs: dict[str, Any] = {"headers": all_headers}
        if json is not None:
            kwargs["json"] = json
        if timeout is not None:
            kwargs["timeout"] = timeout
        return self.client.build_request(method, url, **kwargs)

    def new_watch_request(
        self,
        path: str,
        last_known_revision: Revision | None,
        timeout_s: float,
    ) -> httpx.Request:
        """
        A conditional long-poll GET.
        `If-None-Match` carries the last revision we saw (HEAD when we haven't seen one yet),
        and `Prefer: wait=N` asks the server to hold the request open for up to N seconds.
        The client side timeout adds a grace buffer so we never hang up first.
        """
        revision = HEAD if last_known_revision is None else last_known_revision
        headers = {"If-None-Match": str(revision)}
        wait_s = int(timeout_s)
        if wait_s > 0:
            headers["Prefer"] = f"wait={wait_s}"
        return self.new_request(
            "GET", path, headers=headers, timeout=timeout_s + self.settings.WATCH_TIMEOUT_BUFFER_S
        )

    # ==========================
    # TRANSPORT
    # ==========================
    async def request(self, req: httpx.Request) -> httpx.Response:
        response = await self.client.send(req)
        logger.debug(f"{req.method} {req.url.raw_path.decode()} status={response.status_code}")
        return response

    @staticmethod
    def status_unwrap(response: httpx.Response) -> httpx.Response:
        if response.is_success:
            return response
        try:
            message = response.json().get("message", "")
        except (ValueError, AttributeError):
            message = response.text
        raise ErrorResponse(response.status_code, message or "")

    # ==========================
    # PROJECTS
    # ==========================
    async def create_project(self, name: str) -> Project:
        return await project.create(self, name)

    async def remove_project(self, name: str) -> None:
        await project.remove(self, name)

    async def purge_project(self, name: str) -> None:
        await project.purge(self, name)

    async def unremove_project(self, name: str) -> Project:
        return await project.unremove(self, name)

    async def list_projects(self) -> list[Project]:
        return await project.list_projects(self)

    async def list_removed_projects(self) -> list[str]:
        return await project.list_removed(self)

    def project(self, project_name: str) -> "ProjectClient":
        return ProjectClient(self, project_name)

    def repo(self, project_name: str, repo_name: str) -> "RepoClient":
        return RepoClient(self, project_name, repo_name)

class ProjectClient:
    """Repository calls scoped to one project."""

    def __init__(self, client: Client, project_name: str):
        self.client = client
        self.project = project_name

    async def create_repo(self, repo_name: str) -> Repository:
        return await repository.create(self.client, self.project, repo_name)

    async def remove_repo(self, repo_name: str) -> None:
        await repository.remove(self.client, self.project, repo_name)

    async def purge_repo(self, repo_name: str) -> None:
        await repository.purge(self.client, self.project, repo_name)

    async def unremove_repo(self, repo_name: str) -> Repository:
        return await repository.unremove(self.client, self.project, repo_name)

    async def list_repos(self) -> list[Repository]:
        return await repository.list_repos(self.client, self.project)

    async def list_removed_repos(self) -> list[str]:
        return await repository.list_removed(self.client, self.project)

    def repo(self, repo_name: str) -> "RepoClient":
        return RepoClient(self.client, self.project, repo_name)

class RepoClient:
    """Content and watch calls scoped to one repository."""

    def __init__(self, client: Client, project_name: str, repo_name: str):
        self.client = client
        self.project = project_name
        self.repo = repo_name

    async def list_files(self, revision: Revision | None = None, path_pattern: str = "") -> list[ListEntry]:
        return await content.list_files(self.client, self.project, self.repo, revision, path_pattern)

    async def get_file(self, revision: Revision | None, query: Query) -> Entry:
        return await content.get_file(self.client, self.project, self.repo, revision, query)

    async def get_files(self, revision: Revision | None = None, path_pattern: str = "") -> list[Entry]:
        return await content.get_files(self.client, self.project, self.repo, revision, path_pattern)

    async def get_history(
        self,
        from_rev: Revision | None,
        to_rev: Revision | None,
        path: str,
        max_commits: int | None = None,
    ) -> list[Commit]:
        return await content.get_history(
            self.client, self.project, self.repo, from_rev, to_rev, path, max_commits
        )

    async def get_diff(self, from_rev: Revision | None, to_rev: Revision | None, query: Query) -> Change:
        return await content.get_diff(self.client, self.project, self.repo, from_rev, to_rev, query)

    async def get_diffs(
        self, from_rev: Revision | None, to_rev: Revision | None, path_pattern: str = ""
    ) -> list[Change]:
        return await content.get_diffs(self.client, self.project, self.repo, from_rev, to_rev, path_pattern)

    async def push(
        self, base_revision: Revision | None, commit_message: CommitMessage, changes: list[Change]
    ) -> PushResult:
        return await content.push(self.client, self.project, self.repo, base_revision, commit_message, changes)

    def watch_file_stream(
        self,
        query: Query,
        timeout_s: float | None = None,
        initial_revision: Revision | None = None,
    ) -> WatchStream:
        """
        A stream yielding a WatchFileResult every time the result of `query` changes.
        Without `initial_revision` the first value reports the file as it currently is.
        """
        target = FileWatchTarget(project=self.project, repo=self.repo, query=query)
        return WatchStream(self.client, target, timeout_s=timeout_s, initial_revision=initial_revision)

    def watch_repo_stream(
        self,
        path_pattern: str = "",
        timeout_s: float | None = None,
        initial_revision: Revision | None = None,
    ) -> WatchStream:
        """A stream yielding a WatchRepoResult for each new commit touching files matched by `path_pattern`."""
        target = RepoWatchTarget(project=self.project, repo=self.repo, path_pattern=path_pattern)
        return WatchStream(self.client, target, timeout_s=timeout_s, initial_revision=initial_revision)
