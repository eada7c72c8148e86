"""
MODULE OVERVIEW:
What a watch stream is watching.

WHAT IS HAPPENING HERE:
A watch can follow a single file (through a Query, so JSON path projections apply)
or a whole repository narrowed by a path pattern. Each kind knows its own request path
and which notification model a 200 body decodes into, so the polling loop never has
to inspect which kind it was handed.
"""
from typing import Literal

import httpx
from pydantic import BaseModel, ConfigDict

from centraldogma.shared import paths
from centraldogma.shared.client_utils import decode_json
from centraldogma.shared.models import Query, WatchFileResult, WatchRepoResult

class FileWatchTarget(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    project: str
    repo: str
    query: Query

    def path(self) -> str:
        return paths.content_watch_path(self.project, self.repo, self.query)

    def decode(self, response: httpx.Response) -> WatchFileResult:
        return decode_json(response, WatchFileResult)

    def __str__(self) -> str:
        return f"{self.project}/{self.repo}{self.query.path}"

class RepoWatchTarget(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["repo"] = "repo"
    project: str
    repo: str
    path_pattern: str = ""

    def path(self) -> str:
        return paths.repo_watch_path(self.project, self.repo, self.path_pattern)

    def decode(self, response: httpx.Response) -> WatchRepoResult:
        return decode_json(response, WatchRepoResult)

    def __str__(self) -> str:
        return f"{self.project}/{self.repo}:{paths.normalize_path_pattern(self.path_pattern)}"

WatchTarget = FileWatchTarget | RepoWatchTarget
