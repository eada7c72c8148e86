"""
MODULE OVERVIEW:
The strictly typed data structures exchanged with a Central Dogma server, powered by Pydantic v2.

WHAT IS HAPPENING HERE:
The server speaks camelCase JSON (`headRevision`, `commitMessage`, `pushedAt`).
Every wire model shares one config that maps those names onto snake_case attributes,
so `Repository.model_validate(resp.json())` is all a service call needs to decode a body.
Models are also dumped back with `by_alias=True` when we send them (push, create).

A revision is a plain int: positive values are absolute, -1 is HEAD and
smaller negatives count backwards from HEAD (-2 is the commit before HEAD).
"""
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from centraldogma.shared.errors import InvalidParams

Revision = int

HEAD: Revision = -1
INIT: Revision = 1


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Author(WireModel):
    name: str
    email: str


class Project(WireModel):
    name: str
    creator: Author
    url: str | None = None
    created_at: str | None = None


class Repository(WireModel):
    name: str
    creator: Author
    head_revision: Revision
    url: str | None = None
    created_at: str | None = None


class EntryType(str, Enum):
    JSON = "JSON"
    TEXT = "TEXT"
    DIRECTORY = "DIRECTORY"


class Entry(WireModel):
    """A file or a directory in a repository, with its content at `revision`."""
    path: str
    type: EntryType
    content: Any = None
    revision: Revision
    url: str
    modified_at: str | None = None


class ListEntry(WireModel):
    """Metadata of a file or a directory. No content."""
    path: str
    type: EntryType


class QueryType(str, Enum):
    IDENTITY = "IDENTITY"
    IDENTITY_JSON = "IDENTITY_JSON"
    IDENTITY_TEXT = "IDENTITY_TEXT"
    JSON_PATH = "JSON_PATH"


def _normalize_path(path: str) -> str:
    return path if path.startswith("/") else f"/{path}"


class Query(BaseModel):
    """
    A query on a single file.
    Use the constructors below rather than building one by hand; they normalize the path.
    """
    model_config = ConfigDict(frozen=True)

    path: str
    type: QueryType
    expressions: tuple[str, ...] = ()

    @classmethod
    def identity(cls, path: str) -> "Query":
        """Retrieve the content as it is."""
        if not path:
            raise InvalidParams("query path cannot be empty")
        return cls(path=_normalize_path(path), type=QueryType.IDENTITY)

    @classmethod
    def of_text(cls, path: str) -> "Query":
        if not path:
            raise InvalidParams("query path cannot be empty")
        return cls(path=_normalize_path(path), type=QueryType.IDENTITY_TEXT)

    @classmethod
    def of_json(cls, path: str) -> "Query":
        if not path:
            raise InvalidParams("query path cannot be empty")
        return cls(path=_normalize_path(path), type=QueryType.IDENTITY_JSON)

    @classmethod
    def of_json_path(cls, path: str, expressions: list[str]) -> "Query":
        """Apply a series of JSON path expressions to the content of a JSON file."""
        if not path.lower().endswith("json"):
            raise InvalidParams(f"JSON path query requires a JSON file: {path!r}")
        return cls(path=_normalize_path(path), type=QueryType.JSON_PATH, expressions=tuple(expressions))


class Markup(str, Enum):
    MARKDOWN = "MARKDOWN"
    PLAINTEXT = "PLAINTEXT"


class CommitMessage(WireModel):
    summary: str
    detail: str | None = None
    markup: Markup | None = None


class Commit(WireModel):
    revision: Revision
    author: Author
    commit_message: CommitMessage
    pushed_at: str | None = None


class PushResult(WireModel):
    revision: Revision
    pushed_at: str | None = None


class ChangeType(str, Enum):
    UPSERT_JSON = "UPSERT_JSON"
    UPSERT_TEXT = "UPSERT_TEXT"
    REMOVE = "REMOVE"
    RENAME = "RENAME"
    APPLY_JSON_PATCH = "APPLY_JSON_PATCH"
    APPLY_TEXT_PATCH = "APPLY_TEXT_PATCH"


class Change(WireModel):
    """A modification of an individual file. `content` is absent for REMOVE."""
    path: str
    type: ChangeType
    content: Any = None


# WHAT IS HAPPENING HERE:
# The two notification shapes a watch stream can yield. Both carry the revision
# the server observed, which becomes the baseline (If-None-Match) of the next poll.
class WatchFileResult(WireModel):
    revision: Revision
    entry: Entry


class WatchRepoResult(WireModel):
    revision: Revision


class PushRequest(WireModel):
    commit_message: CommitMessage
    changes: list[Change] = Field(default_factory=list)
