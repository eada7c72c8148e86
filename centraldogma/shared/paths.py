"""
MODULE OVERVIEW:
Builders for every REST path the client talks to.

WHAT IS HAPPENING HERE:
Paths are relative to the server base URL and always start with /api/v1.
Query strings are form-encoded (so `/a.json` becomes `%2Fa.json`), and a parameter
whose value is empty or unset is left out entirely rather than sent blank.
"""
from urllib.parse import urlencode

from centraldogma.shared.models import Query, QueryType, Revision

PATH_PREFIX = "/api/v1"

# Query parameter names
REVISION = "revision"
JSONPATH = "jsonpath"
PATH = "path"
PATH_PATTERN = "pathPattern"
MAX_COMMITS = "maxCommits"
FROM = "from"
TO = "to"


def normalize_path_pattern(path_pattern: str) -> str:
    """
    A path pattern is a variant of glob:
      "/**"              all files recursively
      "*.json"           all JSON files recursively
      "/foo/*.json"      all JSON files under /foo
      "/*/foo.txt"       files named foo.txt at the second depth level
      "*.json,/bar/*.txt" more than one pattern, comma separated
    """
    if not path_pattern:
        return "/**"
    if path_pattern.startswith("**"):
        return f"/{path_pattern}"
    if not path_pattern.startswith("/"):
        return f"/**/{path_pattern}"
    return path_pattern


def _with_params(url: str, pairs: list[tuple[str, object]]) -> str:
    kept = [(k, str(v)) for k, v in pairs if v is not None and str(v) != ""]
    return f"{url}?{urlencode(kept)}" if kept else url


def _jsonpath_pairs(query: Query) -> list[tuple[str, object]]:
    if query.type is QueryType.JSON_PATH:
        return [(JSONPATH, expr) for expr in query.expressions]
    return []


def projects_path() -> str:
    return f"{PATH_PREFIX}/projects"


def removed_projects_path() -> str:
    return f"{PATH_PREFIX}/projects?status=removed"


def project_path(project_name: str) -> str:
    return f"{PATH_PREFIX}/projects/{project_name}"


def removed_project_path(project_name: str) -> str:
    return f"{PATH_PREFIX}/projects/{project_name}/removed"


def repos_path(project_name: str) -> str:
    return f"{PATH_PREFIX}/projects/{project_name}/repos"


def removed_repos_path(project_name: str) -> str:
    return f"{PATH_PREFIX}/projects/{project_name}/repos?status=removed"


def repo_path(project_name: str, repo_name: str) -> str:
    return f"{PATH_PREFIX}/projects/{project_name}/repos/{repo_name}"


def removed_repo_path(project_name: str, repo_name: str) -> str:
    return f"{PATH_PREFIX}/projects/{project_name}/repos/{repo_name}/removed"


def list_contents_path(project_name: str, repo_name: str, revision: Revision | None, path_pattern: str) -> str:
    url = f"{repo_path(project_name, repo_name)}/list{normalize_path_pattern(path_pattern)}"
    return _with_params(url, [(REVISION, revision)])


def contents_path(project_name: str, repo_name: str, revision: Revision | None, path_pattern: str) -> str:
    url = f"{repo_path(project_name, repo_name)}/contents{normalize_path_pattern(path_pattern)}"
    return _with_params(url, [(REVISION, revision)])


def content_path(project_name: str, repo_name: str, revision: Revision | None, query: Query) -> str:
    url = f"{repo_path(project_name, repo_name)}/contents{query.path}"
    return _with_params(url, [(REVISION, revision)] + _jsonpath_pairs(query))


def content_commits_path(
    project_name: str,
    repo_name: str,
    from_rev: Revision | None,
    to_rev: Revision | None,
    path: str,
    max_commits: int | None = None,
) -> str:
    from_part = "" if from_rev is None else str(from_rev)
    url = f"{repo_path(project_name, repo_name)}/commits/{from_part}"
    return _with_params(url, [(PATH, path), (TO, to_rev), (MAX_COMMITS, max_commits)])


def content_compare_path(
    project_name: str, repo_name: str, from_rev: Revision | None, to_rev: Revision | None, query: Query
) -> str:
    url = f"{repo_path(project_name, repo_name)}/compare"
    pairs = [(PATH, query.path), (FROM, from_rev), (TO, to_rev)] + _jsonpath_pairs(query)
    return _with_params(url, pairs)


def contents_compare_path(
    project_name: str, repo_name: str, from_rev: Revision | None, to_rev: Revision | None, path_pattern: str
) -> str:
    url = f"{repo_path(project_name, repo_name)}/compare"
    pairs = [(PATH_PATTERN, normalize_path_pattern(path_pattern)), (FROM, from_rev), (TO, to_rev)]
    return _with_params(url, pairs)


def contents_push_path(project_name: str, repo_name: str, base_revision: Revision | None) -> str:
    url = f"{repo_path(project_name, repo_name)}/contents"
    return _with_params(url, [(REVISION, base_revision)])


def content_watch_path(project_name: str, repo_name: str, query: Query) -> str:
    url = f"{repo_path(project_name, repo_name)}/contents{query.path}"
    return _with_params(url, _jsonpath_pairs(query))


def repo_watch_path(project_name: str, repo_name: str, path_pattern: str) -> str:
    return f"{repo_path(project_name, repo_name)}/contents{normalize_path_pattern(path_pattern)}"
