"""Repository calls, always scoped to one project."""
from typing import TYPE_CHECKING

from pydantic import BaseModel

from centraldogma.services.project import UNREMOVE_PATCH
from centraldogma.shared import paths
from centraldogma.shared.client_utils import decode_json
from centraldogma.shared.models import Repository

if TYPE_CHECKING:
    from centraldogma.client.base_client import Client

class RemovedRepository(BaseModel):
    name: str

async def create(client: "Client", project_name: str, repo_name: str) -> Repository:
    req = client.new_request("POST", paths.repos_path(project_name), json={"name": repo_name})
    resp = client.status_unwrap(await client.request(req))
    return decode_json(resp, Repository)

async def remove(client: "Client", project_name: str, repo_name: str) -> None:
    req = client.new_request("DELETE", paths.repo_path(project_name, repo_name))
    client.status_unwrap(await client.request(req))

async def purge(client: "Client", project_name: str, repo_name: str) -> None:
    req = client.new_request("DELETE", paths.removed_repo_path(project_name, repo_name))
    client.status_unwrap(await client.request(req))

async def unremove(client: "Client", project_name: str, repo_name: str) -> Repository:
    req = client.new_request("PATCH", paths.repo_path(project_name, repo_name), json=UNREMOVE_PATCH)
    resp = client.status_unwrap(await client.request(req))
    return decode_json(resp, Repository)

async def list_repos(client: "Client", project_name: str) -> list[Repository]:
    req = client.new_request("GET", paths.repos_path(project_name))
    resp = client.status_unwrap(await client.request(req))
    if not resp.content:
        return []
    return decode_json(resp, list[Repository])

async def list_removed(client: "Client", project_name: str) -> list[str]:
    req = client.new_request("GET", paths.removed_repos_path(project_name))
    resp = client.status_unwrap(await client.request(req))
    if not resp.content:
        return []
    return [r.name for r in decode_json(resp, list[RemovedRepository])]
