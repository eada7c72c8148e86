"""Project calls: create, remove, purge, unremove and list."""
from typing import TYPE_CHECKING

from pydantic import BaseModel

from centraldogma.shared import paths
from centraldogma.shared.client_utils import decode_json
from centraldogma.shared.models import Project

if TYPE_CHECKING:
    from centraldogma.client.base_client import Client

UNREMOVE_PATCH = [{"op": "replace", "path": "/status", "value": "active"}]

class RemovedProject(BaseModel):
    name: str

async def create(client: "Client", name: str) -> Project:
    req = client.new_request("POST", paths.projects_path(), json={"name": name})
    resp = client.status_unwrap(await client.request(req))
    return decode_json(resp, Project)

async def remove(client: "Client", name: str) -> None:
    """A removed project can be unremoved later, or purged for good."""
    req = client.new_request("DELETE", paths.project_path(name))
    client.status_unwrap(await client.request(req))

async def purge(client: "Client", name: str) -> None:
    req = client.new_request("DELETE", paths.removed_project_path(name))
    client.status_unwrap(await client.request(req))

async def unremove(client: "Client", name: str) -> Project:
    req = client.new_request("PATCH", paths.project_path(name), json=UNREMOVE_PATCH)
    resp = client.status_unwrap(await client.request(req))
    return decode_json(resp, Project)

async def list_projects(client: "Client") -> list[Project]:
    req = client.new_request("GET", paths.projects_path())
    resp = client.status_unwrap(await client.request(req))
    # An empty project list comes back as an empty body rather than []
    if not resp.content:
        return []
    return decode_json(resp, list[Project])

async def list_removed(client: "Client") -> list[str]:
    req = client.new_request("GET", paths.removed_projects_path())
    resp = client.status_unwrap(await client.request(req))
    if not resp.content:
        return []
    return [p.name for p in decode_json(resp, list[RemovedProject])]
