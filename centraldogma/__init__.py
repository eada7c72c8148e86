"""Asyncio client for Central Dogma, with long-poll watch streams."""
from centraldogma.client.base_client import Client, ProjectClient, RepoClient
from centraldogma.client.targets import FileWatchTarget, RepoWatchTarget, WatchTarget
from centraldogma.client.watch_client import (
    PollOutcome,
    PollResult,
    WatchState,
    WatchStream,
    poll,
    watch_stream,
)
from centraldogma.shared.client_utils import delay_time_for
from centraldogma.shared.config import Settings, settings
from centraldogma.shared.errors import (
    CentralDogmaError,
    DecodeError,
    ErrorResponse,
    InvalidParams,
    RequestBuildError,
)
from centraldogma.shared.models import (
    HEAD,
    INIT,
    Author,
    Change,
    ChangeType,
    Commit,
    CommitMessage,
    Entry,
    EntryType,
    ListEntry,
    Markup,
    Project,
    PushResult,
    Query,
    QueryType,
    Repository,
    Revision,
    WatchFileResult,
    WatchRepoResult,
)

__version__ = "0.1.0"
