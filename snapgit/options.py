from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class GitOptions:
    """Everything one commit invocation needs."""

    root: Any  # working tree directory (str or os.PathLike)
    store: Any  # ObjectStore for root/.git
    name: str
    email: str
    commit_message: str = ''
