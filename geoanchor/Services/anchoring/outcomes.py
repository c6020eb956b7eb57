# geoanchor/Services/anchoring/outcomes.py
"""
Collaborator Outcomes
=====================
Explicit results for calls into external collaborators.

Every read or write the anchoring core makes against storage or the spatial
query goes through attempt(). Components branch on the result type instead
of wrapping their own logic in try/except:

- Available(value): the collaborator answered
- Unavailable(collaborator, reason): it failed; the component degrades to
  its safe default (no transition, no rules, no filtering, no checkpoint)

Caller input errors are NOT outcomes: they raise InvalidLocationError and
are never degraded.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from geoanchor.Core import log_ws


T = TypeVar('T')


@dataclass(frozen=True)
class Available(Generic[T]):
    value: T


@dataclass(frozen=True)
class Unavailable:
    collaborator: str
    reason: str


Outcome = Union[Available[T], Unavailable]


def attempt(collaborator: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> "Outcome[T]":
    """
    Call a collaborator and capture failure as Unavailable.

    Every degrade is logged as a warning on the /logs stream: the core
    fails open, so this is the only place such outages become visible.
    """
    try:
        return Available(fn(*args, **kwargs))
    except Exception as e:
        reason = f"{type(e).__name__}: {e}"
        log_ws.log_from_thread(
            f"[ANCHOR] Collaborator '{collaborator}' unavailable, degrading: {reason}",
            msg_type="warning"
        )
        return Unavailable(collaborator=collaborator, reason=reason)
