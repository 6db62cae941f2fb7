"""Guard chains — ordered units that run before a route handler.

A guard is any callable matching::

    async def guard(request: Request) -> Outcome: ...

It returns ``Proceed(request)`` to hand a (possibly enriched) request to
the next unit, or ``Halt(response)`` to end the chain with that response.
Once a guard halts, nothing downstream runs.
"""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias

from wren._internal.invoke import invoke
from wren.http.request import Request
from wren.http.response import Response


@dataclass(frozen=True, slots=True)
class Proceed:
    """Continue the chain with *request*."""

    request: Request


@dataclass(frozen=True, slots=True)
class Halt:
    """Stop the chain and answer with *response*."""

    response: Response


Outcome: TypeAlias = Proceed | Halt

Guard: TypeAlias = Callable[[Request], Awaitable[Outcome] | Outcome]


async def run_chain(
    guards: Sequence[Guard],
    handler: Callable[[Request], Awaitable[Any]],
    request: Request,
) -> Any:
    """Run *guards* in order, then *handler* with the last proceeded request.

    Returns the halting guard's response, or whatever the handler returns.
    Exceptions raised by a guard propagate unchanged.
    """
    for guard in guards:
        outcome = await invoke(guard, request)
        match outcome:
            case Proceed(request=forwarded):
                request = forwarded
            case Halt(response=response):
                return response
            case _:
                name = getattr(guard, "__qualname__", type(guard).__name__)
                msg = f"Guard {name} returned {type(outcome).__name__}; expected Proceed or Halt."
                raise TypeError(msg)
    return await handler(request)
