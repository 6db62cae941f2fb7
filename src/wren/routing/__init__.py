"""Routing — declarative route tables compiled into a trie router.

Tables are built during setup, handed to the app, and compiled into an
immutable lookup structure when the app freezes.
"""

from wren.routing.chain import Guard, Halt, Outcome, Proceed, run_chain
from wren.routing.route import Route, RouteMatch
from wren.routing.router import Router
from wren.routing.table import HTTP_METHODS, RouteEntry, RouteTable

__all__ = [
    "HTTP_METHODS",
    "Guard",
    "Halt",
    "Outcome",
    "Proceed",
    "Route",
    "RouteEntry",
    "RouteMatch",
    "RouteTable",
    "Router",
    "run_chain",
]
