"""Navigation between screens."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Callable


class Screen(IntEnum):
    """A screen that may be navigated to."""

    MAIN = 1
    SORT_SELECT = 2


@dataclass(frozen=True)
class GoMsg:
    """A message to go to a given screen."""

    screen: Screen


def go(screen: Screen) -> Callable[[], GoMsg]:
    """Return a command that produces a message to go to screen."""

    def command() -> GoMsg:
        return GoMsg(screen=screen)

    return command