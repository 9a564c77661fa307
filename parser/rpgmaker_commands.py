# -*- coding: utf-8 -*-
"""
RPG Maker MZ Event Commands

Typed view of the raw `{"code": ..., "parameters": [...]}` command objects
found in event pages, common events and troop pages. Only the codes that
carry message text get their own type; everything else is OtherCommand.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Union

import locforge_config as config
from locforge_logger import get_logger

logger = get_logger("parser.rpgmaker_commands")


@dataclass(frozen=True)
class ShowTextSetup:
    """Code 101: opens a message window (face, background, position)."""
    code: int = config.RPGM_CODE_SHOW_TEXT_SETUP


@dataclass(frozen=True)
class ShowTextLine:
    """Code 401: one line of the open message window."""
    text: str
    code: int = config.RPGM_CODE_SHOW_TEXT_LINE


@dataclass(frozen=True)
class ShowChoices:
    """Code 102: a choice prompt with its option labels."""
    choices: List[str] = field(default_factory=list)
    code: int = config.RPGM_CODE_SHOW_CHOICES


@dataclass(frozen=True)
class OtherCommand:
    """Any command that carries no extractable text."""
    code: Any = None


Command = Union[ShowTextSetup, ShowTextLine, ShowChoices, OtherCommand]


def classify_command(raw: Dict[str, Any]) -> Command:
    """Map one raw command object to its typed form."""
    code = raw.get('code')
    parameters = raw.get('parameters') or []

    if code == config.RPGM_CODE_SHOW_TEXT_SETUP:
        return ShowTextSetup()

    if code == config.RPGM_CODE_SHOW_TEXT_LINE:
        text = parameters[0] if parameters else ""
        if text is None:
            text = ""
        elif not isinstance(text, str):
            text = str(text)
        return ShowTextLine(text=text)

    if code == config.RPGM_CODE_SHOW_CHOICES:
        options = parameters[0] if parameters else []
        if not isinstance(options, list):
            logger.debug(f"Show Choices without an option list: {options!r}")
            options = []
        return ShowChoices(choices=[str(o) for o in options if o is not None])

    return OtherCommand(code=code)


def iter_commands(command_list: Any) -> Iterator[Command]:
    """Yield typed commands, skipping null or malformed slots."""
    if not isinstance(command_list, list):
        return
    for raw in command_list:
        if isinstance(raw, dict):
            yield classify_command(raw)
