# -*- coding: utf-8 -*-
"""
LocForge Test Fixtures

Shared fixtures for all tests.
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# REN'PY FIXTURES
# =============================================================================

@pytest.fixture
def renpy_script() -> str:
    """A small script mixing dialogue, narration, menu choices and code."""
    return '\n'.join([
        'define e = Character("Eileen")',
        '',
        'label start:',
        '    scene bg room',
        '    # Eileen greets the player',
        '    e "Hello, [player_name]!"',
        '    "The room is quiet."',
        '    menu:',
        '        "Stay here":',
        '            jump stay',
        "        'Leave' :",
        '            jump leave',
        '    show eileen happy',
        '    $ score = "high"',
        '    e "She said \\"hi\\" to me."',
        '    return',
    ])


# =============================================================================
# RPG MAKER FIXTURES
# =============================================================================

def _cmd(code, *parameters, indent=0):
    return {"code": code, "indent": indent, "parameters": list(parameters)}


@pytest.fixture
def rpgm_map_doc() -> dict:
    """Map with one talking NPC (two message windows and a choice) and one silent event."""
    return {
        "displayName": "Harbor Town",
        "events": [
            None,
            {
                "id": 1,
                "name": "Sailor",
                "pages": [
                    {"list": [
                        _cmd(101, "Actor1", 0, 0, 2),
                        _cmd(401, "\\n<Sailor>Ahoy!"),
                        _cmd(401, "Fine weather today."),
                        _cmd(101, "", 0, 0, 2),
                        _cmd(401, "Need a ride?"),
                        _cmd(102, ["Yes", "No"], 1, 0, 2, 0),
                        _cmd(402, 0, "Yes"),
                        _cmd(0),
                    ]},
                    {"list": [_cmd(0)]},
                ],
            },
            {
                "id": 2,
                "name": "",
                "pages": [
                    {"list": [
                        _cmd(230, 60),
                        _cmd(0),
                    ]},
                ],
            },
        ],
    }


@pytest.fixture
def rpgm_common_events_doc() -> list:
    return [
        None,
        {"id": 1, "name": "Intro", "list": [
            _cmd(101, "", 0, 0, 2),
            _cmd(401, "Welcome to \\C[2]Aldia\\C[0]."),
            _cmd(0),
        ]},
        {"id": 2, "name": "Empty", "list": [_cmd(0)]},
    ]


@pytest.fixture
def rpgm_troops_doc() -> list:
    return [
        None,
        {"id": 7, "name": "Slime*2", "pages": [
            {"list": [_cmd(101, "", 0, 0, 2), _cmd(401, "The slimes wobble."), _cmd(0)]},
            {"list": [_cmd(0)]},
        ]},
    ]


@pytest.fixture
def map_infos_json() -> str:
    return json.dumps([
        None,
        {"id": 1, "name": "Harbor", "parentId": 0, "order": 1},
        {"id": 2, "name": "Lighthouse", "parentId": 1, "order": 2},
    ])


# =============================================================================
# SERVICE FIXTURES
# =============================================================================

@pytest.fixture
def memory_store():
    from core.storage import MemoryStore
    return MemoryStore()


class FakeTranslator:
    """
    Records every call and answers from a callable (payload -> response).

    By default each segment is upper-cased and the delimiter kept.
    """

    def __init__(self, responder=None):
        self.calls = []
        self._responder = responder or self._echo_upper

    @staticmethod
    def _echo_upper(payload):
        return payload.upper()

    def __call__(self, payload, source_lang, target_lang, model, safety_config,
                 terminology, rules, format_hint, extra_context):
        self.calls.append({
            'payload': payload,
            'source_lang': source_lang,
            'target_lang': target_lang,
            'model': model,
            'safety_config': safety_config,
            'terminology': terminology,
            'rules': rules,
            'format_hint': format_hint,
            'extra_context': extra_context,
        })
        return self._responder(payload)


@pytest.fixture
def fake_translator():
    return FakeTranslator()


@pytest.fixture
def make_translator():
    """Factory for translators with a custom responder."""
    return FakeTranslator
