"""
Answer normalization and answer-key resolution.

Clients have submitted answers in several shapes over time::

    {"12": "2"}
    {"12": 2}
    {"12": {"selectedOptionId": "2"}}
    {"12": {"option": 2}}

and question options have flagged the right answer as ``isCorrect`` or
``is_correct`` holding ``True``, ``"true"``, ``1`` or ``"1"``. Options may
also arrive JSON-encoded as a string. Everything here is pure so it can be
used by the attempt service, serializers and tests alike.

Option identifiers are 1-based positions: the client renders option ``n`` of
a question as id ``"n"``.
"""
from __future__ import annotations
import json
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

SELECTED_OPTION_KEY = "selectedOptionId"
CORRECT_FLAG_KEYS = ("isCorrect", "is_correct")

PLACEHOLDER_OPTIONS = (
    {"id": 1, "text": "Option A (Sample)", "isCorrect": True},
    {"id": 2, "text": "Option B (Sample)", "isCorrect": False},
    {"id": 3, "text": "Option C (Sample)", "isCorrect": False},
    {"id": 4, "text": "Option D (Sample)", "isCorrect": False},
)


# ----------------------------- Answers --------------------------------------
def _primitive_text(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def normalize_answer(value: Any) -> Optional[str]:
    """
    Reduce one submitted answer to the selected option id, or None when unanswered.
    """
    if value is None:
        return None

    if isinstance(value, dict):
        selected = normalize_answer(value.get(SELECTED_OPTION_KEY))
        if selected is not None:
            return selected
        for candidate in value.values():
            selected = normalize_answer(candidate)
            if selected is not None:
                return selected
        return None

    text = _primitive_text(value)
    return text or None


def normalize_answers(raw: Any) -> dict[str, str]:
    """
    Map question id -> selected option id (both strings), dropping unanswered entries.

    Idempotent: ``normalize_answers(normalize_answers(a)) == normalize_answers(a)``,
    and the stored shape produced by :func:`to_stored_answers` normalizes back
    to the same mapping.
    """
    if not isinstance(raw, dict):
        return {}

    normalized = {}
    for question_id, value in raw.items():
        selected = normalize_answer(value)
        if selected is not None:
            normalized[str(question_id)] = selected
    return normalized


def to_stored_answers(normalized: dict[str, str]) -> dict[str, dict[str, str]]:
    """Persisted form of the answers: ``{qid: {"selectedOptionId": "<id>"}}``."""
    return {qid: {SELECTED_OPTION_KEY: selected} for qid, selected in normalized.items()}


# ----------------------------- Options --------------------------------------
def is_truthy_flag(value: Any) -> bool:
    """True for ``True``, ``"true"``, ``1`` and ``"1"``; False for everything else."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value in ("true", "1")
    return False


def option_is_correct(option: Any) -> bool:
    if not isinstance(option, dict):
        return False
    return any(is_truthy_flag(option.get(key)) for key in CORRECT_FLAG_KEYS)


def parse_options(raw: Any, question_id: Any = None) -> list:
    """
    Return the option list, decoding JSON strings.

    Unparseable, empty or non-list data is replaced by ``PLACEHOLDER_OPTIONS``
    so scoring stays deterministic for corrupt rows.
    """
    options = raw
    if isinstance(raw, (str, bytes)):
        try:
            options = json.loads(raw)
        except ValueError:
            logger.warning("Unparseable options for question %s; using placeholder options", question_id)
            return [dict(option) for option in PLACEHOLDER_OPTIONS]

    if not isinstance(options, list) or not options:
        logger.warning("Empty or invalid options for question %s; using placeholder options", question_id)
        return [dict(option) for option in PLACEHOLDER_OPTIONS]
    return options


def resolve_correct_option_id(raw_options: Any, question_id: Any = None) -> str:
    """
    1-based id of the correct option.

    The first flagged option wins. When nothing is flagged the first option is
    treated as correct and a warning is logged.
    """
    options = parse_options(raw_options, question_id)
    for index, option in enumerate(options):
        if option_is_correct(option):
            return str(index + 1)

    logger.warning(
        "No option flagged correct for question %s; scoring against the first option", question_id)
    return "1"


def public_options(raw_options: Any, include_answers: bool = False, question_id: Any = None) -> list[dict]:
    """Options as rendered to clients: ``[{"id": 1, "text": ...}]`` with 1-based ids."""
    rendered = []
    for index, option in enumerate(parse_options(raw_options, question_id), start=1):
        if isinstance(option, dict):
            text = option.get("text", "")
        else:
            text = str(option)
        item = {"id": index, "text": text}
        if include_answers:
            item["isCorrect"] = option_is_correct(option)
        rendered.append(item)
    return rendered
