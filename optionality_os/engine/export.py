"""
Vault export/import: a flat ``key=value`` text record.

    # optionality-vault v1
    rule_set=decision_os
    answers.upside=Significant upside
    answers.multipliers.0=New skills
    result.scores.composites.gem_score=12.5

Nested mappings flatten with ``.``; sequences use their index as the path
segment. Booleans are ``true``/``false`` and ``None`` is an empty value.
Everything loads back as strings; the answer schema re-types answers on
import, so a dumped Answers record scores identically after a round trip.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..exceptions import VaultFormatException

HEADER = "# optionality-vault v1"

_ESCAPES = (("\\", "\\\\"), ("\n", "\\n"), ("\r", "\\r"))


def _escape(text: str) -> str:
    for raw, escaped in _ESCAPES:
        text = text.replace(raw, escaped)
    return text


def _unescape(text: str) -> str:
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            out.append({"n": "\n", "r": "\r", "\\": "\\"}.get(nxt, "\\" + nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return _escape(str(value))


def _flatten(value: Any, prefix: str, lines: List[Tuple[str, str]]):
    if isinstance(value, Mapping):
        for key, item in value.items():
            _flatten(item, f"{prefix}.{key}" if prefix else str(key), lines)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten(item, f"{prefix}.{index}", lines)
    else:
        lines.append((prefix, _format_value(value)))


def dump_record(record: Mapping[str, Any]) -> str:
    lines: List[Tuple[str, str]] = []
    _flatten(record, "", lines)
    return "\n".join([HEADER] + [f"{key}={value}" for key, value in lines]) + "\n"


def _listify(node: Any) -> Any:
    if not isinstance(node, dict):
        return node
    converted = {k: _listify(v) for k, v in node.items()}
    if converted and all(k.isdigit() for k in converted):
        return [converted[k] for k in sorted(converted, key=int)]
    return converted


def load_record(text: str) -> Dict[str, Any]:
    root: Dict[str, Any] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if "=" not in line:
            raise VaultFormatException(f"Line {lineno}: expected key=value", error_code="VAULT_SYNTAX")
        key, value = line.split("=", 1)
        key = key.strip()
        if not key or any(not part for part in key.split(".")):
            raise VaultFormatException(f"Line {lineno}: empty key segment", error_code="VAULT_SYNTAX")

        node = root
        parts = key.split(".")
        for part in parts[:-1]:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise VaultFormatException(f"Line {lineno}: '{key}' conflicts with an earlier value",
                                           error_code="VAULT_CONFLICT")
            node = child
        if isinstance(node.get(parts[-1]), dict):
            raise VaultFormatException(f"Line {lineno}: '{key}' conflicts with an earlier section",
                                       error_code="VAULT_CONFLICT")
        node[parts[-1]] = _unescape(value)
    return _listify(root)


def dump_answers(answers) -> str:
    return dump_record({"rule_set": answers.rule_set, "answers": answers.as_dict()})


def dump_result(result) -> str:
    """Accepts a ``Result`` or the dict produced by ``Result.to_dict()``."""
    payload = result.to_dict() if hasattr(result, "to_dict") else dict(result)
    answers = payload.pop("answers", {})
    return dump_record({"rule_set": payload.get("rule_set"), "answers": answers, "result": payload})


def load_answers(text: str, expected_rule_set: Optional[str] = None) -> Dict[str, Any]:
    """Parse a vault and return its raw ``answers`` section."""
    record = load_record(text)
    rule_set = record.get("rule_set")
    if expected_rule_set and rule_set and rule_set != expected_rule_set:
        raise VaultFormatException(
            f"Vault was exported from rule set '{rule_set}', not '{expected_rule_set}'",
            error_code="VAULT_RULE_SET",
        )
    answers = record.get("answers", {})
    if not isinstance(answers, dict):
        raise VaultFormatException("Vault has no answers section", error_code="VAULT_NO_ANSWERS")
    return answers


def dump_portfolio(options) -> str:
    """Portfolio rows (mappings) under ``portfolio.<index>.<field>``."""
    return dump_record({"portfolio": [dict(option) for option in options]})


def load_portfolio(text: str) -> List[Dict[str, Any]]:
    """Parse a portfolio vault; a vault without a portfolio section is an empty portfolio."""
    section = load_record(text).get("portfolio", [])
    if not isinstance(section, list) or not all(isinstance(entry, dict) for entry in section):
        raise VaultFormatException("Vault has no portfolio section", error_code="VAULT_NO_PORTFOLIO")
    return section
