from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field

# Apache combined log format with the request duration (microseconds) appended.
LOG_FORMAT = '%h %l %u %t "%r" %>s %b "%{Referer}i" "%{User-Agent}i" %D'

REQUEST = "%r"
STATUS = "%>s"
USER_AGENT = "%{User-Agent}i"
DURATION = "%D"
REQUIRED_DIRECTIVES = (REQUEST, STATUS, USER_AGENT, DURATION)

_DIRECTIVE_RE = re.compile(r"%[<>]?(?:\{[^}]*\})?[a-zA-Z]")
_QUOTED = r'((?:[^"\\]|\\.)*)'
_BRACKETED = r"(\[[^\]]+\])"
_TOKEN = r"(\S+)"
_ESCAPE_RE = re.compile(r'\\([\\"])')


@dataclass
class ParseError(Exception):
    line_num: int
    message: str
    line: str = ""

    def __str__(self) -> str:
        return f"line {self.line_num}: {self.message}"


class ParsedRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_agent: str
    request: str            # "GET /orders.html HTTP/1.1"
    path: str               # second token of request
    status: str             # kept as the raw token, e.g. "200"
    duration_micros: int = Field(ge=0)


def compile_log_format(log_format: str) -> Tuple[re.Pattern[str], List[str], Set[str]]:
    """
    Translate an Apache LogFormat string into a regex.

    Returns the compiled pattern (one group per directive, matched with
    fullmatch), the directive names in group order and the subset of names
    that sit between double quotes in the format.
    """
    names: List[str] = []
    quoted: Set[str] = set()
    parts: List[str] = []
    pos = 0
    for m in _DIRECTIVE_RE.finditer(log_format):
        start, end = m.span()
        parts.append(re.escape(log_format[pos:start]))
        name = m.group()
        if log_format[start - 1:start] == '"' and log_format[end:end + 1] == '"':
            parts.append(_QUOTED)
            quoted.add(name)
        elif name == "%t":
            parts.append(_BRACKETED)
        else:
            parts.append(_TOKEN)
        names.append(name)
        pos = end
    parts.append(re.escape(log_format[pos:]))
    return re.compile("".join(parts)), names, quoted


class LineParser:
    def __init__(self, log_format: str = LOG_FORMAT) -> None:
        self.log_format = log_format
        self.pattern, self.names, self.quoted = compile_log_format(log_format)
        missing = [d for d in REQUIRED_DIRECTIVES if d not in self.names]
        if missing:
            raise ValueError(f"log format lacks directive(s): {', '.join(missing)}")

    def fields(self, line: str, line_num: int = 0) -> Dict[str, str]:
        text = line.rstrip("\r\n")
        m = self.pattern.fullmatch(text)
        if m is None:
            raise ParseError(line_num, "line does not match log format", text)
        out: Dict[str, str] = {}
        for name, value in zip(self.names, m.groups()):
            if name in self.quoted:
                value = _ESCAPE_RE.sub(r"\1", value)
            out[name] = value
        return out

    def parse(self, line: str, line_num: int = 0) -> ParsedRecord:
        values = self.fields(line, line_num)
        request = values[REQUEST]
        tokens = request.split()
        if len(tokens) < 2:
            raise ParseError(line_num, f"request has no path: {request!r}", line.rstrip("\r\n"))

        # plain ASCII digits only; "+5", "5.0" and "1_000" are not durations
        duration = values[DURATION]
        if not (duration.isascii() and duration.isdigit()):
            raise ParseError(
                line_num,
                f"invalid duration {duration!r}: expected an unsigned integer",
                line.rstrip("\r\n"),
            )

        return ParsedRecord(
            user_agent=values[USER_AGENT],
            request=request,
            path=tokens[1],
            status=values[STATUS],
            duration_micros=int(duration),
        )
