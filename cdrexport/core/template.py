"""Template substitution — resolves ``${...}`` placeholders against a record.

Supported forms::

    ${NAME}                  variable from the record namespace
    ${NAME:offset}           substring from offset (negative counts from end)
    ${NAME:offset:length}    substring; negative length trims from the end
    ${CDR(field)}            CDR attribute or variable by name
    ${${inner}suffix}        nested placeholders are resolved first

Unknown variables and unknown functions resolve to an empty string.  The
result is passed through a fixed-size SubstitutionBuffer, which silently
truncates anything longer than its capacity.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping

from cdrexport.models.records import CallRecord

DEFAULT_BUFFER_SIZE = 1024

_OPEN = "${"


class SubstitutionBuffer:
    """Bounded output buffer for one substitution.

    A buffer of ``size`` reserves one slot for a terminator, so the longest
    value it can hold is ``size - 1`` characters.  Longer values are cut
    to that length without any error or log record.

    Examples
    --------
    >>> SubstitutionBuffer(4).fit("abcdef")
    'abc'
    """

    def __init__(self, size: int = DEFAULT_BUFFER_SIZE) -> None:
        if size < 2:
            raise ValueError(f"Substitution buffer size must be >= 2, got {size}")
        self._size = size

    @property
    def size(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return self._size - 1

    def fit(self, text: str) -> str:
        return text[: self.capacity]


def _cdr_function(args: str, namespace: Mapping[str, str]) -> str:
    # CDR(field[,options]); options are accepted and ignored
    field = args.split(",", 1)[0].strip()
    return namespace.get(field, "")


_FUNCTIONS: dict[str, Callable[[str, Mapping[str, str]], str]] = {
    "CDR": _cdr_function,
}


def _to_int(text: str, default: int) -> int:
    text = text.strip()
    if not text:
        return default
    try:
        return int(text)
    except ValueError:
        return 0


def _split_expression(expr: str) -> tuple[str, int, int | None]:
    """Split ``name:offset:length`` honouring parentheses in the name."""
    depth = 0
    for i, ch in enumerate(expr):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        elif ch == ":" and depth == 0:
            name, rest = expr[:i], expr[i + 1 :]
            offset_text, _, length_text = rest.partition(":")
            length = _to_int(length_text, 0) if length_text.strip() else None
            return name, _to_int(offset_text, 0), length
    return expr, 0, None


def _substring(value: str, offset: int, length: int | None) -> str:
    total = len(value)
    if offset < 0:
        offset = max(total + offset, 0)
    if offset >= total:
        return ""
    tail = value[offset:]
    if length is None:
        return tail
    if length >= 0:
        return tail[:length]
    # negative length drops characters from the end
    keep = len(tail) + length
    return tail[:keep] if keep > 0 else ""


class _Frame:
    """One open ``${`` during substitution."""

    __slots__ = ("start", "body", "braces")

    def __init__(self, start: int) -> None:
        self.start = start
        self.body: list[str] = []
        # bare ``{`` seen inside this body and not yet closed
        self.braces = 0


class TemplateEvaluator:
    """Evaluates column templates against call records.

    Parameters
    ----------
    buffer_size:
        Size of the output buffer, terminator slot included.
    """

    def __init__(self, buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        self._buffer = SubstitutionBuffer(buffer_size)

    @property
    def buffer(self) -> SubstitutionBuffer:
        return self._buffer

    def evaluate(self, template: str, record: CallRecord) -> str:
        """Substitute every placeholder in *template*; never raises."""
        return self.render(template, record.namespace())

    def render(self, template: str, namespace: Mapping[str, str]) -> str:
        """Substitute against a precomputed namespace, bounded by the buffer."""
        return self._buffer.fit(self.substitute(template, namespace))

    def substitute(self, text: str, namespace: Mapping[str, str]) -> str:
        """Unbounded substitution against a plain mapping.

        Placeholders are matched in a single left-to-right pass.  Each open
        ``${`` gets its own frame on an explicit stack, so inner placeholders
        resolve before the body that contains them and nesting depth is
        bounded only by the length of *text*.
        """
        out: list[str] = []
        frames: list[_Frame] = []
        pos = 0
        end = len(text)
        while pos < end:
            if not frames:
                begin = text.find(_OPEN, pos)
                if begin < 0:
                    out.append(text[pos:])
                    break
                out.append(text[pos:begin])
                frames.append(_Frame(begin))
                pos = begin + len(_OPEN)
                continue
            frame = frames[-1]
            if text.startswith(_OPEN, pos):
                frames.append(_Frame(pos))
                pos += len(_OPEN)
                continue
            ch = text[pos]
            pos += 1
            if ch == "}" and frame.braces == 0:
                frames.pop()
                value = self._resolve("".join(frame.body), namespace)
                (frames[-1].body if frames else out).append(value)
                continue
            if ch == "{":
                frame.braces += 1
            elif ch == "}":
                frame.braces -= 1
            frame.body.append(ch)
        if frames:
            # unterminated placeholder is kept verbatim
            out.append(text[frames[0].start :])
        return "".join(out)

    def _resolve(self, expr: str, namespace: Mapping[str, str]) -> str:
        name, offset, length = _split_expression(expr)
        name = name.strip()
        if name.endswith(")") and "(" in name:
            func_name, _, args = name[:-1].partition("(")
            func = _FUNCTIONS.get(func_name.strip().upper())
            value = func(args, namespace) if func else ""
        else:
            value = namespace.get(name, "")
        return _substring(value, offset, length)
