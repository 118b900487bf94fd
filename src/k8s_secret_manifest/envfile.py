"""Reading and writing .env files.

Parsing rules:
- blank lines and lines starting with '#' are skipped
- an ``export `` prefix is stripped
- a value wholly wrapped in matching single or double quotes is unquoted
- a line without '=' is an error naming the line number
"""

from collections.abc import Mapping
from pathlib import Path

from k8s_secret_manifest.exceptions import FileAccessError, FormatError

_EXPORT_PREFIX = "export "
_QUOTE_TRIGGERS = frozenset(" \t\n\r\"'#$\\=;,")


def unquote(value: str) -> str:
    """Strip one matching pair of surrounding single or double quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def parse_env_text(text: str) -> dict[str, str]:
    """Parse .env content into an ordered key/value mapping.

    Raises:
        FormatError: If a line has no '=' or an empty key.

    """
    result: dict[str, str] = {}
    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        line = line.removeprefix(_EXPORT_PREFIX)

        key, sep, value = line.partition("=")
        if not sep:
            raise FormatError(f"line {line_number}: expected KEY=value, got {line!r}")
        key = key.strip()
        if not key:
            raise FormatError(f"line {line_number}: empty key")

        result[key] = unquote(value)
    return result


def parse_env_file(path: str | Path, errors: str = "strict") -> dict[str, str]:
    """Read and parse a .env file.

    Args:
        path: The file to read.
        errors: How undecodable bytes are handled, as for bytes.decode().

    Raises:
        FileAccessError: If the file cannot be read.
        FormatError: If the file is not valid UTF-8 or a line is malformed.

    """
    try:
        text = Path(path).read_text(encoding="utf-8", errors=errors)
    except OSError as err:
        raise FileAccessError(f"read env file '{path}': {err.strerror}") from err
    except UnicodeDecodeError as err:
        raise FormatError(f"read env file '{path}': not valid UTF-8 at byte {err.start}") from err
    return parse_env_text(text)


def quote_env_value(value: str) -> str:
    """Double-quote a value when it holds characters .env parsers trip over."""
    if not any(char in _QUOTE_TRIGGERS for char in value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_env(values: Mapping[str, str]) -> str:
    """Render a mapping as sorted KEY=value lines."""
    return "".join(f"{key}={quote_env_value(values[key])}\n" for key in sorted(values))
