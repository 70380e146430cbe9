"""
@brief A key file reader and writer, for desktop entries and the flatpak info file.
@info Desktop entries that we rewrite are handed back to the desktop, so we keep
everything we don't touch as it was: comments, blank lines, translated keys such as
Name[de], and the order of the groups and keys.
"""


from os import replace
from pathlib import Path

from shared import FlextopError, os_error


DESKTOP_GROUP = "Desktop Entry"

KEY_EXEC = "Exec"
KEY_TRY_EXEC = "TryExec"
KEY_ICON = "Icon"
KEY_ACTIONS = "Actions"

# Every entry we write is tagged with the app that owns it.
KEY_PART_OF = "X-Flatpak-Part-Of"


ESCAPES = {"s": " ", "n": "\n", "t": "\t", "r": "\r", "\\": "\\"}


def unescape(value):
    result = []
    i = 0
    while i < len(value):
        c = value[i]
        if c == "\\" and i + 1 < len(value) and value[i + 1] in ESCAPES:
            result.append(ESCAPES[value[i + 1]])
            i += 2
            continue
        result.append(c)
        i += 1
    return "".join(result)


def escape(value):
    value = value.replace("\\", "\\\\").replace("\n", "\\n").replace("\t", "\\t").replace("\r", "\\r")
    if value.startswith(" "):
        value = "\\s" + value[1:]
    return value


def split_list(value):
    items = []
    current = ""
    i = 0
    while i < len(value):
        c = value[i]
        if c == "\\" and i + 1 < len(value):
            # \; is a literal semicolon, other escapes are left for unescape.
            current += ";" if value[i + 1] == ";" else value[i:i + 2]
            i += 2
            continue
        if c == ";":
            items.append(current)
            current = ""
        else:
            current += c
        i += 1
    if current:
        items.append(current)
    return [unescape(item) for item in items]


class DesktopFile:
    """
    @brief The parsed contents of a key file.
    @info Each group holds a list of lines. A line is a [key, value] pair, or a
    plain string for comments and blank lines, which are written back verbatim.
    Values are stored escaped, the way they appear in the file.
    """

    def __init__(self):
        self.header = []
        self.groups = {}

    @classmethod
    def load(cls, path):
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise os_error(f"Reading {path}", e) from e
        except UnicodeDecodeError as e:
            raise FlextopError(f"{path} is not valid UTF-8", "parse") from e
        try:
            return cls.parse(text)
        except FlextopError as e:
            raise e.prefix(str(path))

    @classmethod
    def parse(cls, text):
        result = cls()
        lines = result.header
        for number, line in enumerate(text.splitlines(), start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                lines.append(line)
            elif stripped.startswith("["):
                if not stripped.endswith("]"):
                    raise FlextopError(f"Line {number}: invalid group header {stripped}", "parse")
                # Repeated groups are merged into the first.
                lines = result.groups.setdefault(stripped[1:-1], [])
            elif lines is result.header:
                raise FlextopError(f"Line {number}: key file does not start with a group", "parse")
            elif "=" not in line:
                raise FlextopError(f"Line {number}: {stripped} is not a group, key or comment", "parse")
            else:
                key, value = line.split("=", 1)
                key = key.strip()
                if not key:
                    raise FlextopError(f"Line {number}: empty key", "parse")
                lines.append([key, value.lstrip()])
        return result

    def has_group(self, group):
        return group in self.groups

    def _find(self, group, key):
        for line in self.groups.get(group, []):
            if isinstance(line, list) and line[0] == key:
                return line
        return None

    def get(self, group, key):
        line = self._find(group, key)
        if line is None:
            return None
        return unescape(line[1])

    def get_list(self, group, key):
        line = self._find(group, key)
        if line is None:
            return []
        return split_list(line[1])

    def set(self, group, key, value):
        line = self._find(group, key)
        if line is not None:
            line[1] = escape(value)
            return

        lines = self.groups.setdefault(group, [])
        # Keep trailing blank lines between this group and the next one.
        end = len(lines)
        while end > 0 and isinstance(lines[end - 1], str) and not lines[end - 1].strip():
            end -= 1
        lines.insert(end, [key, escape(value)])

    def to_string(self):
        out = list(self.header)
        for group, lines in self.groups.items():
            out.append(f"[{group}]")
            for line in lines:
                if isinstance(line, list):
                    out.append(f"{line[0]}={line[1]}")
                else:
                    out.append(line)
        return "\n".join(out) + "\n"

    def save(self, path):
        """
        @brief Write the file in a single step, so readers only ever see
        the old or the new contents.
        """

        path = Path(path)
        temp = path.with_name(path.name + ".tmp")
        try:
            temp.write_text(self.to_string(), encoding="utf-8")
            replace(temp, path)
        except OSError as e:
            raise os_error(f"Writing {path}", e) from e
