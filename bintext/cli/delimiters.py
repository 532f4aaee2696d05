"""Named delimiters offered on the command line."""

from enum import Enum

from bintext.cli.output import print_table


class DelimiterName(str, Enum):
    """Delimiter choices accepted by --delimiter-name."""

    space = "space"
    newline = "newline"
    tab = "tab"
    comma = "comma"
    colon = "colon"
    pipe = "pipe"
    none = "none"


DELIMITERS: dict[DelimiterName, str] = {
    DelimiterName.space: " ",
    DelimiterName.newline: "\n",
    DelimiterName.tab: "\t",
    DelimiterName.comma: ",",
    DelimiterName.colon: ":",
    DelimiterName.pipe: "|",
    DelimiterName.none: "",
}

LABELS: dict[str, str] = {
    " ": "Empty Space",
    "\n": "Line Ending",
    "\t": "Tab",
    ",": "Comma",
    ":": "Colon",
    "|": "|",
    "": "No delimiter",
}


def resolve_delimiter(name: DelimiterName) -> str:
    """Map a delimiter name to the literal string written to the output."""
    return DELIMITERS[name]


def describe_delimiter(delimiter: str) -> str:
    """Human-readable label for a delimiter string."""
    return LABELS.get(delimiter, repr(delimiter))


def list_delimiters() -> None:
    """List the named delimiters accepted by --delimiter-name."""
    print_table(
        [
            {
                "Name": name.value,
                "Character": repr(value),
                "Label": describe_delimiter(value),
            }
            for name, value in DELIMITERS.items()
        ],
        title="Named delimiters",
        columns=["Name", "Character", "Label"],
    )
