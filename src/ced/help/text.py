"""Help text for the shell's ``help`` command."""

from __future__ import annotations

from ced.engine.parser import COMMANDS, resolve_name

DETAILS = {
    "create": "Append columns named by a comma separated list.\n  ex) create id,name,email",
    "add-column": (
        "Insert a column at INDEX (default: end). TYPE is text or number; PLACEHOLDER\n"
        "fills the new cells of existing rows.\n  ex) add-column age 1 number 0"
    ),
    "add-row": (
        "Insert a row at INDEX (default: end). Without VALUES each field is prompted;\n"
        "an empty answer takes the column default and a lone comma cancels.\n"
        "  ex) add-row 0 1,alice\n  ex) add-row 0 'Doe, John',2"
    ),
    "edit": "Set one cell. Without VALUE the cell becomes empty.\n  ex) edit 0,name bob",
    "edit-row": (
        "Replace a row. Without VALUES each field is prompted; an empty answer keeps\n"
        "the current value.\n  ex) edit-row 0 2,carol"
    ),
    "limit": (
        "Set a column limiter. Either one comma separated token\n"
        "  limit COLUMN,TYPE,DEFAULT,VARIANTS,PATTERN,FORCE   (empty FORCE means true)\n"
        "or keyword form\n"
        "  limit COLUMN [TYPE] [default=V] [variants='a b'] [pattern=RE] [placeholder=V] [force=BOOL]\n"
        "A forced limiter replaces failing cells with the default.\n"
        "  ex) limit age number default=0 force=true"
    ),
    "limit-preset": (
        "Set a limiter from a preset (text, number, float, email, date, time, url or\n"
        "one from ~/.ced_preset.csv).\n  ex) limit-preset joined date true"
    ),
    "schema": "Apply every row of a schema file (column,type,default,variant,pattern[,force]).",
    "import": "Load FILE. HAS_HEADER defaults to true; cr writes \\r line endings.",
    "import-raw": "Load FILE as an array: no limiters, ragged rows and any column names.",
    "write": "Overwrite the source file. CACHE (default true) keeps a timestamped backup.",
    "print": "Print the table, or pipe it as CSV to VIEWER (default: CED_VIEWER).",
    "print-cell": "Print a cell. MODE is simple, v(erbose) or d(ebug).",
    "print-column": "List column names, or describe COLUMN. MODE is simple, v(erbose) or d(ebug).",
    "execute": "Run each line of FILE; stops at the first failing command.",
    "undo": "Revert the last recorded change.",
    "redo": "Re-apply the last undone change. Any new change clears the redo list.",
}


def general_help() -> str:
    width = max(len(name) for name in COMMANDS)
    lines = ["Commands (alias):"]
    for spec in COMMANDS.values():
        aliases = ", ".join(spec.aliases)
        lines.append(f"  {spec.name:<{width}}  ({aliases}) {spec.summary}")
    lines.append("")
    lines.append("Separate several commands on one line with ';'. Type 'help COMMAND' for details.")
    return "\n".join(lines)


def command_help(token: str) -> str:
    """Usage and details for one command; raises UnknownCommand."""
    spec = COMMANDS[resolve_name(token)]
    lines = [f"{spec.name} ({', '.join(spec.aliases)}): {spec.summary}", f"usage: {spec.usage}"]
    if spec.name in DETAILS:
        lines.append(DETAILS[spec.name])
    return "\n".join(lines)
