"""Command vocabulary: flag schemas, help text and the robot-docs payload."""

from __future__ import annotations

from typing import Any

from rain_cli.cli import exit_codes
from rain_cli.core.arguments import CommandSpec, FlagKind, FlagSpec
from rain_cli.version import __version__

PROG: str = "rain"


def _s(help_text: str, metavar: str = "VALUE") -> FlagSpec:
    return FlagSpec(FlagKind.STRING, help_text, metavar)


def _b(help_text: str) -> FlagSpec:
    return FlagSpec(FlagKind.BOOL, help_text)


_COLLECTION = _s("Collection id (0 = all, -1 = Unsorted, -99 = Trash).", "ID")
_LIMIT = _s("Results per page, 1-50 (default 25).", "N")
_PAGE = _s("Zero-based page number.", "N")
_FIELDS = _s("Comma-separated fields to keep, e.g. id,title,link.", "LIST")
_SORT = _s("Sort order: score, -created, created, -lastUpdate, title, domain, ...", "ORDER")

COMMANDS: dict[str, CommandSpec] = {
    spec.name: spec
    for spec in (
        CommandSpec(
            "search",
            "Search bookmarks by text and operators (#tag, type:article, ...).",
            "rain search <query...> [--collection ID] [--sort ORDER] [--limit N] [--page N] [--fields LIST]",
            {"collection": _COLLECTION, "sort": _SORT, "limit": _LIMIT, "page": _PAGE, "fields": _FIELDS},
        ),
        CommandSpec(
            "get",
            "Fetch one bookmark by id.",
            "rain get <id> [--fields LIST]",
            {"fields": _FIELDS},
        ),
        CommandSpec(
            "add",
            "Add a bookmark, or many from stdin (URLs or JSON lines).",
            "rain add [url] [--title T] [--tags a,b] [--collection ID] [--parse] [--from-suggest]",
            {
                "title": _s("Bookmark title.", "TEXT"),
                "excerpt": _s("Short description.", "TEXT"),
                "note": _s("Private note.", "TEXT"),
                "tags": _s("Comma-separated tags.", "LIST"),
                "collection": _COLLECTION,
                "important": _b("Mark as favorite."),
                "parse": _b("Ask the server to fetch title/excerpt/cover."),
                "from-suggest": _b("Fill tags/collection from server suggestions (best effort)."),
            },
        ),
        CommandSpec(
            "update",
            "Update one bookmark, or many ids piped on stdin.",
            "rain update [id] [--title T] [--tags +add,-remove|=replace] [--collection ID] [--important]",
            {
                "title": _s("New title.", "TEXT"),
                "excerpt": _s("New description.", "TEXT"),
                "note": _s("New note.", "TEXT"),
                "tags": _s("Tag expression: a,b | +add,-remove | =replace.", "EXPR"),
                "collection": _s("Move to collection id.", "ID"),
                "important": _b("Mark as favorite."),
                "unimportant": _b("Unmark favorite."),
            },
        ),
        CommandSpec(
            "rm",
            "Move bookmarks to trash (or delete permanently).",
            "rain rm [id] [--permanent]",
            {"permanent": _b("Delete permanently (moves to trash first).")},
        ),
        CommandSpec(
            "ls",
            "List bookmarks with filters.",
            "rain ls [--collection ID] [--tag a,b] [--type T] [--notag] [--all] [--ids-only]",
            {
                "collection": _COLLECTION,
                "tag": _s("Only bookmarks with these tags (comma-separated).", "LIST"),
                "type": _s("link, article, image, video, document or audio.", "TYPE"),
                "notag": _b("Only untagged bookmarks."),
                "important": _b("Only favorites."),
                "broken": _b("Only broken links."),
                "duplicates": _b("Only duplicates."),
                "search": _s("Extra search text or operators.", "QUERY"),
                "sort": _SORT,
                "limit": _LIMIT,
                "page": _PAGE,
                "all": _b("Fetch every page."),
                "ids-only": _b("Return ids only."),
                "fields": _FIELDS,
            },
        ),
        CommandSpec(
            "collections",
            "List collections.",
            "rain collections [--tree]",
            {"tree": _b("Nest collections under their parents.")},
        ),
        CommandSpec(
            "collection create",
            "Create a collection.",
            "rain collection create <title> [--parent ID] [--public] [--view VIEW]",
            {
                "parent": _s("Parent collection id.", "ID"),
                "public": _b("Make the collection public."),
                "view": _s("list, simple, grid or masonry.", "VIEW"),
            },
        ),
        CommandSpec(
            "collection update",
            "Update a collection.",
            "rain collection update <id> [--title T] [--parent ID] [--public|--private] [--view VIEW]",
            {
                "title": _s("New title.", "TEXT"),
                "parent": _s("New parent collection id.", "ID"),
                "public": _b("Make public."),
                "private": _b("Make private."),
                "view": _s("list, simple, grid or masonry.", "VIEW"),
            },
        ),
        CommandSpec(
            "collection rm",
            "Delete a collection (its bookmarks go to trash).",
            "rain collection rm <id>",
        ),
        CommandSpec(
            "tags",
            "List tags with counts.",
            "rain tags [--collection ID] [--sort count|name]",
            {"collection": _COLLECTION, "sort": _s("count (default) or name.", "ORDER")},
        ),
        CommandSpec(
            "status",
            "Account totals: bookmarks, unsorted, trash, broken, duplicates.",
            "rain status",
        ),
        CommandSpec(
            "robot-docs",
            "Machine-readable description of this CLI.",
            "rain robot-docs",
            needs_auth=False,
        ),
        CommandSpec(
            "exists",
            "Check whether URLs are saved (exit 1 when a single URL is not).",
            "rain exists [url]",
        ),
        CommandSpec(
            "suggest",
            "Suggested collections and tags for a URL.",
            "rain suggest <url>",
        ),
        CommandSpec(
            "highlights",
            "List highlights.",
            "rain highlights [--collection ID] [--color C] [--limit N] [--page N]",
            {
                "collection": _COLLECTION,
                "color": _s("Only highlights of this color.", "COLOR"),
                "limit": _LIMIT,
                "page": _PAGE,
            },
        ),
        CommandSpec(
            "export",
            "Export every bookmark as JSON records or CSV.",
            "rain export [--collection ID] [--format json|csv] [--fields LIST] [--search QUERY]",
            {
                "collection": _COLLECTION,
                "format": _s("json (default) or csv.", "FORMAT"),
                "fields": _FIELDS,
                "search": _s("Only bookmarks matching this query.", "QUERY"),
            },
        ),
        CommandSpec(
            "watch",
            "Bookmarks changed since a timestamp.",
            "rain watch --since ISO-8601 [--collection ID] [--search QUERY]",
            {
                "since": _s("Cutoff instant, e.g. 2024-06-15T00:00:00Z.", "TIME"),
                "collection": _COLLECTION,
                "search": _s("Only bookmarks matching this query.", "QUERY"),
            },
        ),
    )
}

COLLECTION_SUBCOMMANDS: tuple[str, ...] = ("create", "update", "rm")

AUTH_HINT: str = (
    "Set RAINDROP_TOKEN, or put the token on the first line of ~/.config/rain/token. "
    "The environment variable wins when both exist."
)


def help_text() -> str:
    width = max(len(name) for name in COMMANDS)
    lines = [
        f"{PROG} {__version__}",
        "",
        "Usage:",
        f"  {PROG} <command> [options]",
        "",
        "Commands:",
    ]
    lines.extend(f"  {name.ljust(width)}  {spec.summary}" for name, spec in COMMANDS.items())
    lines.extend(
        [
            f"  {'help'.ljust(width)}  Show this help, or `rain help <command>`",
            f"  {'version'.ljust(width)}  Show CLI version",
            "",
            "Global options:",
            "  --json                Force the JSON envelope on stdout",
            "  -h, --help            Show help",
            "  -v, --version         Show version",
            "",
            f"Auth: {AUTH_HINT}",
        ]
    )
    return "\n".join(lines)


def command_help(spec: CommandSpec) -> str:
    lines = [f"Usage: {spec.usage}", "", spec.summary]
    if spec.flags:
        lines.extend(["", "Options:"])
        for name, flag in spec.flags.items():
            label = f"--{name}" if flag.kind is FlagKind.BOOL else f"--{name} {flag.metavar}"
            lines.append(f"  {label.ljust(22)}  {flag.help}")
    lines.extend(["", "  --json                  Force the JSON envelope on stdout"])
    return "\n".join(lines)


def robot_docs() -> dict[str, Any]:
    """Self-description consumed by scripts and agents."""
    return {
        "name": PROG,
        "version": __version__,
        "commands": {
            name: {
                "summary": spec.summary,
                "usage": spec.usage,
                "auth": spec.needs_auth,
                "flags": {
                    flag_name: {"type": flag.kind.value, "help": flag.help}
                    for flag_name, flag in spec.flags.items()
                },
            }
            for name, spec in COMMANDS.items()
        },
        "common_flags": ["--json", "--help"],
        "exit_codes": {
            str(exit_codes.SUCCESS): "success (exists: found)",
            str(exit_codes.NOT_FOUND): "NOT_FOUND (exists: not found, still ok=true)",
            str(exit_codes.INVALID_ARGS): "INVALID_ARGS",
            str(exit_codes.AUTH): "AUTH_MISSING or AUTH_INVALID",
            str(exit_codes.RATE_LIMITED): "RATE_LIMITED",
            str(exit_codes.API_FAILURE): "API_ERROR or NETWORK_ERROR",
        },
        "auth": AUTH_HINT,
        "envelope": {
            "success": {"ok": True, "data": "<result>", "meta": "<optional object>"},
            "error": {"ok": False, "error": {"code": "<string>", "message": "<string>", "suggest": ["<string>"]}},
        },
        "batch_input": {
            "add": "one URL or one JSON object (with link) per line",
            "update": "one bookmark id per line",
            "rm": "one bookmark id per line",
            "exists": "one URL per line",
        },
    }
