from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Mapping, Tuple

from autoeval.core.eval_schemas import FileRecord

# Exact filename -> tag
FILENAME_RULES: Dict[str, str] = {
    "package.json": "Node.js",
}

# Extension -> tag
EXTENSION_RULES: Tuple[Tuple[str, str], ...] = (
    (".js", "JavaScript"),
    (".ts", "TypeScript"),
    (".css", "CSS"),
    (".html", "HTML"),
    (".py", "Python"),
)

# Lowercase keyword -> tag, matched against loaded content only
CONTENT_RULES: Tuple[Tuple[str, str], ...] = (
    ("react", "React"),
    ("vue", "Vue.js"),
    ("angular", "Angular"),
    ("express", "Express.js"),
)


def _tags_for_name(name: str) -> set[str]:
    tags: set[str] = set()
    base = name.replace("\\", "/").rsplit("/", 1)[-1]
    if base in FILENAME_RULES:
        tags.add(FILENAME_RULES[base])
    for ext, tag in EXTENSION_RULES:
        if base.endswith(ext):
            tags.add(tag)
    return tags


def detect_tech_stack(
    files: Mapping[str, FileRecord],
    filenames: Iterable[str] = (),
) -> FrozenSet[str]:
    """
    Infer technology tags from filenames and loaded content.

    Filename rules look at existing loaded files plus the bundle's full
    filename list. Content rules are plain case-insensitive substring checks,
    so a comment mentioning "react" is enough to tag React.
    """
    tags: set[str] = set()

    for name, record in files.items():
        if record.exists:
            tags |= _tags_for_name(name)
    for name in filenames:
        tags |= _tags_for_name(name)

    for record in files.values():
        if not (record.exists and record.content):
            continue
        lowered = record.content.lower()
        for keyword, tag in CONTENT_RULES:
            if keyword in lowered:
                tags.add(tag)

    return frozenset(tags)
