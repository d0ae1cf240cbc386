from typing import List, Optional

from unidiff import PatchSet
from unidiff.errors import UnidiffParseError

from errors import DiffParseError
from models import DELETED_FILE_SENTINEL, ChangeKind, Chunk, FileDiff, LineChange


def _strip_prefix(path: Optional[str]) -> Optional[str]:
    if not path or path == DELETED_FILE_SENTINEL:
        return path
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


def _to_line_change(line) -> LineChange:
    content = line.value.rstrip("\r\n")
    if line.is_added:
        return LineChange(kind=ChangeKind.ADDED, content=content, new_line_number=line.target_line_no)
    if line.is_removed:
        return LineChange(kind=ChangeKind.DELETED, content=content, old_line_number=line.source_line_no)
    if line.is_context:
        return LineChange(
            kind=ChangeKind.CONTEXT,
            content=content,
            old_line_number=line.source_line_no,
            new_line_number=line.target_line_no,
        )
    # "\ No newline at end of file" has no position in either file; keep it as text
    return LineChange(kind=ChangeKind.MARKER, content=f"{line.line_type}{content}")


def parse_unified_diff(diff_text: str) -> List[FileDiff]:
    """
    Parse `git diff` output into FileDiff records, keeping file, hunk and
    line order as well as the line numbers encoded in the hunk headers.
    Blank input is an empty diff; anything unidiff cannot read raises DiffParseError.
    """
    if not diff_text or not diff_text.strip():
        return []

    try:
        patch = PatchSet(diff_text.splitlines(keepends=True))
    except UnidiffParseError as e:
        raise DiffParseError(f"Malformed diff: {e}") from e

    if len(patch) == 0:
        raise DiffParseError("Malformed diff: no file sections found")

    files = []
    for patched_file in patch:
        chunks = []
        for hunk in patched_file:
            chunks.append(Chunk(
                source_start=hunk.source_start,
                source_length=hunk.source_length,
                target_start=hunk.target_start,
                target_length=hunk.target_length,
                changes=[_to_line_change(line) for line in hunk],
            ))
        files.append(FileDiff(
            from_path=_strip_prefix(patched_file.source_file),
            to_path=_strip_prefix(patched_file.target_file),
            chunks=chunks,
        ))
    return files


def render_diff_lines(chunk: Chunk) -> str:
    """Render a chunk as `<line number> <prefix><content>` lines for the prompt.

    Marker lines carry no number and are emitted verbatim.
    """
    return "\n".join(
        change.content if change.kind == ChangeKind.MARKER
        else f"{change.relevant_line_number} {change.prefix}{change.content}"
        for change in chunk.changes
    )
