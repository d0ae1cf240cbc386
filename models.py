from enum import Enum
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

DELETED_FILE_SENTINEL = "/dev/null"


class ChangeKind(str, Enum):
    ADDED = "added"
    DELETED = "deleted"
    CONTEXT = "context"
    # "\ No newline at end of file"; kept as text, it has no line number
    MARKER = "marker"


class Side(str, Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"


class LineChange(BaseModel):
    kind: ChangeKind
    content: str
    old_line_number: Optional[int] = None
    new_line_number: Optional[int] = None

    @property
    def relevant_line_number(self) -> Optional[int]:
        # deleted lines only exist in the base file
        if self.kind == ChangeKind.DELETED:
            return self.old_line_number
        return self.new_line_number

    @property
    def prefix(self) -> str:
        return {ChangeKind.ADDED: "+", ChangeKind.DELETED: "-"}.get(self.kind, " ")


class Chunk(BaseModel):
    source_start: int
    source_length: int
    target_start: int
    target_length: int
    changes: List[LineChange] = Field(default_factory=list)


class FileDiff(BaseModel):
    from_path: Optional[str] = None
    to_path: Optional[str] = None
    chunks: List[Chunk] = Field(default_factory=list)

    @property
    def is_deleted(self) -> bool:
        return not self.to_path or self.to_path == DELETED_FILE_SENTINEL

    @property
    def is_new(self) -> bool:
        return not self.from_path or self.from_path == DELETED_FILE_SENTINEL


class PRContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    pull_number: int
    title: str = ""
    description: str = ""
    base_revision: str
    head_revision: str


class ReviewCandidate(BaseModel):
    """One entry of the model's ``reviews`` array."""

    model_config = ConfigDict(populate_by_name=True)

    line_number: int = Field(alias="lineNumber")
    change_type: Literal["+", "-"] = Field(alias="changeType")
    review_comment: str = Field(alias="reviewComment")


class Comment(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    line: int
    side: Side
    body: str

    @property
    def key(self) -> Tuple[str, int, Side]:
        return (self.path, self.line, self.side)

    def to_github(self) -> dict:
        return {"path": self.path, "line": self.line, "side": self.side.value, "body": self.body}


class ExistingComment(Comment):
    pass


class ThreadComment(BaseModel):
    path: str
    body: str = ""
    line_on_head: Optional[int] = None
    line_on_base: Optional[int] = None


class ReviewThread(BaseModel):
    is_outdated: bool = False
    is_resolved: bool = False
    diff_side: Optional[str] = None
    comments: List[ThreadComment] = Field(default_factory=list)


class PublishResult(BaseModel):
    batches: int = 0
    posted: List[Comment] = Field(default_factory=list)
    failed: List[Comment] = Field(default_factory=list)


class ReviewOutcome(BaseModel):
    files_reviewed: int = 0
    candidates: List[Comment] = Field(default_factory=list)
    duplicates: int = 0
    publish: Optional[PublishResult] = None
