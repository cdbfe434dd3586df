"""Models for the hierarchical file-selection tree."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from repo_unifier.models.file_models import FileRecord


class NodeKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class SelectionStatus(str, Enum):
    """Tri-state aggregate selection of a tree node."""

    CHECKED = "checked"
    UNCHECKED = "unchecked"
    PARTIAL = "partial"


class TreeNode(BaseModel):
    """A file leaf wrapping a catalog record, or a synthesized directory."""

    model_config = ConfigDict(frozen=False)

    name: str  # Path segment
    path: str  # Full path from the project root
    kind: NodeKind
    children: list["TreeNode"] = Field(default_factory=list)
    record: FileRecord | None = None  # Same instance as the catalog entry

    @property
    def is_directory(self) -> bool:
        return self.kind is NodeKind.DIRECTORY

    def child(self, name: str) -> "TreeNode | None":
        for node in self.children:
            if node.name == name:
                return node
        return None
