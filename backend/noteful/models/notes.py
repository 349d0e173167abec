import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def is_object_id(value: Any) -> bool:
    return isinstance(value, str) and OBJECT_ID_RE.match(value) is not None


def _object_id(value: Any, name: str) -> str:
    if not is_object_id(value):
        raise ValueError(f"The `{name}` is not valid")
    return value.lower()


class _Camel(BaseModel):
    # documents are stored with camelCase keys and served the same way
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _In(_Camel):
    model_config = ConfigDict(frozen=True)


class NoteIn(_In):
    title: str
    content: Optional[str] = None
    folder_id: Optional[str] = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def title_not_blank(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Missing `title` in request body")
        return v

    @field_validator("folder_id", mode="before")
    @classmethod
    def folder_id_format(cls, v: Any) -> Optional[str]:
        # "" means no folder
        if v is None or v == "":
            return None
        return _object_id(v, "folderId")

    @field_validator("tags", mode="before")
    @classmethod
    def tag_id_set(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError("The `tags` must be an array")
        # a set of references: drop repeats, keep first-seen order
        return list(dict.fromkeys(_object_id(t, "tags") for t in v))

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class NameIn(_In):
    name: str

    @field_validator("name", mode="before")
    @classmethod
    def name_not_blank(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Missing `name` in request body")
        return v

    def to_document(self) -> dict[str, Any]:
        return {"name": self.name}


class FolderIn(NameIn):
    pass


class TagIn(NameIn):
    pass


class FolderOut(_Camel):
    id: str
    name: str
    created_at: str
    updated_at: str


class TagOut(_Camel):
    id: str
    name: str
    created_at: str
    updated_at: str


class NoteOut(_Camel):
    id: str
    title: str
    content: Optional[str] = None
    folder_id: Optional[str] = None
    tags: list[TagOut] = []
    created_at: str
    updated_at: str
