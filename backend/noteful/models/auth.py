from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class UserIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    username: str = Field(min_length=3)
    password: str = Field(min_length=8, max_length=72)
    full_name: Optional[str] = None

    @field_validator("username", "password", mode="before")
    @classmethod
    def no_surrounding_whitespace(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip() != v:
            raise ValueError("There is whitespace at beginning or end")
        return v

    @field_validator("full_name")
    @classmethod
    def trim_full_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() or None if v else None


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    username: str
    full_name: Optional[str] = None
