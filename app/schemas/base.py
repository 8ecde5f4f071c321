# app/schemas/base.py
from typing import Annotated
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# 클라이언트와 주고받는 id는 모두 UUID 문자열
UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
IdStr = Annotated[str, Field(pattern=UUID_PATTERN)]

class CamelModel(BaseModel):
    """JSON은 camelCase, 파이썬은 snake_case"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
