"""
Feedback record schema.
"""

from typing import Any, Dict, Iterable, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field


class FeedbackSchema(BaseModel):
    """Feedback left on a project (or another bound object)."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    feedback_id: str = Field(alias="_id")
    bound_to_object_id: str = Field(alias="_boundToObjectId")
    bound_to_object_type: str = Field(alias="boundToObjectType")
    creator_id: Optional[str] = Field(default=None, alias="_creatorId")
    content: str = ""
    attachments: List[Dict[str, Any]] = Field(default_factory=list)
    created: Optional[str] = None
    updated: Optional[str] = None


def data_to_schema(data: Dict[str, Any], schema: Type[BaseModel]) -> Dict[str, Any]:
    """Validate one raw payload and return it keyed by wire names."""
    return schema.model_validate(data).model_dump(by_alias=True)


def datas_to_schemas(datas: Iterable[Dict[str, Any]], schema: Type[BaseModel]) -> List[Dict[str, Any]]:
    return [data_to_schema(data, schema) for data in datas]
