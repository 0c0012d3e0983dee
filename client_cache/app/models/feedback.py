"""
Feedback entity cache.
"""

from functools import partial
from typing import Any, Dict, Iterable, List, Optional

from ..caching.model import EntityModel
from ..schemas.feedback import FeedbackSchema, data_to_schema, datas_to_schemas


class FeedbackModel(EntityModel):
    """Project feedbacks, paginated per project."""

    schema_name = "Feedback"
    scope_kind = "project"
    collection_name = "feedbacks"

    def __init__(self, store=None, **kwargs):
        kwargs.setdefault("transform", partial(data_to_schema, schema=FeedbackSchema))
        kwargs.setdefault("transform_many", partial(datas_to_schemas, schema=FeedbackSchema))
        super().__init__(store, **kwargs)

    def add_project_feedbacks(
        self,
        project_id: str,
        feedbacks: Iterable[Dict[str, Any]],
        page: int = 1,
        count: int = 100,
    ) -> List[Dict[str, Any]]:
        return self.add_scoped_page(project_id, feedbacks, page, count)

    def get_project_feedbacks(self, project_id: str, page: int) -> Optional[List[Dict[str, Any]]]:
        return self.get_scoped_page(project_id, page)
