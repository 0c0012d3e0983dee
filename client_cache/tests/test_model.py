"""
Unit tests for entity models and the model registry.
"""

from unittest.mock import AsyncMock

import pytest
import structlog
from pydantic import ValidationError
from structlog.contextvars import get_contextvars
from structlog.testing import LogCapture

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from client_cache.app.caching import EntityModel, InMemoryEntityStore, ModelRegistry
from client_cache.app.models import FeedbackModel, create_model_registry
from client_cache.app.schemas import FeedbackSchema, data_to_schema
from shared.errors import ConfigurationError


def make_feedback(feedback_id: str, project_id: str = "p1", **extra):
    data = {
        "_id": feedback_id,
        "_boundToObjectId": project_id,
        "boundToObjectType": "project",
        "content": f"feedback {feedback_id}",
    }
    data.update(extra)
    return data


class TestFeedbackModel:
    """Test cases for FeedbackModel."""

    @pytest.fixture
    def model(self):
        return FeedbackModel()

    def test_db_index(self, model):
        assert model.db_index("p1") == "project:feedbacks/p1"

    def test_add_and_get_project_page(self, model):
        stored = model.add_project_feedbacks("p1", [make_feedback("f1")], page=1, count=30)

        assert [entity["_id"] for entity in stored] == ["f1"]
        assert model.get_project_feedbacks("p1", 1) == stored
        assert model.get_project_feedbacks("p1", 2) is None

    def test_unknown_scope_is_absent(self, model):
        assert model.get_project_feedbacks("missing", 1) is None
        assert model.collection_for("missing") is None

    def test_same_scope_reuses_collection(self, model):
        model.add_project_feedbacks("p1", [make_feedback("f1")], page=1, count=30)
        first = model.collection_for("p1")
        model.add_project_feedbacks("p1", [make_feedback("f2")], page=2, count=50)

        assert model.collection_for("p1") is first
        assert len(model.collections) == 1
        assert first.page_size == 30
        assert model.get_project_feedbacks("p1", 1)[0]["_id"] == "f1"
        assert model.get_project_feedbacks("p1", 2)[0]["_id"] == "f2"

    def test_scopes_are_isolated(self, model):
        model.add_project_feedbacks("p1", [make_feedback("f1")])
        model.add_project_feedbacks("p2", [make_feedback("f2", "p2")])

        assert model.get_project_feedbacks("p1", 1)[0]["_id"] == "f1"
        assert model.get_project_feedbacks("p2", 1)[0]["_id"] == "f2"
        assert len(model.collections) == 2

    def test_collection_condition_matches_scope(self, model):
        model.add_project_feedbacks("p1", [])
        collection = model.collection_for("p1")

        assert collection.accepts(make_feedback("f1", "p1")) is True
        assert collection.accepts(make_feedback("f1", "p2")) is False
        assert collection.accepts(make_feedback("f1", "p1", boundToObjectType="task")) is False

    def test_entities_are_normalized(self, model):
        stored = model.add_project_feedbacks("p1", [make_feedback("f1", extra_field=1)])

        entity = stored[0]
        assert entity["attachments"] == []
        assert entity["_creatorId"] is None
        assert entity["extra_field"] == 1

    def test_invalid_payload_is_rejected(self, model):
        with pytest.raises(ValidationError):
            model.add_project_feedbacks("p1", [{"content": "no ids"}])

    def test_default_page_size_from_settings(self, model):
        model.add_scoped_page("p1", [make_feedback("f1")])

        assert model.collection_for("p1").page_size == model.settings.default_page_size

    @pytest.mark.asyncio
    async def test_add_one_and_get_one(self, model):
        saved = await model.add_one(make_feedback("f1"))

        assert saved["_id"] == "f1"
        assert await model.get_one("f1") == saved
        assert await model.get_one("f2") is None

    @pytest.mark.asyncio
    async def test_add_one_delegates_to_store(self):
        store = AsyncMock()
        store.save.return_value = {"_id": "f1"}
        model = FeedbackModel(store)

        result = await model.add_one(make_feedback("f1"))

        assert result == {"_id": "f1"}
        store.save.assert_awaited_once_with(data_to_schema(make_feedback("f1"), FeedbackSchema))

    def test_scope_id_is_bound_to_log_events(self):
        capture = LogCapture()
        structlog.configure(
            processors=[structlog.contextvars.merge_contextvars, capture],
            cache_logger_on_first_use=False,
        )
        try:
            model = FeedbackModel()
            model.add_project_feedbacks("p1", [make_feedback("f1")])
            model.get_project_feedbacks("p9", 1)
        finally:
            structlog.reset_defaults()

        created = [entry for entry in capture.entries if entry["event"] == "Collection created"]
        missing = [entry for entry in capture.entries if entry["event"] == "No collection for scope"]
        assert created[0]["scope_id"] == "p1"
        assert created[0]["db_index"] == "project:feedbacks/p1"
        assert missing[0]["scope_id"] == "p9"
        assert "scope_id" not in get_contextvars()

    def test_teardown_clears_collections(self, model):
        model.add_project_feedbacks("p1", [make_feedback("f1")])
        collection = model.collection_for("p1")

        model.teardown()

        assert model.collections == {}
        assert collection.get(1) is None
        assert model.get_project_feedbacks("p1", 1) is None


class TestEntityModel:
    """Test cases for the generic EntityModel."""

    def test_requires_scope_definition(self):
        with pytest.raises(ConfigurationError):
            EntityModel()

    def test_custom_model_without_schema(self):
        class CommentModel(EntityModel):
            schema_name = "Comment"
            scope_kind = "task"
            collection_name = "comments"

        model = CommentModel()
        stored = model.add_scoped_page("t1", [{"_id": "c1", "boundToObjectType": "task", "_boundToObjectId": "t1"}])

        assert model.db_index("t1") == "task:comments/t1"
        assert stored == [{"_id": "c1", "boundToObjectType": "task", "_boundToObjectId": "t1"}]


class TestInMemoryEntityStore:
    """Test cases for InMemoryEntityStore."""

    @pytest.mark.asyncio
    async def test_save_requires_primary_key(self):
        store = InMemoryEntityStore()

        with pytest.raises(ConfigurationError):
            await store.save({"content": "x"})

    @pytest.mark.asyncio
    async def test_save_overwrites(self):
        store = InMemoryEntityStore()
        await store.save({"_id": "a", "v": 1})
        await store.save({"_id": "a", "v": 2})

        assert await store.get("a") == {"_id": "a", "v": 2}
        assert len(store) == 1


class TestModelRegistry:
    """Test cases for ModelRegistry."""

    def test_create_model_registry(self):
        registry = create_model_registry()

        assert registry.schema_names() == ["Feedback"]
        assert isinstance(registry["Feedback"], FeedbackModel)

    def test_duplicate_schema_rejected(self):
        registry = ModelRegistry()
        registry.register(FeedbackModel())

        with pytest.raises(ConfigurationError):
            registry.register(FeedbackModel())

    def test_register_is_idempotent_for_same_model(self):
        registry = ModelRegistry()
        model = FeedbackModel()

        assert registry.register(model) is registry.register(model)

    def test_teardown_clears_every_model(self):
        registry = create_model_registry()
        model = registry.get("Feedback")
        model.add_project_feedbacks("p1", [make_feedback("f1")])

        registry.teardown()

        assert model.collections == {}
        assert registry.get("Feedback") is None
