"""
Unit tests for the Content Service.
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from nrv.database import SEED_POSTS, SEED_PROJECTS
from nrv.errors import StorageError
from nrv.services import ContentService


@pytest.fixture
def content(context) -> ContentService:
    return ContentService(context)


class TestContent:

    @pytest.mark.unit
    def test_posts_keyed_by_slug(self, content):
        posts = content.get_posts()

        assert len(posts) == len(SEED_POSTS)
        assert "quantitative-system-dynamics" in posts
        post = posts["quantitative-system-dynamics"]
        assert post.title
        assert set(post.to_dict()) == {"id", "title", "content", "date"}

    @pytest.mark.unit
    def test_projects(self, content):
        projects = content.get_projects()

        assert len(projects) == len(SEED_PROJECTS)
        assert set(projects[0].to_dict()) == {"id", "name", "description", "url"}

    @pytest.mark.unit
    def test_seed_is_idempotent(self, content, database):
        database.seed_content()

        assert len(content.get_posts()) == len(SEED_POSTS)
        assert len(content.get_projects()) == len(SEED_PROJECTS)


class TestInquiries:

    @pytest.mark.unit
    def test_no_inquiries(self, content):
        assert content.list_inquiries() == []

    @pytest.mark.unit
    def test_add_and_list(self, content):
        content.add_inquiry("Trinity", "trinity@example.com", "Hello", "10.0.0.1")
        content.add_inquiry("Morpheus", "morpheus@example.com", "Hi", "10.0.0.2")

        inquiries = content.list_inquiries()

        assert [i.name for i in inquiries] == ["Trinity", "Morpheus"]
        assert inquiries[0].email == "trinity@example.com"
        assert inquiries[0].message == "Hello"
        assert inquiries[0].ip_address == "10.0.0.1"
        assert inquiries[0].timestamp


class TestVisitors:

    @pytest.mark.unit
    def test_record_visitor_once(self, content):
        assert content.count_visitors() == 0

        assert content.record_visitor("10.0.0.1") is True
        assert content.record_visitor("10.0.0.1") is False
        assert content.record_visitor("10.0.0.2") is True

        assert content.count_visitors() == 2

    @pytest.mark.unit
    def test_database_failure_raises_storage_error(self, content):
        with patch.object(
            Session,
            "scalar",
            side_effect=OperationalError("SELECT", {}, Exception("database is locked"))
        ):
            with pytest.raises(StorageError):
                content.count_visitors()
