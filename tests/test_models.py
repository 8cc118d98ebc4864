"""Tests for SQLAlchemy models."""

import pytest
from sqlalchemy.exc import IntegrityError

from talecraft.models import (
    Base,
    Collaborator,
    CollaboratorRole,
    Comment,
    Story,
    User,
)
from talecraft.models.database import build_engine


class TestModelImports:
    """Test that all models import correctly."""

    def test_base_metadata_tables(self) -> None:
        """Test that all tables are registered in Base.metadata."""
        expected_tables = {"users", "stories", "collaborators", "comments"}
        assert set(Base.metadata.tables.keys()) == expected_tables

    def test_user_model_attributes(self) -> None:
        """Test User model has expected attributes."""
        for name in ("id", "username", "email", "password_hash", "created_at"):
            assert hasattr(User, name)
        # Relationships
        assert hasattr(User, "stories")
        assert hasattr(User, "collaborations")
        assert hasattr(User, "comments")

    def test_story_model_attributes(self) -> None:
        """Test Story model has expected attributes."""
        for name in ("id", "author_id", "title", "content", "is_public", "created_at", "updated_at"):
            assert hasattr(Story, name)
        # Relationships
        assert hasattr(Story, "author")
        assert hasattr(Story, "collaborators")
        assert hasattr(Story, "comments")

    def test_collaborator_primary_key_is_story_and_user(self) -> None:
        """Test one collaborator row per (story, user)."""
        pk = [column.name for column in Base.metadata.tables["collaborators"].primary_key]
        assert pk == ["story_id", "user_id"]

    def test_user_unique_constraints(self) -> None:
        names = {c.name for c in Base.metadata.tables["users"].constraints}
        assert {"uq_users_username", "uq_users_email"} <= names

    def test_child_rows_cascade_with_story(self) -> None:
        for table in ("collaborators", "comments"):
            fk = next(
                fk
                for fk in Base.metadata.tables[table].foreign_keys
                if fk.column.table.name == "stories"
            )
            assert fk.ondelete == "CASCADE"


class TestEnums:
    """Test enum definitions."""

    def test_collaborator_role_values(self) -> None:
        """Test the role set is closed to editor and viewer."""
        assert {role.value for role in CollaboratorRole} == {"editor", "viewer"}

    def test_collaborator_role_is_str_enum(self) -> None:
        """Test CollaboratorRole inherits from str for JSON serialization."""
        assert isinstance(CollaboratorRole.EDITOR, str)
        assert CollaboratorRole.EDITOR.value == "editor"


class TestRelationships:
    """Test model relationships are correctly defined."""

    def test_user_stories_relationship(self) -> None:
        rel = User.stories.property
        assert rel.mapper.class_ == Story
        assert rel.back_populates == "author"

    def test_story_collaborators_relationship(self) -> None:
        rel = Story.collaborators.property
        assert rel.mapper.class_ == Collaborator
        assert rel.back_populates == "story"

    def test_story_comments_relationship(self) -> None:
        rel = Story.comments.property
        assert rel.mapper.class_ == Comment
        assert rel.back_populates == "story"

    def test_comment_user_relationship(self) -> None:
        rel = Comment.user.property
        assert rel.mapper.class_ == User
        assert rel.back_populates == "comments"


class TestDatabase:
    """Test engine construction."""

    async def test_sqlite_engine_enforces_foreign_keys(self, db) -> None:
        db.add(Comment(story_id=999, user_id=999, content="orphan"))
        with pytest.raises(IntegrityError):
            await db.flush()

    async def test_sqlite_engine_ignores_queue_pool_options(self, tmp_path) -> None:
        engine = build_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'pool.db'}", pool_size=5, max_overflow=2
        )
        async with engine.connect() as conn:
            assert (await conn.exec_driver_sql("PRAGMA foreign_keys")).scalar() == 1
        await engine.dispose()
