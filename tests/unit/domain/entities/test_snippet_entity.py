from src.domain.entities.folder import Folder
from src.domain.entities.snippet import SUPPORTED_LANGUAGES, Snippet, is_supported_language


def test_snippet_entity_defaults():
    s = Snippet(user_id="u1", title="Fetch users", code="fetch('/users')", language="javascript")
    assert s.user_id == "u1"
    assert s.description == ""
    assert s.tags == [] and s.auto_tags == []
    assert s.folder_id is None
    assert s.usage_count == 0
    assert s.last_used_at is None
    assert s.id is None
    assert s.created_at.tzinfo is not None


def test_all_tags_is_union_of_user_and_auto_tags():
    s = Snippet(
        user_id="u1",
        title="t",
        code="x",
        language="python",
        tags=["mine", "loop"],
        auto_tags=["loop", "async"],
    )
    assert s.all_tags == {"mine", "loop", "async"}


def test_supported_languages():
    assert "python" in SUPPORTED_LANGUAGES
    assert "plaintext" in SUPPORTED_LANGUAGES
    assert is_supported_language("go")
    assert not is_supported_language("Python")
    assert not is_supported_language(None)


def test_folder_entity_defaults():
    f = Folder(user_id="u1", name="Snippets")
    assert f.description == ""
    assert f.id is None
