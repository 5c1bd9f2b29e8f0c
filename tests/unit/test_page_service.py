import pytest
from pydantic import ValidationError as PydanticValidationError

from pages_api.app.core.errors import NotFoundError, ValidationError
from pages_api.app.schemas.page import PageCreate, PageUpdate
from pages_api.app.services.listing import ListParams
from pages_api.app.services.page_service import PageService, slugify


@pytest.fixture
def pages(db):
    return PageService(db)


@pytest.mark.unit
@pytest.mark.parametrize(
    "text,expected",
    [
        ("About Us", "about-us"),
        ("  Crème brûlée -- recipes!  ", "creme-brulee-recipes"),
        ("2024 / Q1 report", "2024-q1-report"),
        ("!!!", ""),
    ],
)
def test_slugify(text, expected):
    assert slugify(text) == expected


@pytest.mark.unit
def test_slugify_is_cut_to_max_length():
    assert len(slugify("word " * 50)) <= 100
    assert not slugify("word " * 50).endswith("-")


@pytest.mark.unit
def test_create_derives_slug_from_title(run, pages, factories):
    page = run(pages.create_page(PageCreate.model_validate(factories.PagePayloadFactory(title="Hello World"))))

    assert page.slug == "hello-world"
    assert page.editor_type.value == "markdown"
    assert page.created_at == page.updated_at


@pytest.mark.unit
def test_duplicate_slug_is_rejected_and_nothing_written(run, pages, factories):
    run(pages.create_page(PageCreate.model_validate(factories.PagePayloadFactory(slug="about"))))

    with pytest.raises(ValidationError) as excinfo:
        run(pages.create_page(PageCreate.model_validate(factories.PagePayloadFactory(slug="about"))))

    assert "slug" in excinfo.value.errors
    assert pages.pages.count() == 1


@pytest.mark.unit
def test_title_without_slug_characters_needs_explicit_slug(run, pages, factories):
    with pytest.raises(ValidationError) as excinfo:
        run(pages.create_page(PageCreate.model_validate(factories.PagePayloadFactory(title="???"))))

    assert list(excinfo.value.errors) == ["slug"]


@pytest.mark.unit
def test_update_to_taken_slug_is_rejected(run, pages, factories):
    run(pages.create_page(PageCreate.model_validate(factories.PagePayloadFactory(slug="first"))))
    second = run(pages.create_page(PageCreate.model_validate(factories.PagePayloadFactory(slug="second"))))

    with pytest.raises(ValidationError):
        run(pages.update_page(second.id, PageUpdate(slug="first")))

    # Keeping its own slug is not a conflict.
    same = run(pages.update_page(second.id, PageUpdate(slug="second", title="Renamed")))
    assert same.slug == "second"
    assert same.title == "Renamed"


@pytest.mark.unit
def test_title_change_does_not_recompute_slug(run, pages, factories):
    page = run(pages.create_page(PageCreate.model_validate(factories.PagePayloadFactory(title="Old title"))))

    updated = run(pages.update_page(page.id, PageUpdate(title="New title")))

    assert updated.slug == "old-title"


@pytest.mark.unit
def test_get_by_slug_and_by_id(run, pages, factories):
    page = run(pages.create_page(PageCreate.model_validate(factories.PagePayloadFactory(slug="contact"))))

    assert run(pages.get_page_by_slug("Contact")).id == page.id
    assert run(pages.get_page(page.id.upper())).id == page.id
    with pytest.raises(NotFoundError):
        run(pages.get_page_by_slug("missing"))
    with pytest.raises(NotFoundError):
        run(pages.get_page("123"))


@pytest.mark.unit
def test_list_filters_by_group_and_editor_type(run, pages, factories):
    run(pages.create_page(PageCreate.model_validate(factories.PagePayloadFactory(title="A", groups=["docs"]))))
    run(pages.create_page(PageCreate.model_validate(
        factories.PagePayloadFactory(title="B", groups=["docs", "blog"], editorType="wysiwyg")
    )))
    run(pages.create_page(PageCreate.model_validate(factories.PagePayloadFactory(title="C", groups=["blog"]))))

    docs = run(pages.list_pages(ListParams(), group="docs"))
    rich_docs = run(pages.list_pages(ListParams(), group="docs", editor_type="wysiwyg"))

    assert [p.title for p in docs.items] == ["B", "A"]
    assert [p.title for p in rich_docs.items] == ["B"]


@pytest.mark.unit
def test_schema_rejects_bad_input(factories):
    with pytest.raises(PydanticValidationError):
        PageCreate.model_validate(factories.PagePayloadFactory(imageUrl="not a url"))
    with pytest.raises(PydanticValidationError):
        PageCreate.model_validate(factories.PagePayloadFactory(groups=[f"g{i}" for i in range(11)]))
    with pytest.raises(PydanticValidationError):
        PageCreate.model_validate(factories.PagePayloadFactory(slug="Bad Slug"))
    with pytest.raises(PydanticValidationError):
        PageUpdate.model_validate({"title": None})


@pytest.mark.unit
def test_delete_page(run, pages, factories):
    page = run(pages.create_page(PageCreate.model_validate(factories.PagePayloadFactory(title="Gone"))))

    deleted = run(pages.delete_page(page.id))

    assert (deleted.id, deleted.title) == (page.id, "Gone")
    with pytest.raises(NotFoundError):
        run(pages.delete_page(page.id))


@pytest.mark.unit
@pytest.mark.parametrize("url", ["http://%%%", "http://exa\tmple.com/x", "ftp://files.example.com/a.png", "//example.com/a"])
def test_malformed_urls_are_rejected_on_every_entity(factories, url):
    from pages_api.app.schemas.playlist import PlaylistUpdate
    from pages_api.app.schemas.track import TrackCreate

    with pytest.raises(PydanticValidationError) as excinfo:
        PageCreate.model_validate(factories.PagePayloadFactory(imageUrl=url))
    assert excinfo.value.errors()[0]["loc"] == ("imageUrl",)
    with pytest.raises(PydanticValidationError):
        PageUpdate.model_validate({"thumbnailUrl": url})
    with pytest.raises(PydanticValidationError):
        TrackCreate.model_validate(factories.TrackPayloadFactory(audioUrl=url))
    with pytest.raises(PydanticValidationError):
        PlaylistUpdate.model_validate({"thumbnail": url})


@pytest.mark.unit
def test_valid_url_is_stored_as_given(run, pages, factories):
    page = run(pages.create_page(PageCreate.model_validate(
        factories.PagePayloadFactory(imageUrl="https://cdn.example.com/a%20b.png?w=200")
    )))

    assert page.image_url == "https://cdn.example.com/a%20b.png?w=200"
