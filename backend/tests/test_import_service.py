"""
Cyber Kitchen Backend — Recipe Importer Unit Tests (Mocked Web)
=================================================================

What:  Tests for JSON-LD discovery, field normalization and the import flow.
How:   Outbound HTTP goes through httpx.MockTransport (the `web` fixture);
       unknown URLs behave like unreachable hosts.

What we test:
    ✅ Entity decoding converges within 3 passes and stops there
    ✅ First Recipe node wins across @graph, lists and multiple blocks
    ✅ Broken JSON-LD blocks are skipped
    ✅ Every scraped field shape normalizes to the Recipe shape
    ✅ Image download success, failure and relative URLs
    ✅ Page fetch failures and pages without recipe data
    ❌ Real network calls
"""

import re

import pytest

from cyberkitchen.exceptions import NotFoundError, RecipeFetchError
from cyberkitchen.services.import_service import (
    decode_html_entities,
    find_recipe_node,
    image_extension,
    normalize_ingredients,
    normalize_instructions,
    parse_servings,
    resolve_image_url,
)

from conftest import recipe_page

PAGE_URL = "https://cooking.example.com/recipes/pasta"

PASTA = {
    "@context": "https://schema.org",
    "@type": "Recipe",
    "name": "Pasta",
    "recipeYield": "4",
    "recipeIngredient": ["Tomato", "Pasta"],
    "recipeInstructions": [{"text": "Boil water"}, {"text": "Add pasta"}],
}


class TestDecodeHtmlEntities:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Plain text", "Plain text"),
            ("Fish &amp; Chips", "Fish & Chips"),
            ("Fish &amp;amp; Chips", "Fish & Chips"),
            ("&amp;amp;amp;", "&"),
            ("Cr&egrave;me br&#251;l&eacute;e", "Crème brûlée"),
            ("&amp;eacute;t&amp;eacute;", "été"),
            ("Salt & pepper", "Salt & pepper"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_decodes(self, raw, expected):
        assert decode_html_entities(raw) == expected

    def test_stops_after_three_passes(self):
        """Four levels of encoding leave one level after the pass limit."""
        assert decode_html_entities("&amp;amp;amp;amp;") == "&amp;"


class TestFindRecipeNode:

    def test_single_object(self):
        node = find_recipe_node(recipe_page(PASTA))
        assert node["name"] == "Pasta"

    def test_graph(self):
        graph = {
            "@context": "https://schema.org",
            "@graph": [
                {"@type": "WebPage", "name": "Page"},
                {"@type": "Recipe", "name": "From graph"},
            ],
        }
        assert find_recipe_node(recipe_page(graph))["name"] == "From graph"

    def test_top_level_list(self):
        payload = [{"@type": "Organization"}, {"@type": "Recipe", "name": "From list"}]
        assert find_recipe_node(recipe_page(payload))["name"] == "From list"

    def test_type_list(self):
        payload = {"@type": ["Recipe", "NewsArticle"], "name": "Typed list"}
        assert find_recipe_node(recipe_page(payload))["name"] == "Typed list"

    def test_first_match_wins_across_blocks(self):
        html = recipe_page(
            {"@type": "BreadcrumbList"},
            {"@type": "Recipe", "name": "First"},
            {"@type": "Recipe", "name": "Second"},
        )
        assert find_recipe_node(html)["name"] == "First"

    def test_broken_block_is_skipped(self):
        html = recipe_page('{"@type": "Recipe", "name": ', {"@type": "Recipe", "name": "Valid"})
        assert find_recipe_node(html)["name"] == "Valid"

    def test_deeply_nested_block_is_skipped(self):
        nested = "[" * 200000 + "]" * 200000
        html = recipe_page(nested, {"@type": "Recipe", "name": "Second"})
        assert find_recipe_node(html)["name"] == "Second"

    def test_no_json_ld(self):
        assert find_recipe_node("<html><body><h1>Pasta</h1></body></html>") is None

    def test_no_recipe_typed_node(self):
        assert find_recipe_node(recipe_page({"@type": "Article", "name": "News"})) is None


class TestFieldNormalizers:

    def test_ingredients_list(self):
        assert normalize_ingredients(["1 cup flour", "2 eggs &amp; milk"]) == ["1 cup flour", "2 eggs & milk"]

    def test_ingredients_scalar(self):
        assert normalize_ingredients("Salt") == ["Salt"]

    @pytest.mark.parametrize("value", [None, 42, {"name": "Salt"}])
    def test_ingredients_other_shapes(self, value):
        assert normalize_ingredients(value) == []

    def test_instructions_mixed_steps(self):
        steps = [
            "Preheat oven",
            {"@type": "HowToStep", "text": "Mix &amp; stir", "name": "Ignored name"},
            {"@type": "HowToSection", "name": "Bake"},
        ]
        assert normalize_instructions(steps) == "Preheat oven\n\nMix & stir\n\nBake"

    def test_instructions_skip_empty_steps(self):
        assert normalize_instructions(["One", {"url": "#step2"}, "Three"]) == "One\n\nThree"

    def test_instructions_scalar(self):
        assert normalize_instructions("Just cook it &amp; eat") == "Just cook it & eat"

    def test_instructions_missing(self):
        assert normalize_instructions(None) == ""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("4", 4),
            (6, 6),
            ("6 servings", 6),
            (" 8 portions", 8),
            (["2", "2 servings"], 2),
            (3.0, 3),
            ("Serves four", 4),
            ("", 4),
            ("0", 4),
            ("-2", 4),
            ([], 4),
            (None, 4),
            (True, 4),
            ({"value": 5}, 4),
            (float("inf"), 4),
            (float("-inf"), 4),
            (float("nan"), 4),
        ],
    )
    def test_parse_servings(self, value, expected):
        assert parse_servings(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("https://img.example.com/a.jpg", "https://img.example.com/a.jpg"),
            (["https://img.example.com/1.jpg", "https://img.example.com/2.jpg"], "https://img.example.com/1.jpg"),
            ({"@type": "ImageObject", "url": "https://img.example.com/o.png"}, "https://img.example.com/o.png"),
            ([{"@type": "ImageObject", "url": "https://img.example.com/lo.png"}], "https://img.example.com/lo.png"),
            ({"@type": "ImageObject"}, None),
            ([], None),
            ("", None),
            (None, None),
        ],
    )
    def test_resolve_image_url(self, value, expected):
        assert resolve_image_url(value) == expected

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://img.example.com/photos/pasta.png", ".png"),
            ("https://img.example.com/pasta.webp?w=640&h=480", ".webp"),
            ("https://img.example.com/photo", ".jpg"),
            ("https://img.example.com/dir.v2/photo", ".jpg"),
        ],
    )
    def test_image_extension(self, url, expected):
        assert image_extension(url) == expected


class TestRecipeImporter:

    @pytest.mark.asyncio
    async def test_happy_path(self, importer, web):
        web.add(PAGE_URL, recipe_page(PASTA))

        recipe = await importer.import_recipe(PAGE_URL)

        assert recipe.title == "Pasta"
        assert recipe.servings == 4
        assert recipe.ingredients == ["Tomato", "Pasta"]
        assert recipe.instructions == "Boil water\n\nAdd pasta"
        assert recipe.description == ""
        assert recipe.image_url == ""
        assert recipe.prep_time == ""
        assert recipe.cook_time == ""
        assert recipe.source_url == PAGE_URL

    @pytest.mark.asyncio
    async def test_serialized_with_camel_case_keys(self, importer, web):
        web.add(PAGE_URL, recipe_page({**PASTA, "prepTime": "PT10M", "cookTime": "PT20M"}))

        data = (await importer.import_recipe(PAGE_URL)).model_dump(by_alias=True)

        assert data["prepTime"] == "PT10M"
        assert data["cookTime"] == "PT20M"
        assert data["sourceUrl"] == PAGE_URL
        assert data["imageUrl"] == ""

    @pytest.mark.asyncio
    async def test_defaults_and_decoding(self, importer, web):
        web.add(PAGE_URL, recipe_page({
            "@type": "Recipe",
            "description": "Mac &amp;amp; cheese",
            "recipeYield": "a big pot",
        }))

        recipe = await importer.import_recipe(PAGE_URL)

        assert recipe.title == "Untitled Recipe"
        assert recipe.description == "Mac & cheese"
        assert recipe.servings == 4
        assert recipe.ingredients == []
        assert recipe.instructions == ""

    @pytest.mark.asyncio
    async def test_infinite_yield_falls_back_to_default(self, importer, web):
        web.add(PAGE_URL, recipe_page('{"@type": "Recipe", "name": "Big", "recipeYield": 1e400}'))

        recipe = await importer.import_recipe(PAGE_URL)

        assert recipe.title == "Big"
        assert recipe.servings == 4

    @pytest.mark.asyncio
    async def test_sends_browser_user_agent(self, importer, web):
        web.add(PAGE_URL, recipe_page(PASTA))
        await importer.import_recipe(PAGE_URL)
        assert "Mozilla/5.0" in web.requests[0].headers["user-agent"]

    @pytest.mark.asyncio
    async def test_image_downloaded(self, importer, web, media, sample_image_bytes):
        image_url = "https://img.example.com/photos/pasta.png?width=800"
        web.add(PAGE_URL, recipe_page({**PASTA, "image": [image_url]}))
        web.add(image_url, sample_image_bytes, content_type="image/png")

        recipe = await importer.import_recipe(PAGE_URL)

        assert re.fullmatch(r"/recipes/medias/import-\d+\.png", recipe.image_url)
        stored = media.media_root / recipe.image_url.rsplit("/", 1)[1]
        assert stored.read_bytes() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_relative_image_resolved_against_page(self, importer, web, sample_image_bytes):
        web.add(PAGE_URL, recipe_page({**PASTA, "image": {"url": "/images/pasta.jpg"}}))
        web.add("https://cooking.example.com/images/pasta.jpg", sample_image_bytes, content_type="image/jpeg")

        recipe = await importer.import_recipe(PAGE_URL)

        assert re.fullmatch(r"/recipes/medias/import-\d+\.jpg", recipe.image_url)

    @pytest.mark.asyncio
    async def test_unreachable_image_keeps_recipe(self, importer, web, media):
        web.add(PAGE_URL, recipe_page({**PASTA, "image": "https://gone.example.com/pasta.jpg"}))

        recipe = await importer.import_recipe(PAGE_URL)

        assert recipe.title == "Pasta"
        assert recipe.image_url == ""
        assert list(media.media_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_image_http_error_keeps_recipe(self, importer, web):
        image_url = "https://img.example.com/missing.jpg"
        web.add(PAGE_URL, recipe_page({**PASTA, "image": image_url}))
        web.add(image_url, "Not Found", status=404, content_type="text/plain")

        recipe = await importer.import_recipe(PAGE_URL)

        assert recipe.image_url == ""
        assert recipe.ingredients == ["Tomato", "Pasta"]

    @pytest.mark.asyncio
    async def test_page_without_json_ld_is_not_found(self, importer, web):
        web.add(PAGE_URL, "<html><body><h1>Pasta</h1><ul><li>Tomato</li></ul></body></html>")

        with pytest.raises(NotFoundError, match="No structured recipe data"):
            await importer.import_recipe(PAGE_URL)

    @pytest.mark.asyncio
    async def test_page_http_error_is_fetch_error(self, importer, web):
        web.add(PAGE_URL, "Forbidden", status=403)

        with pytest.raises(RecipeFetchError):
            await importer.import_recipe(PAGE_URL)

    @pytest.mark.asyncio
    async def test_unreachable_page_is_fetch_error(self, importer):
        with pytest.raises(RecipeFetchError) as exc_info:
            await importer.import_recipe("https://offline.example.com/recipe")
        assert exc_info.value.context["url"] == "https://offline.example.com/recipe"
