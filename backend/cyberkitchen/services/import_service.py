"""
Cyber Kitchen Backend — Recipe Import Service
===============================================

What:  Turns a recipe web page into a normalized Recipe by reading its
       schema.org JSON-LD data, and downloads the recipe's image.
How:   httpx fetches the page, BeautifulSoup enumerates the
       <script type="application/ld+json"> blocks, the first Recipe-typed
       node wins, and per-field normalizers coerce its loosely-typed values.
Who:   Called by POST /api/import-recipe. The result is NOT persisted; the
       frontend adds it to its collection and saves the collection itself.

Import Flow:
    ┌──────────┐    ┌──────────────┐    ┌─────────────┐    ┌──────────────┐
    │  Fetch   │───▶│ Find JSON-LD │───▶│  Normalize  │───▶│ Fetch image  │
    │  page    │    │ Recipe node  │    │  fields     │    │ (optional)   │
    └──────────┘    └──────────────┘    └─────────────┘    └──────────────┘
      fatal            fatal (404)          never fails      logged, skipped
      (500)            bad blocks skipped

Field Shapes (schema.org data is loosely typed):
    recipeIngredient    list[str] | str
    recipeInstructions  list[str | HowToStep{text, name}] | str
    recipeYield         int | str ("4 servings") | list[...]
    image               str | list[str | ImageObject] | ImageObject{url}

    Each shape has its own normalizer below; unknown shapes fall back to
    the field's empty value.

Limitations:
    Only JSON-LD is read. Pages that expose recipes through Microdata or
    RDFa alone are reported as "not found".
"""

import json
import logging
import math
import re
import time
from pathlib import PurePosixPath
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup

from cyberkitchen.config import settings
from cyberkitchen.exceptions import FileStorageError, NotFoundError, RecipeFetchError
from cyberkitchen.schemas.recipe import DEFAULT_SERVINGS, Recipe
from cyberkitchen.services.media_service import MediaManager, media_manager

logger = logging.getLogger(__name__)

JSON_LD_TYPE = "application/ld+json"
RECIPE_TYPE = "Recipe"
UNTITLED_RECIPE = "Untitled Recipe"

# Entity decoding stops after this many passes even if the text keeps changing.
# Handles "&amp;eacute;" style double/triple encoding without unbounded loops.
MAX_DECODE_PASSES = 3

DEFAULT_IMAGE_EXTENSION = ".jpg"
SAFE_IMAGE_EXTENSION = re.compile(r"\.[A-Za-z0-9]{1,10}")

LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


# ══════════════════════════════════════════════════════════════════════════
# Text Helpers
# ══════════════════════════════════════════════════════════════════════════

def decode_html_entities(value: Optional[str]) -> str:
    """
    Decode HTML entities (and drop stray tags) until the text stops changing.

    At most MAX_DECODE_PASSES passes are made:
        "Fish &amp;amp; Chips" → "Fish &amp; Chips" → "Fish & Chips"
    """
    if not value:
        return ""

    decoded = value
    for _ in range(MAX_DECODE_PASSES):
        candidate = BeautifulSoup(f"<div>{decoded}</div>", "html.parser").get_text()
        if candidate == decoded:
            break
        decoded = candidate
    return decoded


def _string_or(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) and value else default


# ══════════════════════════════════════════════════════════════════════════
# JSON-LD Discovery
# ══════════════════════════════════════════════════════════════════════════

def _is_json_ld(script_type: Optional[str]) -> bool:
    return bool(script_type) and script_type.split(";")[0].strip().lower() == JSON_LD_TYPE


def _candidates(payload: Any) -> List[Any]:
    """Items to scan in one JSON-LD payload: its @graph, the list itself, or [payload]."""
    if isinstance(payload, dict):
        graph = payload.get("@graph")
        if isinstance(graph, list):
            return graph
        if isinstance(graph, dict):
            return [graph]
    if isinstance(payload, list):
        return payload
    return [payload]


def _is_recipe(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    declared = item.get("@type")
    if isinstance(declared, list):
        return RECIPE_TYPE in declared
    return declared == RECIPE_TYPE


def find_recipe_node(html: str) -> Optional[Dict[str, Any]]:
    """
    Return the first Recipe-typed JSON-LD node in document order, or None.

    Blocks that are not valid JSON are logged and skipped.
    """
    soup = BeautifulSoup(html, "html.parser")
    scripts = soup.find_all("script", attrs={"type": _is_json_ld})

    for index, script in enumerate(scripts):
        raw = script.string or script.get_text()
        try:
            payload = json.loads(raw)
        except (ValueError, RecursionError) as e:
            logger.warning("Skipping unparsable JSON-LD block #%d: %s", index, e)
            continue

        for item in _candidates(payload):
            if _is_recipe(item):
                logger.debug("Recipe node found in JSON-LD block #%d", index)
                return item

    logger.info("No Recipe node among %d JSON-LD block(s)", len(scripts))
    return None


# ══════════════════════════════════════════════════════════════════════════
# Field Normalizers
# ══════════════════════════════════════════════════════════════════════════

def normalize_ingredients(value: Any) -> List[str]:
    """list[str] → decoded list; str → one-element list; anything else → []."""
    if isinstance(value, list):
        return [decode_html_entities(item) for item in value if isinstance(item, str)]
    if isinstance(value, str):
        return [decode_html_entities(value)]
    return []


def _step_text(step: Any) -> str:
    # HowToStep exposes `text`; HowToSection and some plugins only `name`
    if isinstance(step, str):
        return step
    if isinstance(step, dict):
        return _string_or(step.get("text")) or _string_or(step.get("name"))
    return ""


def normalize_instructions(value: Any) -> str:
    """Steps joined by a blank line (steps with no text are skipped); a plain string is decoded as-is."""
    if isinstance(value, list):
        steps = (decode_html_entities(_step_text(step)) for step in value)
        return "\n\n".join(step for step in steps if step)
    if isinstance(value, str):
        return decode_html_entities(value)
    return ""


def parse_servings(value: Any) -> int:
    """
    Leading integer of recipeYield, or DEFAULT_SERVINGS.

    Examples:
        4                      → 4
        "6 servings"           → 6
        ["8", "8 portions"]    → 8
        "Serves four" / None   → 4
        "0"                    → 4
    """
    if isinstance(value, list):
        value = value[0] if value else None

    if isinstance(value, bool):
        return DEFAULT_SERVINGS
    if isinstance(value, int):
        servings = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            return DEFAULT_SERVINGS
        servings = int(value)
    elif isinstance(value, str):
        match = LEADING_INTEGER.match(value)
        if not match:
            return DEFAULT_SERVINGS
        try:
            servings = int(match.group(1))
        except ValueError:
            # Digit strings past the interpreter's int conversion limit
            return DEFAULT_SERVINGS
    else:
        return DEFAULT_SERVINGS

    return servings if servings > 0 else DEFAULT_SERVINGS


def resolve_image_url(value: Any) -> Optional[str]:
    """str, first list element, or ImageObject.url; None when nothing usable."""
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("url")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def image_extension(image_url: str) -> str:
    """Extension of the URL path (query string ignored), defaulting to .jpg."""
    suffix = PurePosixPath(urlparse(image_url).path).suffix
    if SAFE_IMAGE_EXTENSION.fullmatch(suffix):
        return suffix
    return DEFAULT_IMAGE_EXTENSION


def normalize_recipe(node: Dict[str, Any], source_url: str) -> Recipe:
    """Map a schema.org Recipe node onto the internal Recipe shape (no image)."""
    return Recipe(
        title=decode_html_entities(_string_or(node.get("name"), UNTITLED_RECIPE)),
        description=decode_html_entities(_string_or(node.get("description"))),
        ingredients=normalize_ingredients(node.get("recipeIngredient")),
        instructions=normalize_instructions(node.get("recipeInstructions")),
        image_url="",
        servings=parse_servings(node.get("recipeYield")),
        prep_time=_string_or(node.get("prepTime")),
        cook_time=_string_or(node.get("cookTime")),
        source_url=source_url,
    )


# ══════════════════════════════════════════════════════════════════════════
# Importer
# ══════════════════════════════════════════════════════════════════════════

class RecipeImporter:
    """
    Fetches a page, extracts its recipe, and stores the recipe's image.

    Error Handling:
        Page fetch fails        → RecipeFetchError (500)
        No Recipe JSON-LD node  → NotFoundError (404)
        Image fetch/write fails → logged; recipe returned with imageUrl ""

    No retries: every outbound request is attempted once, bounded by
    settings.import_timeout.
    """

    def __init__(
        self,
        media: Optional[MediaManager] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            media:      Where downloaded images go (defaults to the app's media root).
            timeout:    Seconds allowed per request.
            user_agent: Browser-like User-Agent header.
            transport:  Custom httpx transport (tests pass httpx.MockTransport).
        """
        self.media = media or media_manager
        self.timeout = timeout or settings.import_timeout
        self.user_agent = user_agent or settings.import_user_agent
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )

    async def fetch_page(self, client: httpx.AsyncClient, url: str) -> str:
        """
        GET the recipe page and return its decoded HTML.

        Raises:
            RecipeFetchError on network errors, timeouts, or non-2xx status.
        """
        start_time = time.perf_counter()
        try:
            response = await client.get(url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Failed to fetch recipe page %s: %s", url, str(e))
            raise RecipeFetchError(
                url=url,
                context={"error": str(e), "error_type": type(e).__name__},
            )

        logger.info(
            "Fetched %s in %.0fms (%d bytes)",
            url,
            (time.perf_counter() - start_time) * 1000,
            len(response.content),
        )
        return response.text

    async def download_image(self, client: httpx.AsyncClient, image_url: str) -> str:
        """
        Download an image into the media root.

        Returns:
            Public URL of the stored image, or "" if anything went wrong.
        """
        try:
            response = await client.get(image_url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Failed to download image %s: %s", image_url, str(e))
            return ""

        filename = f"import-{int(time.time() * 1000)}{image_extension(image_url)}"
        try:
            stored_path = await self.media.store_bytes(self.media.media_root, filename, response.content)
        except FileStorageError as e:
            logger.warning("Failed to store image %s: %s", image_url, e.message)
            return ""

        return self.media.public_url(stored_path)

    async def import_recipe(self, url: str) -> Recipe:
        """
        Import the recipe published at `url`.

        Returns:
            The normalized Recipe (not persisted).

        Raises:
            RecipeFetchError: The page could not be fetched.
            NotFoundError: The page has no Recipe-typed JSON-LD node.
        """
        async with self._client() as client:
            html = await self.fetch_page(client, url)

            node = find_recipe_node(html)
            if node is None:
                raise NotFoundError(
                    resource="recipe",
                    message="No structured recipe data found (JSON-LD)",
                    context={"url": url},
                )

            recipe = normalize_recipe(node, url)

            image_url = resolve_image_url(node.get("image"))
            if image_url:
                recipe.image_url = await self.download_image(client, urljoin(url, image_url))

        logger.info(
            "Imported recipe %r from %s (%d ingredients, image=%s)",
            recipe.title,
            url,
            len(recipe.ingredients),
            recipe.image_url or "none",
        )
        return recipe


# ── Singleton Instance ────────────────────────────────────────────────────
recipe_importer = RecipeImporter()
