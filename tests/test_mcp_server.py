"""Tests for the MCP server: backend client, configuration and markdown."""

import json

import httpx
import pytest

from cellar.mcp_server import tools
from cellar.mcp_server.client import CellarAPIError, CellarClient
from cellar.mcp_server.config import load_config
from cellar.mcp_server.markdown import render_added_wine, render_collection, render_wine_detail
from cellar.mcp_server.server import build_parser

YEAR = 2025


def _client(handler):
    return CellarClient("https://cellar.example.com/", "tok-123", transport=httpx.MockTransport(handler))


class TestConfig:
    """Tests for load_config."""

    def test_requires_url(self, monkeypatch):
        monkeypatch.delenv("CELLAR_API_URL", raising=False)
        with pytest.raises(ValueError, match="CELLAR_API_URL environment variable is required"):
            load_config()

    def test_token_required_for_stdio(self, monkeypatch):
        monkeypatch.setenv("CELLAR_API_URL", "https://cellar.example.com")
        monkeypatch.delenv("USER_AUTH_TOKEN", raising=False)
        with pytest.raises(ValueError, match="USER_AUTH_TOKEN"):
            load_config(require_token=True)
        assert load_config(require_token=False).user_auth_token is None

    def test_trailing_slash_dropped(self, monkeypatch):
        monkeypatch.setenv("CELLAR_API_URL", "https://cellar.example.com/")
        monkeypatch.setenv("USER_AUTH_TOKEN", "tok")
        config = load_config()
        assert config.api_url == "https://cellar.example.com"
        assert config.user_auth_token == "tok"


class TestCellarClient:
    """Tests for CellarClient."""

    @pytest.mark.anyio
    async def test_list_wines_posts_action(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"wines": [{"id": "w-1", "name": "Dôle"}]})

        wines = await _client(handler).get_wines()

        assert wines == [{"id": "w-1", "name": "Dôle"}]
        assert seen == {
            "url": "https://cellar.example.com/functions/v1/mcp-server-proxy",
            "auth": "Bearer tok-123",
            "body": {"action": "list_wines"},
        }

    @pytest.mark.anyio
    async def test_get_wine_attaches_notes(self):
        def handler(request):
            assert json.loads(request.content) == {"action": "get_wine", "params": {"wine_id": "w-1"}}
            return httpx.Response(200, json={"wine": {"id": "w-1"}, "tasting_notes": [{"rating": 4}]})

        wine = await _client(handler).get_wine("w-1")
        assert wine == {"id": "w-1", "tasting_notes": [{"rating": 4}]}

    @pytest.mark.anyio
    async def test_get_unknown_wine(self):
        wine = await _client(lambda r: httpx.Response(404, json={"error": "Wine not found"})).get_wine("x")
        assert wine is None

    @pytest.mark.anyio
    async def test_errors_carry_the_verb(self):
        client = _client(lambda r: httpx.Response(401, json={"error": "Unauthorized"}))
        with pytest.raises(CellarAPIError, match="Failed to fetch wines: Unauthorized"):
            await client.get_wines()

    @pytest.mark.anyio
    async def test_add_wine_without_result(self):
        client = _client(lambda r: httpx.Response(200, json={}))
        with pytest.raises(CellarAPIError, match="Failed to add wine: No wine returned"):
            await client.add_wine({"name": "x"})

    @pytest.mark.anyio
    async def test_add_wine_wraps_params(self):
        def handler(request):
            body = json.loads(request.content)
            assert body == {"action": "add_wine", "params": {"wine": {"name": "Humagne"}}}
            return httpx.Response(200, json={"wine": {"id": "new", "name": "Humagne", "quantity": 1}})

        assert (await _client(handler).add_wine({"name": "Humagne"}))["id"] == "new"


class TestRenderCollection:
    """Tests for the collection markdown."""

    def test_empty(self):
        assert render_collection([], YEAR) == "No wines in your cellar yet."

    def test_groups_in_order(self):
        wines = [
            {"name": "Young", "quantity": 1, "drink_window_start": 2030, "drink_window_end": 2040},
            {"name": "Plain", "quantity": 2},
            {"name": "Old", "quantity": 1, "drink_window_start": 2000, "drink_window_end": 2010},
            {"name": "Now", "vintage": 2019, "quantity": 3, "grapes": ["Gamay", "Pinot Noir"],
             "drink_window_start": 2022, "drink_window_end": 2028, "price": 24.5},
        ]
        text = render_collection(wines, YEAR)

        assert text.startswith("# Wine Collection\n\nTotal wines: 4\n\n")
        order = [
            text.index("## Ready to Drink"),
            text.index("## Past Peak (Drink Soon)"),
            text.index("## Age Further"),
            text.index("## No Drinking Window Set"),
        ]
        assert order == sorted(order)
        assert "### Now (2019)\n- Grapes: Gamay, Pinot Noir\n- Quantity: 3\n" in text
        assert "- Drinking window: 2022-2028\n- Price: CHF 24.50\n" in text

    def test_empty_groups_are_skipped(self):
        text = render_collection([{"name": "Plain", "quantity": 1}], YEAR)
        assert "## Ready to Drink" not in text
        assert "## No Drinking Window Set" in text

    def test_open_ended_window(self):
        text = render_collection([{"name": "x", "quantity": 1, "drink_from": 2020}], YEAR)
        assert "- Drinking window: 2020-indefinitely" in text


class TestRenderWineDetail:
    """Tests for the single-wine markdown."""

    def test_not_found(self):
        assert render_wine_detail(None, "w-9", YEAR) == "Wine with ID w-9 not found."

    def test_full_detail(self):
        wine = {
            "name": "Cornalin",
            "vintage": 2018,
            "grapes": ["Cornalin"],
            "quantity": 1,
            "bottle_size": 1500,
            "drink_window_start": 2027,
            "drink_window_end": None,
            "price": 42,
            "food_pairings": "Wild, Hartkäse",
            "tasting_notes": [{"tasted_at": "2025-02-14", "rating": 4, "notes": "Cherry."}],
        }
        text = render_wine_detail(wine, "w-1", YEAR)

        assert text.startswith("# Cornalin\n\n**Vintage:** 2018\n**Grapes:** Cornalin\n")
        assert "**Quantity:** 1 bottle\n" in text
        assert "**Bottle Size:** 1500ml\n" in text
        assert "**Drinking Window:** 2027 - indefinitely\n" in text
        assert "*Status: Age further (ready in 2 years)*\n" in text
        assert "**Price:** CHF 42.00\n" in text
        assert "## Food Pairings\n\nWild, Hartkäse\n\n" in text
        assert "### 2025-02-14 - ⭐⭐⭐⭐\n\nCherry.\n\n" in text

    def test_standard_bottle_and_plural(self):
        wine = {"name": "x", "quantity": 6, "bottle_size": 750,
                "drink_window_start": 2000, "drink_window_end": 2010}
        text = render_wine_detail(wine, "w-1", YEAR)
        assert "**Quantity:** 6 bottles" in text
        assert "Bottle Size" not in text
        assert "*Status: Past peak - drink soon!*" in text

    def test_ready(self):
        wine = {"name": "x", "quantity": 1, "drink_window_start": 2020, "drink_window_end": 2030}
        assert "*Status: Ready to drink*" in render_wine_detail(wine, "w-1", YEAR)


def test_added_wine_confirmation():
    text = render_added_wine(
        {"id": "new", "name": "Petite Arvine", "vintage": 2022, "quantity": 6,
         "grapes": ["Petite Arvine"], "drink_window_start": 2024, "drink_window_end": 2030,
         "price": 28, "bottle_size": 375}
    )
    assert text.startswith("Successfully added wine: Petite Arvine (2022)\n\n**Details:**\n- ID: new\n")
    assert "- Drinking window: 2024-2030\n" in text
    assert "- Price: CHF 28.00\n" in text
    assert "- Bottle size: 375ml\n" in text


class TestToolText:
    """Tests for the text producers behind the tools and resources."""

    @pytest.mark.anyio
    async def test_collection_text(self):
        client = _client(lambda r: httpx.Response(200, json={"wines": []}))
        assert await tools.collection_text(client) == "No wines in your cellar yet."

    @pytest.mark.anyio
    async def test_wine_detail_text_not_found(self):
        client = _client(lambda r: httpx.Response(404, json={"error": "Wine not found"}))
        assert await tools.wine_detail_text(client, "w-9") == "Wine with ID w-9 not found."

    @pytest.mark.anyio
    async def test_add_wine_text(self):
        client = _client(lambda r: httpx.Response(200, json={"wine": {"id": "n", "name": "Arvine", "quantity": 1}}))
        assert (await tools.add_wine_text(client, {"name": "Arvine"})).startswith(
            "Successfully added wine: Arvine"
        )


class TestToolErrors:
    """Tests for the messages tools report on failure."""

    @pytest.mark.anyio
    async def test_api_error_is_not_prefixed_twice(self):
        client = _client(lambda r: httpx.Response(400, json={"error": "winery not found"}))
        with pytest.raises(CellarAPIError) as info:
            await tools.add_wine_text(client, {"name": "Arvine"})

        error = tools._tool_error("add wine", info.value)
        assert str(error) == "Failed to add wine: winery not found"

    def test_other_errors_get_the_action(self):
        error = tools._tool_error("list wines", RuntimeError("boom"))
        assert str(error) == "Failed to list wines: boom"


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.transport == "stdio"
    args = build_parser().parse_args(["--transport", "http", "--port", "9000"])
    assert (args.transport, args.port) == ("http", 9000)
