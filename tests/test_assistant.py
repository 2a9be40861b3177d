import json
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock

from fakes import make_product

from storehub.errors import AssistantError
from storehub.services.assistant import AssistantService, ProductSummary


def fake_client_factory(text):
    generate = AsyncMock(return_value=SimpleNamespace(text=text))
    created = []

    def factory(api_key=None):
        created.append(api_key)
        return SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate)))

    return factory, generate, created


class AssistantServiceTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.summaries = [
            ProductSummary.from_product(make_product("p1", price=49.90)),
            ProductSummary.from_product(make_product("p2", "Discord Nitro", "discord", 10.0)),
        ]

    async def test_sends_projection_and_returns_text(self):
        factory, generate, created = fake_client_factory("Buy the Nitro.")
        service = AssistantService("key-1", "test-model", client_factory=factory)

        text = await service.get_product_recommendations("cheap?", self.summaries)
        self.assertEqual(text, "Buy the Nitro.")
        self.assertEqual(created, ["key-1"])

        kwargs = generate.await_args.kwargs
        self.assertEqual(kwargs["model"], "test-model")
        self.assertIn('"cheap?"', kwargs["contents"])
        self.assertIn('"name":"Discord Nitro"', kwargs["contents"])

    async def test_new_client_per_call(self):
        factory, _, created = fake_client_factory("ok")
        service = AssistantService("key", client_factory=factory)
        await service.get_product_recommendations("a", [])
        await service.get_product_recommendations("b", [])
        self.assertEqual(len(created), 2)

    async def test_none_text_becomes_empty_string(self):
        factory, _, _ = fake_client_factory(None)
        service = AssistantService("key", client_factory=factory)
        self.assertEqual(await service.get_product_recommendations("a", []), "")

    async def test_missing_key_raises(self):
        factory, generate, _ = fake_client_factory("x")
        service = AssistantService(None, client_factory=factory)
        with self.assertRaises(AssistantError):
            await service.get_product_recommendations("a", self.summaries)
        generate.assert_not_awaited()

    def test_prompt_only_carries_summary_fields(self):
        service = AssistantService("key")
        prompt = service.build_prompt("q", self.summaries)
        context = prompt.split("products: ", 1)[1].split(", answer", 1)[0]
        self.assertEqual(
            json.loads(context)[0],
            {"id": "p1", "name": "Valorant Account", "price": 49.9, "category": "accounts"},
        )
