# product recommendations through Google Gemini
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from google import genai
from pydantic import TypeAdapter

from storehub.config import DEFAULT_ASSISTANT_MODEL
from storehub.db.models import Product
from storehub.errors import AssistantError
from storehub.utils.logger import get_logger

_logger = get_logger(__name__)

PROMPT_TEMPLATE = (
    "You are the StoreHub assistant. Based on the products: {context}, "
    'answer the customer\'s question: "{query}". '
    "Recommend the best products in a friendly and professional way."
)


@dataclass(frozen=True)
class ProductSummary:
    """The only product fields the assistant ever sees."""

    id: str
    name: str
    price: float
    category: str

    @classmethod
    def from_product(cls, product: Product) -> "ProductSummary":
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            category=product.category,
        )


_summaries_adapter = TypeAdapter(List[ProductSummary])


class AssistantService:
    """
    A new client is built for every call so a rotated API key is picked up.
    Errors propagate; AppState.ask_assistant turns them into a chat entry.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_ASSISTANT_MODEL,
        client_factory: Callable[..., genai.Client] = genai.Client,
    ):
        self.api_key = api_key
        self.model = model
        self._client_factory = client_factory

    def build_prompt(self, query: str, products: Sequence[ProductSummary]) -> str:
        context = _summaries_adapter.dump_json(list(products)).decode("utf-8")
        return PROMPT_TEMPLATE.format(context=context, query=query)

    async def get_product_recommendations(
        self, query: str, products: Sequence[ProductSummary]
    ) -> str:
        if not self.api_key:
            raise AssistantError("No API key configured for the assistant.")
        client = self._client_factory(api_key=self.api_key)
        _logger.debug(f"Asking {self.model} about {len(products)} products.")
        response = await client.aio.models.generate_content(
            model=self.model, contents=self.build_prompt(query, products)
        )
        return response.text or ""
