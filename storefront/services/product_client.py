# storefront/services/product_client.py
from dataclasses import dataclass

import requests

from storefront.domain.errors import CollaboratorUnavailable, ProductUnavailable
from storefront.domain.money import Money
from storefront.utils.retry import http_retry
from storefront.utils.settings import PRODUCT_SERVICE_URL, PRODUCT_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# status produktu w katalogu: 1 = aktywny
ACTIVE_PRODUCT_STATUS = 1


@dataclass(frozen=True)
class ProductInfo:
    product_id: int
    price: Money
    available: bool
    name: str | None = None
    # None = katalog nie sledzi stanu magazynu
    stock_quantity: int | None = None

    def covers(self, quantity: int) -> bool:
        if not self.available:
            return False
        return self.stock_quantity is None or self.stock_quantity >= quantity


class ProductClient:
    """
    Klient product-service (cena + dostepnosc).
    Ponawiany jest tylko GET przy bledach transportu, po wyczerpaniu prob
    albo timeoucie -> CollaboratorUnavailable.
    """

    def __init__(self, base_url: str | None = None, timeout: float = PRODUCT_TIMEOUT_SECONDS):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def fetch_product(self, product_id: int) -> dict | None:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"ProductClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()

    def lookup(self, product_id: int) -> ProductInfo:
        try:
            pdata = self.fetch_product(product_id)
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.warning("product_service_unreachable", product_id=product_id, error=str(e))
            raise CollaboratorUnavailable(
                "Product service did not respond in time", product_id=product_id
            ) from e
        except requests.RequestException as e:
            logger.error("product_service_error", product_id=product_id, error=str(e))
            raise CollaboratorUnavailable("Product service failed", product_id=product_id) from e

        if pdata is None:
            raise ProductUnavailable(f"Product {product_id} does not exist", product_id=product_id)

        stock = pdata.get("stock_quantity")
        info = ProductInfo(
            product_id=product_id,
            price=Money.from_decimal(pdata["price"]),
            available=(
                pdata.get("status", ACTIVE_PRODUCT_STATUS) == ACTIVE_PRODUCT_STATUS
                and (stock is None or stock > 0)
            ),
            name=pdata.get("name"),
            stock_quantity=int(stock) if stock is not None else None,
        )
        return info

    def require_available(self, product_id: int, quantity: int = 1) -> ProductInfo:
        info = self.lookup(product_id)
        if not info.available:
            raise ProductUnavailable(f"Product {product_id} is out of stock or withdrawn", product_id=product_id)
        check_stock(info, quantity)
        return info


def check_stock(info: ProductInfo, quantity: int) -> None:
    if not info.covers(quantity):
        raise ProductUnavailable(
            f"Only {info.stock_quantity} of product {info.product_id} left in stock",
            product_id=info.product_id,
            requested=quantity,
            in_stock=info.stock_quantity,
        )
