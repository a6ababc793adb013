"""Static product catalogue — the read-only collaborator the cart prices from.

The storefront does not own product data. Carts copy a product's price,
name, SKU and image at the moment it is added, so later catalogue edits
never reach an existing cart line or a placed order.
"""

from pydantic import BaseModel, Field


class Product(BaseModel):
    id: str
    name: str
    price: float = Field(ge=0)
    original_price: float | None = Field(default=None, ge=0)
    category: str
    in_stock: bool = True
    image: str = ""
    sku: str | None = None

    model_config = {"frozen": True}


PRODUCTS: tuple[Product, ...] = (
    Product(
        id="1",
        name="Amanat Shah Poplin Shirt",
        price=29.99,
        original_price=34.99,
        category="man-shirts",
        image="/product/Amanat Shah Poplin-001.jpg",
        sku="AS-POPLIN-001",
    ),
    Product(
        id="2",
        name="Amanat Shah Voile Salwar Kameez",
        price=59.99,
        category="women-salwar-kameez",
        image="/product/Amanat Shah Voile-001.jpg",
        sku="AS-VOILE-002",
    ),
    Product(
        id="3",
        name="Premium Cotton Salwar Kameez",
        price=49.99,
        original_price=64.99,
        category="women-salwar-kameez",
        image="/product/Ashy Purple Digital Print Premium Cotton Salwar Kameez-001.jpg",
        sku="PC-SALWAR-003",
    ),
    Product(
        id="4",
        name="Classic Solid Lungi",
        price=25.99,
        category="man-lungi",
        image="/product/Brown Color Classic Solid Lungi - Bikkhato _ MIAH-001.jpg",
        sku="CS-LUNGI-004",
    ),
    Product(
        id="5",
        name="Digital Print Salwar Kameez",
        price=54.99,
        category="women-print",
        image="/product/Burnt Coral Digital Print Premium Cotton Salwar Kameez-001.jpg",
        sku="DP-SALWAR-005",
    ),
    Product(
        id="6",
        name="Cargo Joggers",
        price=35.99,
        category="man-joggers",
        image="/product/Grey Cargo Joggers-001.jpg",
        sku="CG-JOGGER-006",
    ),
    Product(
        id="7",
        name="Premium Cotton Salwar Kameez",
        price=45.99,
        category="women-salwar-kameez",
        image="/product/Heather Gray Premium Cotton Salwar Kameez Digital Print-001.jpg",
        sku="PC-SALWAR-007",
    ),
    Product(
        id="8",
        name="Stylish Print Lungi",
        price=32.99,
        category="man-print-batik",
        image="/product/Men's Stylish Print & Batik Lungi - Modhumoti _ MIAH-001.jpg",
        sku="SP-LUNGI-008",
    ),
    Product(
        id="9",
        name="Cargo Joggers",
        price=37.99,
        category="man-cargo-joggers",
        image="/product/Navy Blue Cargo Joggers-001.jpg",
        sku="CG-JOGGER-009",
    ),
    Product(
        id="10",
        name="Slim Fit Jeans",
        price=42.99,
        category="man-jeans",
        image="/product/Slim Fit Black Jeans-001.jpg",
        sku="SF-JEANS-010",
    ),
    Product(
        id="11",
        name="Leather Messenger Bag",
        price=120.0,
        category="accessories-bags",
        in_stock=False,
        image="/product/Product Image-009.jpg",
        sku="LM-BAG-011",
    ),
)

_BY_ID = {product.id: product for product in PRODUCTS}


def get_product(product_id) -> Product | None:
    return _BY_ID.get(str(product_id))


def products_in_category(category: str) -> list[Product]:
    if category == "all":
        return list(PRODUCTS)
    return [product for product in PRODUCTS if product.category == category]
