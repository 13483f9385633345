# storefront/product_service/main.py
from fastapi import FastAPI, HTTPException

app = FastAPI(title="Product Service (dev mock)")

# ceny jako string (bez float), status 1 = aktywny, 0 = wycofany
PRODUCTS = {
    1: {"id": 1, "name": "Keyboard", "price": "199.99", "status": 1, "stock_quantity": 25},
    2: {"id": 2, "name": "Mouse", "price": "49.50", "status": 1, "stock_quantity": 100},
    3: {"id": 3, "name": "Monitor", "price": "899.00", "status": 1, "stock_quantity": 0},
    4: {"id": 4, "name": "Webcam", "price": "75.00", "status": 0, "stock_quantity": 10},
}


@app.get("/products")
def list_products(active_only: bool = False):
    products = PRODUCTS.values()
    if active_only:
        products = [p for p in products if p["status"] == 1 and p["stock_quantity"] > 0]
    return list(products)


@app.get("/products/{product_id}")
def get_product(product_id: int):
    product = PRODUCTS.get(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return product
