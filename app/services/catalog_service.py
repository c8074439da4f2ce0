# app/services/catalog_service.py
from typing import List

from sqlalchemy.orm import Session

from app.data.models.product import ProductModel
from app.domain.errors import ProductNotFoundError
from app.repos.product_repo import ProductRepo


class CatalogService:
    """Read path of the storefront: active products with their variants."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def list_active_products(self) -> List[ProductModel]:
        return self.repo.list_active()

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product or not product.is_active:
            raise ProductNotFoundError(product_id)
        return product
