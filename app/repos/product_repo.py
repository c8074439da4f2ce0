# app/repos/product_repo.py
from typing import Dict, Iterable, List

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session, selectinload

from app.data.models.product import ProductModel, ProductVariantModel


def _floored(column, quantity: int):
    #stock - quantity, never below zero, evaluated by the database in the same statement
    return case((column > quantity, column - quantity), else_=0)


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_active(self) -> List[ProductModel]:
        stmt = (
            select(ProductModel)
            .options(selectinload(ProductModel.variants))
            .where(ProductModel.is_active.is_(True))
            .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_products(self, product_ids: Iterable[int]) -> Dict[int, ProductModel]:
        ids = set(product_ids)
        if not ids:
            return {}
        rows = self.db.execute(select(ProductModel).where(ProductModel.id.in_(ids))).scalars().all()
        return {p.id: p for p in rows}

    def count(self) -> int:
        return self.db.execute(select(func.count(ProductModel.id))).scalar_one()

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def replace_variants(self, product: ProductModel, variants: List[ProductVariantModel]) -> None:
        #no partial variant updates: drop the old set, insert the new one
        product.variants.clear()
        self.db.flush()
        product.variants.extend(variants)
        self.db.flush()

    def decrement_stock(self, product_id: int, quantity: int) -> int:
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock=_floored(ProductModel.stock, quantity))
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def decrement_variant_stock(self, product_id: int, type_: str, value: str, quantity: int) -> int:
        result = self.db.execute(
            update(ProductVariantModel)
            .where(
                ProductVariantModel.product_id == product_id,
                ProductVariantModel.type == type_,
                ProductVariantModel.value == value,
            )
            .values(stock=_floored(ProductVariantModel.stock, quantity))
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
