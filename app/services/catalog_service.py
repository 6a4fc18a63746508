# app/services/catalog_service.py
import base64
import binascii
from typing import Any, Dict, Tuple

from sqlalchemy.orm import Session

from app.data.database import transaction
from app.data.models.product import ProductModel
from app.data.models.product_image import ProductImageModel
from app.domain.errors import NotFoundError, ValidationError
from app.domain.pricing import money
from app.domain.schemas import ProductCreate, ProductImageIn, ProductOut, ProductUpdate
from app.repos.product_repo import ProductRepo
from app.utils.pagination import normalize_paging, page_offset, total_pages
from app.utils.logging import get_logger

logger = get_logger(__name__)

IMAGE_URL_TEMPLATE = "/api/products/image/{image_id}"
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png"}
NULLABLE_FIELDS = ("size", "customization_details")
NORMALIZED_FIELDS = (
    "category",
    "size",
    "price",
    "has_versions",
    "price_fan",
    "price_player",
    "has_customization",
    "customization_details",
)


class CatalogService:
    """
    Produkty i ich obrazy. stock_quantity nie jest tu nigdy zmieniany,
    robi to tylko StockService.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepo(db)

    # =====================================================
    # PRODUCTS
    # =====================================================
    def create_product(self, payload: ProductCreate) -> ProductOut:
        data = payload.model_dump()
        with transaction(self.db):
            product = self.repo.add_product(ProductModel(**self._normalize(data)))
        logger.info(f"Product {product.id} '{product.name}' created")
        return ProductOut.model_validate(product)

    def list_products(self, category: str | None = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        p, size = normalize_paging(page, limit)
        rows, total = self.repo.list_active(category, page_offset(p, size), size)
        return {
            "items": [ProductOut.model_validate(r) for r in rows],
            "total": total,
            "page": p,
            "total_pages": total_pages(total, size),
        }

    def get_product(self, product_id: int) -> ProductOut:
        return ProductOut.model_validate(self._get(product_id))

    def related_products(self, product_id: int, limit: int = 4) -> list[ProductOut]:
        product = self._get(product_id)
        return [ProductOut.model_validate(p) for p in self.repo.related(product, limit)]

    def update_product(self, product_id: int, payload: ProductUpdate) -> ProductOut:
        #None dla pol wymaganych = brak zmiany
        changes = {
            k: v
            for k, v in payload.model_dump(exclude_unset=True).items()
            if v is not None or k in NULLABLE_FIELDS
        }
        with transaction(self.db):
            product = self._get(product_id)
            for field, value in changes.items():
                setattr(product, field, value)

            state = self._normalize({f: getattr(product, f) for f in NORMALIZED_FIELDS})
            for field, value in state.items():
                setattr(product, field, value)
            self.db.flush()
        logger.info(f"Product {product_id} updated: {sorted(changes)}")
        return ProductOut.model_validate(product)

    def delete_product(self, product_id: int) -> None:
        """Soft delete, pozycje koszykow i historia zamowien zostaja."""
        with transaction(self.db):
            product = self._get(product_id, active_only=False)
            product.is_active = False
        logger.info(f"Product {product_id} deactivated")

    # =====================================================
    # IMAGES
    # =====================================================
    def add_image(self, product_id: int, payload: ProductImageIn) -> Dict[str, Any]:
        """
        Pierwszy obraz produktu zostaje glownym. Binarka dostaje URL
        wskazujacy na endpoint serwujacy obraz.
        """
        raw, content_type = self._decode_image(payload)

        with transaction(self.db):
            #blokada produktu serializuje rownolegle dodawanie obrazow
            product = self.repo.get_product_for_update(product_id)
            if not product:
                raise NotFoundError("Produkt nie istnieje")
            is_first = self.repo.count_images(product.id) == 0
            image = self.repo.add_image(
                ProductImageModel(
                    product=product,
                    url=payload.url or "placeholder",
                    data=raw,
                    content_type=content_type,
                    is_primary=is_first,
                    position=self.repo.next_image_position(product.id),
                )
            )
            if raw is not None:
                image.url = IMAGE_URL_TEMPLATE.format(image_id=image.id)
                self.db.flush()

        logger.info(f"Image {image.id} added to product {product_id} (primary={image.is_primary})")
        return self._serialize_image(image)

    def get_image_payload(self, image_id: int) -> Tuple[bytes, str]:
        image = self.repo.get_image(image_id, with_data=True)
        if not image or not image.data:
            raise NotFoundError("Obraz nie istnieje")
        return image.data, image.content_type or "application/octet-stream"

    def remove_image(self, product_id: int, image_id: int) -> None:
        """Po usunieciu obrazu glownego glownym zostaje pierwszy pozostaly."""
        promoted = None
        with transaction(self.db):
            image = self.repo.get_product_image(product_id, image_id)
            if not image:
                raise NotFoundError("Obraz nie istnieje")
            product = image.product
            was_primary = bool(image.is_primary)
            self.repo.delete_image(image)

            if was_primary:
                promoted = self.repo.first_image(product_id)
                if promoted:
                    promoted.is_primary = True
                    self.db.flush()
            #kolekcja images zaladowana wczesniej w tej sesji bylaby nieaktualna
            self.db.expire(product, ["images"])

        logger.info(f"Image {image_id} removed from product {product_id}")
        if promoted:
            logger.info(f"Image {promoted.id} is now primary for product {product_id}")

    def set_primary_image(self, product_id: int, image_id: int) -> Dict[str, Any]:
        """
        Reset wszystkich + ustawienie jednego w jednej transakcji: nikt nie
        zobaczy stanu z zerem ani z dwoma obrazami glownymi. Obraz spoza
        produktu -> 404 i nic sie nie zmienia.
        """
        with transaction(self.db):
            image = self.repo.get_product_image(product_id, image_id)
            if not image:
                raise NotFoundError("Obraz nie istnieje")
            self.repo.reset_primary(product_id)
            image.is_primary = True
            self.db.flush()
        logger.info(f"Image {image_id} is now primary for product {product_id}")
        return self._serialize_image(image)

    def primary_image_url(self, product_id: int) -> str | None:
        return self.repo.primary_image_url(product_id)

    # =====================================================
    # HELPERS
    # =====================================================
    def _get(self, product_id: int, active_only: bool = False) -> ProductModel:
        product = self.repo.get_active_product(product_id) if active_only else self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Produkt nie istnieje")
        return product

    @staticmethod
    def _normalize(data: Dict[str, Any]) -> Dict[str, Any]:
        out = dict(data)
        if out.get("category"):
            out["category"] = out["category"].strip().upper()
        if "size" in out and out["size"] is not None:
            out["size"] = getattr(out["size"], "value", out["size"])
        if "price" in out and out["price"] is not None:
            out["price"] = money(out["price"])

        #ceny wersji tylko gdy produkt ma wersje
        if out.get("has_versions"):
            out["price_fan"] = money(out.get("price_fan"))
            out["price_player"] = money(out.get("price_player"))
        else:
            out["price_fan"] = money(0)
            out["price_player"] = money(0)

        if not out.get("has_customization"):
            out["customization_details"] = None
        return out

    @staticmethod
    def _decode_image(payload: ProductImageIn) -> Tuple[bytes | None, str | None]:
        if payload.data_base64:
            content_type = (payload.content_type or "").lower()
            if content_type not in ALLOWED_IMAGE_TYPES:
                raise ValidationError("Dozwolone sa tylko obrazy .png, .jpg i .jpeg")
            try:
                return base64.b64decode(payload.data_base64, validate=True), content_type
            except (binascii.Error, ValueError):
                raise ValidationError("Nieprawidlowe dane obrazu (base64)")
        if not payload.url:
            raise ValidationError("Wymagany url albo data_base64")
        return None, payload.content_type

    @staticmethod
    def _serialize_image(image: ProductImageModel) -> Dict[str, Any]:
        return {
            "id": image.id,
            "url": image.url,
            "content_type": image.content_type,
            "is_primary": bool(image.is_primary),
            "position": image.position,
        }
