"""Tests for domain entities."""

from datetime import datetime, timezone

from storefront.domain import Category, PriceRange, Product, ProductImage, User, Variant


def make_product(**overrides) -> Product:
    """Create a test product."""
    data = {
        "id": "prod_1",
        "title": "Pixel Phone",
        "description": "Android phone with a bright display",
        "sub_category": "sub_1",
        "category": "cat_1",
        "variants": [Variant(ram="8GB", price=100, quantity=5)],
    }
    data.update(overrides)
    return Product(**data)


class TestProduct:
    """Tests for Product entity."""

    def test_total_stock_single_variant(self) -> None:
        """Total stock of a single variant is its quantity."""
        product = make_product()
        assert product.total_stock == 5

    def test_total_stock_sums_variants(self) -> None:
        """Total stock sums every variant."""
        product = make_product(
            variants=[
                Variant(ram="8GB", price=100, quantity=5),
                Variant(ram="16GB", price=150, quantity=3),
            ]
        )
        assert product.total_stock == 8

    def test_price_range_single_variant(self) -> None:
        """A single variant gives a degenerate range."""
        product = make_product()
        assert product.price_range == PriceRange(min=100, max=100)

    def test_price_range_multiple_variants(self) -> None:
        """Price range spans the cheapest and priciest variants."""
        product = make_product(
            variants=[
                Variant(ram="16GB", price=150, quantity=3),
                Variant(ram="8GB", price=99.5, quantity=5),
            ]
        )
        assert product.price_range == PriceRange(min=99.5, max=150)

    def test_price_range_without_variants(self) -> None:
        """No variants gives a zero range."""
        product = make_product(variants=[])
        assert product.price_range == PriceRange(min=0, max=0)

    def test_document_round_trip_keeps_nested_values(self) -> None:
        """Documents carry variants, images and rating."""
        product = make_product(
            images=[ProductImage(storage_id="img_1", url="https://cdn/img_1.png", alt_text="front")]
        )
        document = product.to_document()

        assert document["variants"] == [{"ram": "8GB", "price": 100, "quantity": 5}]
        assert document["images"][0]["storage_id"] == "img_1"
        assert document["rating"] == {"average": 0.0, "count": 0}

        restored = Product.from_document(document)
        assert restored == product
        assert restored.images[0].alt_text == "front"

    def test_from_document_defaults(self) -> None:
        """Missing optional fields fall back to defaults."""
        product = Product.from_document(
            {
                "id": "prod_2",
                "title": "Kettle",
                "description": "Boils water quickly",
                "sub_category": "sub_1",
                "category": "cat_1",
            }
        )
        assert product.variants == []
        assert product.images == []
        assert product.is_active is True
        assert product.rating.count == 0


class TestEntityIdentity:
    """Tests for entity identity semantics."""

    def test_equal_by_id(self) -> None:
        """Entities with the same id are equal regardless of fields."""
        a = Category(id="cat_1", name="Phones")
        b = Category(id="cat_1", name="Renamed")
        assert a == b
        assert hash(a) == hash(b)

    def test_different_types_not_equal(self) -> None:
        """Entities of different types are never equal."""
        category = Category(id="x", name="Phones")
        user = User(id="x", email="a@example.com")
        assert category != user

    def test_timestamps_preserved_from_document(self) -> None:
        """Stored timestamps are kept."""
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        category = Category.from_document(
            {"id": "cat_1", "name": "Phones", "created_at": created}
        )
        assert category.created_at == created
        assert category.updated_at == created


class TestUser:
    """Tests for User entity."""

    def test_wishlist_membership(self) -> None:
        """Wishlist membership checks product ids."""
        user = User(id="u1", email="a@example.com", wishlist=["p1", "p2"])
        assert user.has_in_wishlist("p1")
        assert not user.has_in_wishlist("p3")

    def test_from_document_copies_wishlist(self) -> None:
        """The wishlist list is not shared with the source document."""
        document = {"id": "u1", "email": "a@example.com", "wishlist": ["p1"]}
        user = User.from_document(document)
        user.wishlist.append("p2")
        assert document["wishlist"] == ["p1"]
