"""
Product schema (API contract). Kept in sync with the backend /products resource.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductBase(BaseModel):
    name: str = ""
    owner: str = ""
    position: str = ""
    description: str = ""


class ProductCreate(ProductBase):
    """Request body for creating a product. The backend assigns id and created_at."""
    pass


class ProductUpdate(BaseModel):
    """Request body for update."""
    name: str | None = None
    owner: str | None = None
    position: str | None = None
    description: str | None = None


class Product(ProductBase):
    """Response schema; matches the backend product record."""
    model_config = ConfigDict(from_attributes=True, extra="ignore", coerce_numbers_to_str=True)

    id: str
    created_at: str | None = None
    updated_at: str | None = None

    @field_validator("name", "owner", "position", "description", mode="before")
    @classmethod
    def none_as_blank(cls, v: object) -> object:
        return "" if v is None else v

    @classmethod
    def placeholder(cls, index: int) -> "Product":
        """Blank row shown while the collection is loading."""
        return cls(id=f"skeleton-{index}")


class ProductForm(ProductBase):
    """Editable fields of the product edit surface."""
    name: str = Field("", description="Name of the product")
    owner: str = Field("", description="Product owner")
    position: str = Field("", description="Position or role")
    description: str = Field("", description="Product description")

    @classmethod
    def from_product(cls, product: Product) -> "ProductForm":
        return cls(
            name=product.name,
            owner=product.owner,
            position=product.position,
            description=product.description,
        )

    def to_create(self) -> ProductCreate:
        return ProductCreate(**self.model_dump())

    def to_update(self) -> ProductUpdate:
        return ProductUpdate(**self.model_dump())
