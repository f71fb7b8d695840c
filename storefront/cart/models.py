from typing import Optional, Tuple
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CartItem(BaseModel):
    """
    Ligne de panier. Montants en paise (entiers).
    Les anciens paniers sérialisés en camelCase (productId, price, stock_quantity) sont relus tels quels.
    """
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    product_id: str = Field(min_length=1, validation_alias=AliasChoices("product_id", "productId"))
    name: str = ""
    unit_price: int = Field(ge=0, validation_alias=AliasChoices("unit_price", "price"))
    color: str = ""
    size: str = ""
    quantity: int = Field(default=1, ge=1)
    image: Optional[str] = None
    stock_limit: Optional[int] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("stock_limit", "stock_quantity", "stockLimit"),
    )

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.product_id, self.color, self.size)

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity
