# ============================================================================
# src/rx_matching/core/context/catalog_product.py
# ============================================================================
"""
Catalog Product Record

Read-only view of one purchasable catalog item. Metadata fields are
optional because catalogs fill them unevenly; enrichment resolves
missing values separately (see rx_matching.enrichers).
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


# Accepted spellings for each field when loading from JSON / database rows
_FIELD_ALIASES = {
    'id': ('id', '_id', 'product_id', 'productId'),
    'name': ('name', 'product_name', 'productName'),
    'price': ('price',),
    'unit': ('unit',),
    'stock_quantity': ('stock_quantity', 'stockQuantity'),
    'in_stock': ('in_stock', 'inStock'),
    'requires_prescription': ('requires_prescription', 'requiresPrescription', 'is_prescription', 'isPrescription'),
    'therapeutic_group': ('therapeutic_group', 'group_therapeutic', 'groupTherapeutic'),
    'active_ingredient': ('active_ingredient', 'activeIngredient'),
    'indication': ('indication',),
    'contraindication': ('contraindication',),
    'description': ('description',),
    'brand': ('brand',),
    'is_hot': ('is_hot', 'isHot'),
    'is_new': ('is_new', 'isNewProduct', 'is_new_product'),
}


def _pick(data: Dict[str, Any], field_name: str, default: Any = None) -> Any:
    for key in _FIELD_ALIASES[field_name]:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class CatalogProduct:
    """
    One catalog item.

    ``in_stock`` is the catalog's own flag; ``stock_quantity`` drives the
    low-stock escalation and the ranking bonus.
    """
    id: str
    name: str
    price: float = 0.0
    unit: str = ""
    stock_quantity: int = 0
    in_stock: bool = True
    requires_prescription: bool = False
    therapeutic_group: Optional[str] = None
    active_ingredient: Optional[str] = None
    indication: Optional[str] = None
    contraindication: Optional[str] = None
    description: Optional[str] = None
    brand: Optional[str] = None
    is_hot: bool = False
    is_new: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogProduct":
        """
        Build a product from a JSON object or database row mapping.

        Accepts snake_case and camelCase keys. When ``in_stock`` is absent
        it is derived from ``stock_quantity``.
        """
        product_id = _pick(data, 'id')
        name = _pick(data, 'name')
        if product_id is None or not name:
            raise ValueError(f"Catalog product needs an id and a name: {data!r}")

        stock_quantity = int(_pick(data, 'stock_quantity', 0) or 0)
        in_stock = _pick(data, 'in_stock')
        if in_stock is None:
            in_stock = stock_quantity > 0

        return cls(
            id=str(product_id),
            name=str(name),
            price=float(_pick(data, 'price', 0.0) or 0.0),
            unit=str(_pick(data, 'unit', '') or ''),
            stock_quantity=stock_quantity,
            in_stock=bool(in_stock),
            requires_prescription=bool(_pick(data, 'requires_prescription', False)),
            therapeutic_group=_pick(data, 'therapeutic_group'),
            active_ingredient=_pick(data, 'active_ingredient'),
            indication=_pick(data, 'indication'),
            contraindication=_pick(data, 'contraindication'),
            description=_pick(data, 'description'),
            brand=_pick(data, 'brand'),
            is_hot=bool(_pick(data, 'is_hot', False)),
            is_new=bool(_pick(data, 'is_new', False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
