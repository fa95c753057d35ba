from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

CSV_DELIMITER = ";"

# Column names are part of the import format expected downstream; do not translate.
CSV_HEADERS: Tuple[str, ...] = (
    "id",
    "nome",
    "descricao",
    "preco",
    "estoque",
    "categoria",
    "sku",
    "tamanhos",
    "cores",
    "sabores",
    "estoque_variantes",
    "imagem",
)


@dataclass(frozen=True)
class CatalogRow:
    """One CSV line. Only name, price, sku and image are ever filled by the crawler."""

    sku: str
    name: str = ""
    price: str = ""
    image: str = ""
    id: str = ""
    description: str = ""
    stock: str = ""
    category: str = ""
    sizes: str = ""
    colors: str = ""
    flavors: str = ""
    variant_stock: str = ""

    def values(self) -> List[str]:
        return [
            self.id,
            self.name,
            self.description,
            self.price,
            self.stock,
            self.category,
            self.sku,
            self.sizes,
            self.colors,
            self.flavors,
            self.variant_stock,
            self.image,
        ]
