from abc import ABC, abstractmethod
from typing import Optional
from lezhin_dl.data.models import Product

class BaseParser(ABC):
    @abstractmethod
    def parse_product(self, json_text: str, expired: bool = False) -> Product:
        pass

    @abstractmethod
    def count_cuts(self, html_source: str) -> int:
        pass

    @abstractmethod
    def is_verification_page(self, current_url: str, html_source: Optional[str]) -> bool:
        pass
