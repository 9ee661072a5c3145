"""Closed value sets stored as plain strings in the database."""

from enum import Enum


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Category(str, Enum):
    ELECTRONIQUE = "Électronique"
    MODE = "Mode"
    MAISON_JARDIN = "Maison & Jardin"
    AUTOMOBILE = "Automobile"
    SANTE_BEAUTE = "Santé & Beauté"
    SPORTS_LOISIRS = "Sports & Loisirs"
    INDUSTRIE_BTP = "Industrie & BTP"


class LeadStatus(str, Enum):
    NEW = "nouveau"
    CONTACTED = "contacte"
    INTERESTED = "interesse"
    CONVERTED = "converti"
    LOST = "perdu"


TERMINAL_STATUSES = (LeadStatus.CONVERTED, LeadStatus.LOST)


class LeadSource(str, Enum):
    WEBSITE = "website"
    WHATSAPP = "whatsapp"
    DIRECT = "direct"


class StockStatus(str, Enum):
    OUT_OF_STOCK = "out_of_stock"
    LOW_STOCK = "low_stock"
    IN_STOCK = "in_stock"


LOW_STOCK_THRESHOLD = 5


def stock_status(stock: int) -> StockStatus:
    """Classify a stock count: 0 is out, 1 to 5 is low, above is in stock."""
    if stock <= 0:
        return StockStatus.OUT_OF_STOCK
    if stock <= LOW_STOCK_THRESHOLD:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK
