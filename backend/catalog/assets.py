"""Static instrument catalog. Never mutated; matches copy it via build_assets()."""
from pydantic import BaseModel

from models.enums import AssetClass, Sector
from models.market import Asset


class AssetSpec(BaseModel):
    id: str
    name: str
    type: AssetClass
    base_volatility: float
    trend_bias: str
    price: float
    sectors: tuple[Sector, ...]

    model_config = {"frozen": True}


def _spec(id, name, type_, vol, bias, price, *sectors) -> AssetSpec:
    return AssetSpec(
        id=id, name=name, type=type_, base_volatility=vol,
        trend_bias=bias, price=price, sectors=sectors,
    )


S, C, E, B = AssetClass.STOCK, AssetClass.CRYPTO, AssetClass.ETF, AssetClass.BOND
TECH, FIN, ENERGY, CRYPTO, BONDS, GOLD = (
    Sector.TECHNOLOGY, Sector.FINANCE, Sector.ENERGY,
    Sector.CRYPTO, Sector.BONDS, Sector.GOLD,
)

ASSET_CATALOG: tuple[AssetSpec, ...] = (
    # Stocks
    _spec("reliance", "Reliance Ind.", S, 0.02, "UP", 29.50, ENERGY),
    _spec("tcs", "TCS", S, 0.015, "SIDEWAYS", 42.00, TECH),
    _spec("hdfc", "HDFC Bank", S, 0.018, "UP", 19.20, FIN),
    _spec("infy", "Infosys", S, 0.022, "DOWN", 16.80, TECH),
    _spec("icici", "ICICI Bank", S, 0.019, "UP", 11.50, FIN),
    _spec("tatamotors", "Tata Motors", S, 0.025, "UP", 8.40, ENERGY, FIN),
    _spec("sbi", "SBI", S, 0.02, "UP", 7.50, FIN),
    # Crypto
    _spec("doge", "Dogecoin", C, 0.15, "SIDEWAYS", 0.15, CRYPTO),
    _spec("shib", "Shiba Inu", C, 0.20, "UP", 0.00003, CRYPTO),
    _spec("pepe", "Pepe", C, 0.25, "DOWN", 0.000001, CRYPTO),
    _spec("bonk", "Bonk", C, 0.18, "UP", 0.000012, CRYPTO),
    _spec("floki", "Floki", C, 0.22, "UP", 0.00015, CRYPTO),
    _spec("wif", "WIF", C, 0.28, "UP", 2.50, CRYPTO),
    _spec("mog", "Mog Coin", C, 0.30, "SIDEWAYS", 0.000001, CRYPTO),
    # ETFs
    _spec("nifty-bees", "Nifty 50 ETF", E, 0.01, "UP", 2.60, FIN),
    _spec("gold-bees", "Gold ETF", E, 0.005, "SIDEWAYS", 0.62, GOLD),
    _spec("bank-bees", "Bank Nifty ETF", E, 0.012, "UP", 5.40, FIN),
    _spec("it-bees", "IT ETF", E, 0.015, "DOWN", 0.45, TECH),
    _spec("pharma-bees", "Pharma ETF", E, 0.014, "UP", 1.80, FIN),
    _spec("auto-bees", "Auto ETF", E, 0.018, "SIDEWAYS", 2.10, ENERGY),
    _spec("infra-bees", "Infra ETF", E, 0.016, "UP", 3.20, ENERGY),
    # Bonds
    _spec("us-treasury", "US Treasury 10Y", B, 0.002, "SIDEWAYS", 98.50, BONDS, FIN),
    _spec("corp-bond-aaa", "Global Corp Bond", B, 0.003, "UP", 105.00, BONDS, FIN),
    _spec("muni-bond", "Municipal Bond", B, 0.001, "SIDEWAYS", 101.20, BONDS),
    _spec("junk-bond", "High Yield Bond", B, 0.008, "DOWN", 88.50, BONDS, FIN),
    _spec("green-bond", "Green Energy Bond", B, 0.004, "UP", 102.50, BONDS, ENERGY),
    _spec("sov-gold-bond", "Sovereign Gold Bond", B, 0.003, "UP", 99.80, GOLD, BONDS),
    _spec("tips-bond", "Inflation Protected", B, 0.002, "SIDEWAYS", 100.10, BONDS),
)

# Sector sentiment is tracked per asset class; this routes one to the other.
SECTOR_TO_CLASSES: dict[Sector, tuple[AssetClass, ...]] = {
    TECH: (S,),
    FIN: (S, E, B),
    ENERGY: (S, E),
    CRYPTO: (C,),
    BONDS: (B,),
    GOLD: (E,),
}


def build_assets(catalog: tuple[AssetSpec, ...] = ASSET_CATALOG) -> list[Asset]:
    """Fresh live assets; no reference is shared with the catalog."""
    return [
        Asset(
            id=spec.id,
            name=spec.name,
            type=spec.type,
            base_volatility=spec.base_volatility,
            trend_bias=spec.trend_bias,
            sectors=list(spec.sectors),
            current_price=spec.price,
            history=[spec.price],
        )
        for spec in catalog
    ]
