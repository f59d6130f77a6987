"""Core data models for the volatility scanner."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True)
class PriceSample:
    """A single observed price."""
    price: float
    observed_at: datetime


@dataclass
class SymbolState:
    """Rolling sample log and latest 24h turnover for one symbol."""
    samples: List[PriceSample] = field(default_factory=list)
    latest_volume: float = 0.0


@dataclass(frozen=True)
class VolatilityScore:
    """Volatility score of a symbol over the trailing window."""
    symbol: str
    score: float


class TickerEntry(BaseModel):
    """One instrument row from the exchange ticker snapshot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore", allow_inf_nan=False)

    symbol: str = Field(description="Instrument symbol, e.g. BTCUSDT")
    last_price: float = Field(alias="lastPrice", description="Last traded price")
    turnover_24h: float = Field(alias="turnover24h", description="24h turnover in quote currency")
    funding_rate: float = Field(default=0.0, alias="fundingRate", description="Current funding rate")

    @field_validator("funding_rate", mode="before")
    @classmethod
    def _blank_funding_rate(cls, v: Any) -> Any:
        # Dated futures report an empty string
        if v is None or v == "":
            return 0.0
        return v


class TickerEnvelope(BaseModel):
    """Outer shape of the tickers response; rows are validated separately."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    ret_code: int = Field(default=0, alias="retCode")
    ret_msg: str = Field(default="", alias="retMsg")
    result: Dict[str, Any]

    @field_validator("result")
    @classmethod
    def _has_list(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(v.get("list"), list):
            raise ValueError("result.list missing or not a list")
        return v


@dataclass(frozen=True)
class TickerSnapshot:
    """Point-in-time tickers for every accepted symbol."""
    entries: Dict[str, TickerEntry]
    fetched_at: datetime

    def get(self, symbol: str) -> Optional[TickerEntry]:
        return self.entries.get(symbol)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class PerformerSelection:
    """Rank-1 symbol of a minute, or no winner when symbol is None."""
    symbol: Optional[str]
    score: float = 0.0
    moves: int = 0
    volume: float = 0.0

    @property
    def has_winner(self) -> bool:
        return self.symbol is not None


class PerformerResult(BaseModel):
    """Finalized per-minute result handed to consumers."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    symbol: Optional[str] = Field(default=None, description="Winning symbol")
    moves: int = Field(default=0, description="Volatility score scaled by 100")
    has_error: bool = Field(default=False, alias="hasError", description="Any fetch failed this minute")
    turnover: float = Field(default=0.0, description="24h turnover in millions")
    funding_rate: float = Field(default=0.0, alias="fundingRate", description="Funding rate in percent")

    def to_payload(self) -> Dict[str, Any]:
        """Event payload published downstream."""
        return {
            "symbol": self.symbol,
            "moves": self.moves,
            "turnover": self.turnover,
            "fundingRate": self.funding_rate,
        }
