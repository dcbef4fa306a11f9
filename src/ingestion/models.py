"""
Record types shared by the extractors, the merge step and the stored documents.

Stored documents are read by the game front-end, so every record serializes
to the camelCase keys it expects.
"""
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, List


REGIONS = ("Americas", "EMEA", "Pacific", "China")


@dataclass
class TransferEntry:
    """One tenure in a player's team history"""
    team: str
    start: str = ""
    end: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"team": self.team, "from": self.start, "to": self.end}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransferEntry":
        return cls(
            team=data.get("team", ""),
            start=data.get("from") or "",
            end=data.get("to"),
        )


@dataclass
class PlayerRecord:
    """Data class representing one rostered VCT player"""
    slug: str
    name: str
    country: str = ""
    team: str = ""
    region: str = ""
    is_igl: bool = False

    # Filled by the details pass or by an admin
    role: str = ""
    transfer_history: List[TransferEntry] = field(default_factory=list)
    manually_edited: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored camelCase document shape"""
        return {
            "slug": self.slug,
            "name": self.name,
            "country": self.country,
            "team": self.team,
            "region": self.region,
            "isIGL": self.is_igl,
            "role": self.role,
            "transferHistory": [entry.to_dict() for entry in self.transfer_history],
            "manuallyEdited": self.manually_edited,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerRecord":
        """Build a record from a stored document entry, tolerating missing fields"""
        return cls(
            slug=data.get("slug", ""),
            name=data.get("name", ""),
            country=data.get("country") or "",
            team=data.get("team") or "",
            region=data.get("region") or "",
            is_igl=bool(data.get("isIGL", False)),
            role=data.get("role") or "",
            transfer_history=[
                TransferEntry.from_dict(entry) for entry in data.get("transferHistory") or []
            ],
            manually_edited=bool(data.get("manuallyEdited", False)),
        )


@dataclass
class PlayerDetails:
    """Role and history scraped from a player's own page"""
    role: str = ""
    transfer_history: List[TransferEntry] = field(default_factory=list)


@dataclass
class EarningsRecord:
    """Prize money total for a player or an organization"""
    name: str
    earnings: int
    type: str
    country: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, excluding None values"""
        return {k: v for k, v in asdict(self).items() if v is not None}
