"""Result records returned by the medication tools."""

from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any

from rxnav_client import normalize_search_term


@dataclass
class ToolResult:
    """
    Common fields of every tool outcome.
    """
    search_term: str
    matched = True

    @property
    def normalized_term(self) -> str:
        return normalize_search_term(self.search_term)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = "ok" if self.matched else "no_match"
        data["normalized_term"] = self.normalized_term
        return data


@dataclass
class NoMatch(ToolResult):
    """
    Terminal outcome when the search term does not resolve to an RxCUI.
    """
    suggestions: List[str] = field(default_factory=list)
    matched = False


@dataclass
class LookupResult(ToolResult):
    """
    Brand & ingredient lookup for one RxCUI.
    """
    rxcui: str = ""
    ingredients: List[str] = field(default_factory=list)    # distinct
    brands: List[str] = field(default_factory=list)         # API order, capped
    formulations: List[str] = field(default_factory=list)   # SCD/SBD names, API order, capped


@dataclass
class AlternativeBrandsResult(ToolResult):
    """
    Other brands sharing the searched medication's active ingredient(s).
    """
    rxcui: str = ""
    ingredients: List[str] = field(default_factory=list)
    brands: List[str] = field(default_factory=list)         # searched brand excluded, capped


@dataclass
class SafetyResult(ToolResult):
    """
    Side-effect classes plus relation-derived safety buckets.
    """
    rxcui: str = ""
    ingredient: Optional[str] = None
    side_effects: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    interactions: List[str] = field(default_factory=list)
    contraindications: List[str] = field(default_factory=list)
