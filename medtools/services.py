"""
Service layer for the RxNorm medication tools.
Wraps the RxNav API client and walks the concept graph for each tool.
"""
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Any, Optional, List, Iterable, Union

from django.conf import settings

from rxnav_client import RxNavAPI, normalize_search_term
from .types import NoMatch, LookupResult, AlternativeBrandsResult, SafetyResult


DEFAULTS = {
    "RXNAV_BASE_URL": RxNavAPI.BASE_URL,
    "RXNAV_TIMEOUT": RxNavAPI.DEFAULT_TIMEOUT,
    "LOOKUP_BRAND_LIMIT": 25,
    "LOOKUP_FORMULATION_LIMIT": 12,
    "ALTERNATIVE_BRAND_LIMIT": 60,
    "ALTERNATIVE_BRAND_WORKERS": 1,
}

# Map rela -> which safety bucket it fills
SAFETY_RELATIONS = {
    "interacts_with": "interactions",
    "contraindicated_with": "contraindications",
    "has_warning": "warnings",
    "has_precaution": "warnings",
}

FORMULATION_TTYS = ("SCD", "SBD")

TOOL_ALIASES = {
    "sideeffects": "safety",
    "side_effects": "safety",
}


def medtools_setting(name: str) -> Any:
    """Read one key of settings.MEDTOOLS, falling back to DEFAULTS."""
    return getattr(settings, "MEDTOOLS", {}).get(name, DEFAULTS[name])


def unique(names: Iterable[str]) -> List[str]:
    """Drop empty and repeated names, keeping first-seen order."""
    seen = set()
    result = []
    for name in names:
        if not isinstance(name, str):
            continue
        name = name.strip()
        if not name or name in seen:
            continue
        seen.add(name)
        result.append(name)
    return result


class MedToolsService:
    """
    Resolves a search term into the result set of one of the three tools.

    One instance per request: it holds no state beyond its API client and limits.
    """

    def __init__(self, api: Optional[RxNavAPI] = None):
        self.api = api or RxNavAPI(
            timeout=medtools_setting("RXNAV_TIMEOUT"),
            base_url=medtools_setting("RXNAV_BASE_URL"),
        )
        self.brand_limit = medtools_setting("LOOKUP_BRAND_LIMIT")
        self.formulation_limit = medtools_setting("LOOKUP_FORMULATION_LIMIT")
        self.alternative_limit = medtools_setting("ALTERNATIVE_BRAND_LIMIT")
        self.alternative_workers = max(1, int(medtools_setting("ALTERNATIVE_BRAND_WORKERS")))

    def _resolve(self, search_term: str) -> Union[str, NoMatch]:
        """
        Resolve the search term to an RxCUI.

        Returns:
            The RxCUI, or a NoMatch carrying RxNorm spelling suggestions
        """
        rxcui = self.api.lookup_rxcui(search_term)
        if rxcui:
            return rxcui

        suggestions = self.api.spelling_suggestions(search_term)
        print(
            f"No RxCUI for '{search_term}', {len(suggestions)} spelling suggestion(s)",
            file=sys.stderr
        )
        return NoMatch(search_term=search_term, suggestions=suggestions)

    def lookup(self, search_term: str) -> Union[LookupResult, NoMatch]:
        """
        TOOL 1: Brand & ingredient lookup.

        Buckets the IN/BN/SCD/SBD concepts related to the RxCUI into ingredients,
        brands and formulations. Brands and formulations keep API order and are
        truncated after de-duplication.
        """
        rxcui = self._resolve(search_term)
        if isinstance(rxcui, NoMatch):
            return rxcui

        groups = self.api.related_concepts(rxcui, ["IN", "BN", "SCD", "SBD"])

        ingredients = []
        brands = []
        formulations = []
        for group in groups:
            if group.tty == "IN":
                ingredients.extend(group.names)
            elif group.tty == "BN":
                brands.extend(group.names)
            elif group.tty in FORMULATION_TTYS:
                formulations.extend(group.names)

        return LookupResult(
            search_term=search_term,
            rxcui=rxcui,
            ingredients=unique(ingredients),
            brands=unique(brands)[:self.brand_limit],
            formulations=unique(formulations)[:self.formulation_limit],
        )

    def _brand_names(self, ingredient_rxcui: str) -> List[str]:
        names = []
        for group in self.api.related_concepts(ingredient_rxcui, ["BN"]):
            if group.tty == "BN":
                names.extend(group.names)
        return names

    def alternative_brands(self, search_term: str) -> Union[AlternativeBrandsResult, NoMatch]:
        """
        TOOL 2: Alternative brand finder.

        Step 1: get the ingredient(s) (IN) of the RxCUI
        Step 2: for each distinct ingredient RxCUI, get all of its brand names (BN)
        Step 3: remove the searched brand itself, compared on the normalized,
                lowercased name rather than on the RxCUI
        """
        rxcui = self._resolve(search_term)
        if isinstance(rxcui, NoMatch):
            return rxcui

        ingredients = []
        ingredient_rxcuis = []
        for group in self.api.related_concepts(rxcui, ["IN"]):
            if group.tty != "IN":
                continue
            for concept in group.concepts:
                if not concept.name or not concept.rxcui:
                    continue
                ingredients.append(concept.name)
                ingredient_rxcuis.append(concept.rxcui)

        ingredient_rxcuis = unique(ingredient_rxcuis)

        if self.alternative_workers > 1 and len(ingredient_rxcuis) > 1:
            # map() yields in submission order, so the merge order matches the sequential path
            with ThreadPoolExecutor(max_workers=self.alternative_workers) as executor:
                per_ingredient = list(executor.map(self._brand_names, ingredient_rxcuis))
        else:
            per_ingredient = [self._brand_names(ing_rxcui) for ing_rxcui in ingredient_rxcuis]

        search_norm = normalize_search_term(search_term).lower()
        brands = [
            name
            for names in per_ingredient
            for name in names
            if normalize_search_term(name).lower() != search_norm
        ]

        return AlternativeBrandsResult(
            search_term=search_term,
            rxcui=rxcui,
            ingredients=unique(ingredients),
            brands=unique(brands)[:self.alternative_limit],
        )

    def get_primary_ingredient(self, rxcui: str) -> Optional[str]:
        """
        Get the primary active ingredient (first IN concept) for a medication.
        """
        for group in self.api.related_concepts(rxcui, ["IN"]):
            if group.tty == "IN" and group.concepts:
                return group.concepts[0].name
        return None

    def get_advanced_safety(self, rxcui: str) -> Dict[str, List[str]]:
        """
        Interactions, warnings and contraindications from RxNorm relationships.

        has_warning and has_precaution both feed the warnings bucket; each bucket
        is de-duplicated after merging.

        Args:
            rxcui: RxCUI of the searched medication

        Returns:
            Dictionary with 'warnings', 'interactions' and 'contraindications' keys
        """
        safety = {
            "warnings": [],
            "interactions": [],
            "contraindications": [],
        }
        if not rxcui:
            return safety

        for rela, bucket in SAFETY_RELATIONS.items():
            for group in self.api.related_by_relation(rxcui, rela):
                safety[bucket].extend(group.names)

        return {bucket: unique(names) for bucket, names in safety.items()}

    def safety(self, search_term: str) -> Union[SafetyResult, NoMatch]:
        """
        TOOL 3: Side-effects & safety checker.
        """
        rxcui = self._resolve(search_term)
        if isinstance(rxcui, NoMatch):
            return rxcui

        ingredient = self.get_primary_ingredient(rxcui)
        side_effects = self.api.adverse_reaction_classes(ingredient)
        advanced = self.get_advanced_safety(rxcui)

        return SafetyResult(
            search_term=search_term,
            rxcui=rxcui,
            ingredient=ingredient,
            side_effects=unique(side_effects),
            warnings=advanced["warnings"],
            interactions=advanced["interactions"],
            contraindications=advanced["contraindications"],
        )

    def run(self, tool: str, search_term: str) -> Union[LookupResult, AlternativeBrandsResult, SafetyResult, NoMatch]:
        """
        Run a tool by name ('lookup', 'altbrands' or 'safety').
        """
        handlers = {
            "lookup": self.lookup,
            "altbrands": self.alternative_brands,
            "safety": self.safety,
        }
        tool = TOOL_ALIASES.get(tool, tool)
        if tool not in handlers:
            raise ValueError(f"Unknown tool '{tool}'")
        return handlers[tool](search_term)
