import requests
import json
import argparse
import re
import string
import sys
import threading
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Union, List, Iterable
from urllib.parse import quote


ASCII_WHITESPACE = re.compile(r"[ \t\n\r\x0b\x0c]+")


def normalize_search_term(term: Optional[str]) -> str:
    """
    Reduce a free-text medication query to a bare drug name for RxNorm lookups.

    - Cuts the string at the first digit, dropping strengths like "25", "25mg"
    - Keeps only the first word, dropping "tablet", "mg" etc.

    Examples:
        "Tylenol 500mg tablet" -> "Tylenol"
        "  ibuprofen  "        -> "ibuprofen"
        "123"                  -> ""

    Args:
        term: Raw search text (may be None)

    Returns:
        The normalized name, or an empty string if nothing is left
    """
    if not term:
        return ""

    term = term.strip(string.whitespace)

    # ASCII digits and whitespace only; other Unicode digits or spaces stay in the name
    for i, char in enumerate(term):
        if char in string.digits:
            term = term[:i]
            break

    parts = ASCII_WHITESPACE.split(term)
    if parts:
        term = parts[0]

    return term.strip(string.whitespace)


@dataclass(frozen=True)
class Concept:
    """An RxNorm concept as returned by the related-concepts endpoint."""
    name: str
    rxcui: str
    tty: str


@dataclass
class ConceptGroup:
    """Concepts of one term type (tty), in API response order."""
    tty: str
    concepts: List[Concept] = field(default_factory=list)

    @property
    def names(self) -> List[str]:
        return [c.name for c in self.concepts]


def _dig(data: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing or not a dict."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


class RxNavAPI:
    """
    A Python client for the RxNorm / RxClass REST services hosted on RxNav.

    Every call is a single GET with a fixed timeout and no retry. Network errors,
    timeouts, error statuses, non-JSON bodies and unexpected payload shapes are
    reported on stderr and collapse to an empty result; nothing is raised to the caller.
    """

    BASE_URL = "https://rxnav.nlm.nih.gov/REST"
    DEFAULT_TIMEOUT = 10

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: Optional[str] = None
    ):
        self._session = session
        self._local = threading.local()
        self.timeout = timeout
        self.base_url = (base_url or self.BASE_URL).rstrip("/")

    @property
    def session(self) -> requests.Session:
        """
        The HTTP session for the calling thread.

        An injected session is shared by every thread. Without one, each thread
        gets its own requests.Session, created on first use.
        """
        if self._session is not None:
            return self._session

        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
        return session

    def _make_request(
        self,
        endpoint: str,
        params: Optional[Union[Dict[str, Any], str]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Internal helper method to make a GET request to RxNav.

        Args:
            endpoint: The API endpoint to call (e.g., "/rxcui.json").
            params: Query parameters, either a dict or an already encoded query string.

        Returns:
            The decoded JSON object, or None if the request failed in any way.
        """
        url = f"{self.base_url}{endpoint}"

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()

            if not response.content:
                return None

            data = response.json()
        except requests.exceptions.HTTPError as http_err:
            print(f"HTTP error occurred: {http_err}", file=sys.stderr)
            return None
        except requests.exceptions.Timeout as timeout_err:
            print(f"Timeout error occurred: {timeout_err}", file=sys.stderr)
            return None
        except requests.exceptions.RequestException as req_err:
            print(f"Request to {url} failed: {req_err}", file=sys.stderr)
            return None
        except ValueError:
            # Covers json.JSONDecodeError and requests' own JSONDecodeError
            print(f"Failed to decode JSON response from {url}", file=sys.stderr)
            return None

        if not isinstance(data, dict):
            print(f"Unexpected JSON payload from {url}", file=sys.stderr)
            return None

        return data

    def _decode_concept_groups(self, data: Optional[Dict[str, Any]]) -> List[ConceptGroup]:
        raw_groups = _dig(data, "relatedGroup", "conceptGroup")
        if not isinstance(raw_groups, list):
            return []

        groups = []
        for raw_group in raw_groups:
            if not isinstance(raw_group, dict):
                continue

            tty = raw_group.get("tty") or ""
            concepts = []
            props = raw_group.get("conceptProperties")
            if isinstance(props, list):
                for prop in props:
                    if not isinstance(prop, dict):
                        continue
                    name = str(prop.get("name") or "").strip()
                    if not name:
                        continue
                    concepts.append(Concept(
                        name=name,
                        rxcui=str(prop.get("rxcui") or "").strip(),
                        tty=str(prop.get("tty") or tty),
                    ))

            groups.append(ConceptGroup(tty=tty, concepts=concepts))

        return groups

    def lookup_rxcui(self, name: str) -> Optional[str]:
        """
        Get the RxCUI for a drug name.

        The name is normalized first; if nothing is left no request is made.

        Returns:
            The first RxCUI of the identifier group, or None
        """
        normalized = normalize_search_term(name)
        if not normalized:
            return None

        data = self._make_request("/rxcui.json", params={"name": normalized})
        ids = _dig(data, "idGroup", "rxnormId")
        if isinstance(ids, list) and ids:
            first = ids[0]
            if isinstance(first, int) and not isinstance(first, bool):
                return str(first)
            if isinstance(first, str) and first.strip():
                return first.strip()

        return None

    def spelling_suggestions(self, term: str) -> List[str]:
        """
        RxNorm spelling suggestions for a (probably misspelled) drug name.
        """
        normalized = normalize_search_term(term)
        if not normalized:
            return []

        data = self._make_request("/spellingsuggestions.json", params={"name": normalized})
        suggestions = _dig(data, "suggestionGroup", "suggestionList", "suggestion")
        if isinstance(suggestions, list):
            return [str(s) for s in suggestions if s]

        return []

    def related_concepts(self, rxcui: str, ttys: Iterable[str]) -> List[ConceptGroup]:
        """
        Get related concepts by term type (e.g., IN, BN, SCD, SBD).

        The tty filter is sent as ``tty=IN+BN``: each value percent-encoded,
        joined by a literal plus.
        """
        ttys = [t for t in (ttys or []) if t]
        if not rxcui or not ttys:
            return []

        tty_param = "+".join(quote(t, safe="") for t in ttys)
        data = self._make_request(
            f"/rxcui/{quote(str(rxcui), safe='')}/related.json",
            params=f"tty={tty_param}"
        )
        return self._decode_concept_groups(data)

    def related_by_relation(self, rxcui: str, rela: str) -> List[ConceptGroup]:
        """
        Get concepts linked to an RxCUI through a named relation (e.g., interacts_with).
        """
        if not rxcui or not rela:
            return []

        data = self._make_request(
            f"/rxcui/{quote(str(rxcui), safe='')}/related.json",
            params={"rela": rela}
        )
        return self._decode_concept_groups(data)

    def adverse_reaction_classes(self, ingredient_name: Optional[str]) -> List[str]:
        """
        Side-effect classes for an ingredient from RxClass (Adverse Reaction Class, ARC).

        Returns:
            Distinct class names in response order
        """
        if not ingredient_name:
            return []

        data = self._make_request(
            "/rxclass/class/byDrugName.json",
            params={"drugName": ingredient_name, "classTypes": "ARC"}
        )
        infos = _dig(data, "rxclassDrugInfoList", "rxclassDrugInfo")
        if not isinstance(infos, list):
            return []

        effects = []
        for info in infos:
            class_name = _dig(info, "rxclassMinConceptItem", "className")
            if not isinstance(class_name, str) or not class_name.strip():
                continue
            class_name = class_name.strip()
            if class_name not in effects:
                effects.append(class_name)

        return effects


def pretty_print_json(data: Any):
    """Helper function to print JSON data in an indented, readable format."""
    print(json.dumps(data, indent=2))


def _groups_as_dict(groups: List[ConceptGroup]) -> Dict[str, List[Dict[str, str]]]:
    result = {}
    for group in groups:
        result.setdefault(group.tty, []).extend(
            {"name": c.name, "rxcui": c.rxcui} for c in group.concepts
        )
    return result


def main():
    """
    Main function to run the command-line interface for the RxNav client.
    """
    parser = argparse.ArgumentParser(
        description="A command-line client for the RxNorm / RxClass endpoints used by the medication tools.",
        epilog="Example: python rxnav_client.py related 161 --tty IN BN"
    )
    parser.add_argument("--timeout", type=float, default=RxNavAPI.DEFAULT_TIMEOUT, help="Per-request timeout in seconds.")
    subparsers = parser.add_subparsers(dest="command", required=True, help="The API command to run")

    rxcui_parser = subparsers.add_parser("rxcui", help="Resolve a drug name to its RxCUI.")
    rxcui_parser.add_argument("name", type=str, help="Drug name, e.g. 'Tylenol 500mg'.")

    suggest_parser = subparsers.add_parser("suggest", help="Spelling suggestions for a drug name.")
    suggest_parser.add_argument("name", type=str, help="Possibly misspelled drug name.")

    related_parser = subparsers.add_parser("related", help="Related concepts of an RxCUI by term type.")
    related_parser.add_argument("rxcui", type=str, help="The RxCUI.")
    related_parser.add_argument("--tty", nargs="+", default=["IN", "BN", "SCD", "SBD"], help="Term types to include.")

    rela_parser = subparsers.add_parser("rela", help="Related concepts of an RxCUI by relation.")
    rela_parser.add_argument("rxcui", type=str, help="The RxCUI.")
    rela_parser.add_argument("rela", type=str, help="Relation name, e.g. 'interacts_with'.")

    arc_parser = subparsers.add_parser("adverse-reactions", help="RxClass adverse reaction classes for an ingredient.")
    arc_parser.add_argument("ingredient", type=str, help="Ingredient name, e.g. 'Acetaminophen'.")

    args = parser.parse_args()
    api = RxNavAPI(timeout=args.timeout)

    if args.command == "rxcui":
        rxcui = api.lookup_rxcui(args.name)
        if rxcui is None:
            print(f"No RxCUI found for '{normalize_search_term(args.name)}'.", file=sys.stderr)
            sys.exit(1)
        print(rxcui)

    elif args.command == "suggest":
        pretty_print_json(api.spelling_suggestions(args.name))

    elif args.command == "related":
        pretty_print_json(_groups_as_dict(api.related_concepts(args.rxcui, args.tty)))

    elif args.command == "rela":
        pretty_print_json(_groups_as_dict(api.related_by_relation(args.rxcui, args.rela)))

    elif args.command == "adverse-reactions":
        pretty_print_json(api.adverse_reaction_classes(args.ingredient))


if __name__ == "__main__":
    main()
