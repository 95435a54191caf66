"""Shop-floor vocabulary used by the fuzzy matcher.

This is the **single source of truth** for:
- Manufacturing synonyms and abbreviations (bidirectional)
- Station-code area families (leading letter of a station code)

Usage:
    from qa_matrix.domain.vocabulary import expand_synonyms, area_family

    expand_synonyms(["lh", "bolt"])  # -> {"lh", "left", "lhf", "lhr", "bolt", "bolts", ...}
    area_family("C80")               # -> "chassis"
"""

from typing import Dict, Iterable, List, Optional, Set


# ══════════════════════════════════════════════════════════════════════════
# SYNONYMS (key ↔ variants, matched in both directions)
# ══════════════════════════════════════════════════════════════════════════

SYNONYMS: Dict[str, List[str]] = {
    "brake": ["braking", "brk"],
    "seat": ["seating", "st"],
    "belt": ["seatbelt", "seat belt"],
    "window": ["windshield", "glass", "pane"],
    "wiper": ["wipers"],
    "lock": ["locked", "locking", "unlocked"],
    "bolt": ["bolts", "screw", "fastener"],
    "missing": ["absent", "not present", "shortage"],
    "damage": ["damaged", "broken", "crack", "cracked", "torn"],
    "noise": ["noisy", "vibration", "rattle", "squeak"],
    "leak": ["leaking", "leakage"],
    "error": ["wrong", "incorrect", "mismatch"],
    "spec": ["specification", "specifications"],
    "assy": ["assembly", "asy"],
    "insecure": ["loose", "not secure", "unsecure"],
    "malfunction": ["not working", "failure", "defective", "faulty"],
    "torque": ["tightening", "tq"],
    "fuel": ["petrol", "diesel", "gasoline"],
    "battery": ["batt"],
    "lamp": ["light", "bulb", "headlamp", "headlight"],
    "paint": ["painting", "painted", "colour", "color"],
    "wheel": ["tyre", "tire", "rim"],
    "connector": ["connect", "connection", "plug"],
    "harness": ["wiring", "wire", "cable"],
    "spring": ["coil"],
    "cap": ["cover"],
    "front": ["fr", "frt"],
    "rear": ["rr"],
    "left": ["lh", "lhf", "lhr"],
    "right": ["rh", "rhf", "rhr"],
}

# variant → keys listing it (a variant may appear under several keys)
_REVERSE: Dict[str, List[str]] = {}
for _key, _variants in SYNONYMS.items():
    for _variant in _variants:
        _REVERSE.setdefault(_variant, []).append(_key)


# ══════════════════════════════════════════════════════════════════════════
# STATION AREA FAMILIES
# ══════════════════════════════════════════════════════════════════════════

AREA_FAMILIES: Dict[str, str] = {
    "t": "trim",
    "c": "chassis",
    "f": "final",
    "p": "paint",
}


def expand_synonyms(tokens: Iterable[str]) -> Set[str]:
    """Return *tokens* plus every synonym reachable in one hop.

    A key token adds its variants; a variant token adds its key and all of
    that key's sibling variants.
    """
    tokens = list(tokens)
    expanded: Set[str] = set(tokens)
    for token in tokens:
        expanded.update(SYNONYMS.get(token, ()))
        for key in _REVERSE.get(token, ()):
            expanded.add(key)
            expanded.update(SYNONYMS[key])
    return expanded


def area_family(station: str) -> Optional[str]:
    """Area family implied by the leading letter of a station code, if any."""
    code = station.strip().lower()
    if not code:
        return None
    return AREA_FAMILIES.get(code[0])
